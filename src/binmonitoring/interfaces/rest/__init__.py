from .bin_controller import BinController
from .simulation_controller import SimulationController

__all__ = ['BinController', 'SimulationController']
