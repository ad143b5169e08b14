from .bin import Bin, BinStatus
from .bin_reading import BinReading
from .simulation_config import FillPattern, SimulationConfig, SimulationConfigPatch

__all__ = [
    'Bin',
    'BinStatus',
    'BinReading',
    'FillPattern',
    'SimulationConfig',
    'SimulationConfigPatch'
]
