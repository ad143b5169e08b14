from .simulation_engine import SimulationEngine, TickResult
from .simulation_scheduler import SchedulerState, SimulationScheduler
from .bin_service import BinService

__all__ = [
    'SimulationEngine',
    'TickResult',
    'SchedulerState',
    'SimulationScheduler',
    'BinService'
]
