from .simulation_tick_worker import SimulationTickWorker

__all__ = ['SimulationTickWorker']
