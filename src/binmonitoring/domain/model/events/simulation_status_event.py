from dataclasses import dataclass

from src.binmonitoring.domain.model.aggregates import SimulationConfig
from .domain_event import DomainEvent


@dataclass
class SimulationStatusEvent(DomainEvent):
    """
    Domain Event: Simulation Status

    Emitted whenever the simulation starts, stops, resets or is reconfigured.
    """

    event_type = 'simulationStatus'

    config: SimulationConfig

    @property
    def is_running(self) -> bool:
        return self.config.is_running

    def to_dict(self) -> dict:
        return {
            'isRunning': self.config.is_running,
            'config': self.config.to_dict()
        }
