from .domain_event import DomainEvent
from .bin_update_event import BinUpdateEvent
from .simulation_status_event import SimulationStatusEvent
from .alert_event import AlertEvent, AlertSeverity

__all__ = [
    'DomainEvent',
    'BinUpdateEvent',
    'SimulationStatusEvent',
    'AlertEvent',
    'AlertSeverity'
]
