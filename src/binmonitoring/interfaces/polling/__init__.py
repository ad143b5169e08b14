from .polling_observer import PollingObserver, PollingWorker
from .state_sources import HttpStateSource, ServiceStateSource

__all__ = [
    'PollingObserver',
    'PollingWorker',
    'HttpStateSource',
    'ServiceStateSource'
]
