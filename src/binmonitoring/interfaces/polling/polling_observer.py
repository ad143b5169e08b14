import logging
from typing import Callable, List, Optional

import requests

from src.binmonitoring.domain.exceptions import StorageError
from src.binmonitoring.domain.model.events import DomainEvent
from src.binmonitoring.domain.services import StateSnapshot, diff_snapshots
from src.shared.infrastructure.workers import BackgroundWorker

logger = logging.getLogger(__name__)


class PollingObserver:
    """
    Poll strategy: synthesizes push-style events from periodic snapshots

    Each poll cycle:
    1. Fetch the simulation config
    2. If the simulation is running, trigger one tick (no server timer
       exists in this mode)
    3. Fetch the bin list
    4. Diff against the previous snapshot and deliver the resulting events
    """

    def __init__(self, source, on_event: Callable[[DomainEvent], None]):
        """
        Args:
            source: ServiceStateSource or HttpStateSource
            on_event: Called with every synthesized event
        """
        self.source = source
        self.on_event = on_event
        self.last_snapshot: Optional[StateSnapshot] = None
        self.connected = True

    def poll_once(self) -> List[DomainEvent]:
        """
        Run one poll cycle

        Returns:
            The events delivered during this cycle (empty on failure)
        """
        try:
            config = self.source.fetch_config()

            if config.is_running:
                self.source.trigger_tick()

            current = StateSnapshot(config=config, bins=self.source.fetch_bins())

        except (requests.RequestException, StorageError, ValueError) as e:
            logger.error(f"Polling error: {e}")
            self.connected = False
            return []

        self.connected = True
        events = diff_snapshots(self.last_snapshot, current)
        self.last_snapshot = current

        for event in events:
            self.on_event(event)

        return events


class PollingWorker(BackgroundWorker):
    """
    Background worker that runs a PollingObserver at a fixed cadence
    """

    def __init__(self, observer: PollingObserver, interval_seconds: float):
        super().__init__('polling-observer', interval_seconds)
        self.observer = observer

    def start(self):
        # Initial poll so the observer has a baseline immediately
        self.observer.poll_once()
        super().start()

    def do_work(self):
        self.observer.poll_once()
