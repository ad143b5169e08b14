import logging
from typing import Callable

from src.shared.infrastructure.workers import BackgroundWorker

logger = logging.getLogger(__name__)


class SimulationTickWorker(BackgroundWorker):
    """
    Interval timer that drives simulation ticks

    One instance represents one timer cadence. The scheduler never restarts
    an instance: it cancels it and creates a new one, and the callback is
    given the firing worker so stale timers can be recognised.
    """

    def __init__(self, interval_seconds: float,
                 on_fire: Callable[['SimulationTickWorker'], None]):
        """
        Initialize worker

        Args:
            interval_seconds: Seconds between ticks
            on_fire: Callback invoked with this worker on every fire
        """
        super().__init__('simulation-tick', interval_seconds)
        self.on_fire = on_fire
        self.fire_count = 0

    def do_work(self):
        self.fire_count += 1
        self.on_fire(self)
