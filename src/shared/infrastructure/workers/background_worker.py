import logging
import threading
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class BackgroundWorker(ABC):
    """
    Base class for background workers

    Provides infrastructure for periodic task execution in a separate thread.
    Subclasses implement the do_work() method with their specific logic.

    Features:
    - Runs in daemon thread (won't prevent app shutdown)
    - Configurable interval; the first run happens one interval after start
    - Each start() gets its own stop event, so a stopped loop can never be
      revived by a later start()
    - Exception handling
    """

    def __init__(self, name: str, interval_seconds: float):
        """
        Initialize background worker

        Args:
            name: Worker name (for logging)
            interval_seconds: Seconds between work executions
        """
        self.name = name
        self.interval_seconds = interval_seconds
        self.thread: threading.Thread = None
        self._stop_event = threading.Event()
        self._stop_event.set()

        logger.info(
            f"Background worker '{name}' initialized "
            f"(interval: {interval_seconds}s)"
        )

    @abstractmethod
    def do_work(self):
        """
        Implement this method with the worker's logic

        This method will be called periodically at the configured interval.
        """

    def start(self):
        """Start the background worker"""
        if self.is_running():
            logger.warning(f"Worker '{self.name}' is already running")
            return

        logger.info(f"Starting background worker: {self.name}")
        self._stop_event = threading.Event()

        self.thread = threading.Thread(
            target=self._run_loop,
            args=(self._stop_event,),
            daemon=True,  # Daemon thread won't prevent app shutdown
            name=f"Worker-{self.name}"
        )
        self.thread.start()

        logger.info(f"Worker '{self.name}' started")

    def stop(self, wait: bool = False):
        """
        Stop the background worker

        A run already in progress is allowed to finish.

        Args:
            wait: Join the thread (never when called from the worker itself)
        """
        if not self.is_running():
            logger.debug(f"Worker '{self.name}' is not running")
            return

        logger.info(f"Stopping background worker: {self.name}")
        self._stop_event.set()

        if (wait and self.thread and self.thread.is_alive()
                and self.thread is not threading.current_thread()):
            self.thread.join(timeout=5)

        logger.info(f"Worker '{self.name}' stopped")

    def _run_loop(self, stop_event: threading.Event):
        """Internal loop that executes work periodically"""
        logger.info(f"Worker '{self.name}' loop started")

        # wait() returns True as soon as the event is set, so stop is immediate
        while not stop_event.wait(self.interval_seconds):
            try:
                self.do_work()
            except Exception as e:
                logger.error(
                    f"Error in worker '{self.name}': {e}",
                    exc_info=True
                )

        logger.info(f"Worker '{self.name}' loop ended")

    def is_running(self) -> bool:
        """Check if a worker is running"""
        return not self._stop_event.is_set()
