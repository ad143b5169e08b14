import logging
import threading
from enum import Enum
from typing import Callable, Optional

from src.binmonitoring.application.workers import SimulationTickWorker
from src.binmonitoring.domain.model.aggregates import (
    BinStatus, SimulationConfig, SimulationConfigPatch
)
from src.binmonitoring.domain.model.events import BinUpdateEvent, SimulationStatusEvent
from src.binmonitoring.infrastructure.messaging import EventBroadcaster
from src.binmonitoring.infrastructure.persistence import BinStorage
from .simulation_engine import SimulationEngine, TickResult

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"


class SimulationScheduler:
    """
    Owns the simulation lifecycle and the single tick timer

    Responsibilities:
    - start / stop / reset / reconfigure the simulation
    - keep at most one live timer (cancel before create)
    - serialize ticks and control operations with one lock
    - run single ticks on demand for the pull (trigger) mode

    In push mode a SimulationTickWorker fires every updateInterval seconds.
    In pull mode no timer is created and callers drive ticks via trigger().
    """

    def __init__(
            self,
            storage: BinStorage,
            engine: SimulationEngine,
            broadcaster: EventBroadcaster,
            push_mode: bool = True,
            worker_factory: Callable[..., SimulationTickWorker] = SimulationTickWorker
    ):
        """
        Initialize scheduler with dependencies

        Args:
            storage: Bin storage backend
            engine: Engine applying ticks
            broadcaster: Event publisher for observers
            push_mode: Whether the server owns an interval timer
            worker_factory: Builds a timer from (interval_seconds, callback)
        """
        self.storage = storage
        self.engine = engine
        self.broadcaster = broadcaster
        self.push_mode = push_mode
        self.worker_factory = worker_factory

        self._lock = threading.RLock()
        self._worker: Optional[SimulationTickWorker] = None

        logger.info(
            f"Simulation scheduler initialized "
            f"(mode: {'push' if push_mode else 'pull'})"
        )

    # ---- Control operations ----

    def start(self) -> SimulationConfig:
        """
        Start (or restart) the simulation

        Starting while running replaces the timer, resetting its phase.
        """
        with self._lock:
            config = self.storage.update_simulation_config(is_running=True)
            self._replace_timer(config.update_interval)
            logger.info(f"Simulation started: {config.to_dict()}")
            self._publish_status(config)
            return config

    def stop(self) -> SimulationConfig:
        """Stop the simulation and cancel the timer"""
        with self._lock:
            config = self._halt()
            logger.info("Simulation stopped")
            self._publish_status(config)
            return config

    def reset(self) -> SimulationConfig:
        """
        Stop the simulation and empty every bin

        Publishes one simulationStatus followed by one binUpdate per bin.
        """
        with self._lock:
            config = self._halt()

            reset_bins = []
            for dustbin in self.storage.get_all_bins():
                updated = self.storage.update_bin(
                    dustbin.id, fill_level=0.0, status=BinStatus.NORMAL
                )
                if updated is not None:
                    reset_bins.append(updated)

            logger.info(f"Simulation reset: {len(reset_bins)} bins emptied")

            self._publish_status(config)
            for dustbin in reset_bins:
                self.broadcaster.publish(BinUpdateEvent.from_bin(dustbin))

            return config

    def reconfigure(self, payload: dict) -> SimulationConfig:
        """
        Validate and merge a configuration patch

        The patch is validated as a whole before anything is written. When
        running and updateInterval changes, the timer is recreated at the new
        cadence. An isRunning field is applied with start/stop semantics.

        Args:
            payload: PATCH body using camelCase field names

        Returns:
            The merged configuration

        Raises:
            ValidationError: If any field is unknown, mistyped or out of range
        """
        patch = SimulationConfigPatch.from_request_payload(payload)
        changes = patch.to_changes()
        run_change = changes.pop('is_running', None)

        with self._lock:
            previous = self.storage.get_simulation_config()
            config = (
                self.storage.update_simulation_config(**changes)
                if changes else previous
            )

            if run_change is True and not config.is_running:
                config = self.storage.update_simulation_config(is_running=True)
                self._replace_timer(config.update_interval)
            elif run_change is False and config.is_running:
                config = self._halt()
            elif config.is_running and config.update_interval != previous.update_interval:
                logger.info(
                    f"Update interval changed {previous.update_interval}s -> "
                    f"{config.update_interval}s, recreating timer"
                )
                self._replace_timer(config.update_interval)

            self._publish_status(config)
            return config

    def trigger(self) -> TickResult:
        """
        Run exactly one tick now (pull mode)

        Does nothing unless the simulation is running.
        """
        with self._lock:
            result = self.engine.tick()
            if result.stopped:
                self._cancel_timer()
            return result

    # ---- Lifecycle ----

    def restore(self):
        """
        Recreate the timer after a restart if the stored config says the
        simulation is running
        """
        with self._lock:
            config = self.storage.get_simulation_config()
            if config.is_running:
                logger.info("Resuming simulation that was running before restart")
                self._replace_timer(config.update_interval)

    def shutdown(self):
        """Cancel the timer without touching the stored config"""
        with self._lock:
            self._cancel_timer()

    # ---- Introspection ----

    @property
    def state(self) -> SchedulerState:
        if self.storage.get_simulation_config().is_running:
            return SchedulerState.RUNNING
        return SchedulerState.STOPPED

    @property
    def active_timer(self) -> Optional[SimulationTickWorker]:
        return self._worker

    def has_active_timer(self) -> bool:
        worker = self._worker
        return worker is not None and worker.is_running()

    # ---- Internals ----

    def _on_timer_fire(self, worker: SimulationTickWorker):
        """Timer callback: tick unless this timer has been replaced meanwhile"""
        with self._lock:
            if worker is not self._worker or not worker.is_running():
                logger.debug("Ignoring fire from a cancelled timer")
                return

            result = self.engine.tick()
            if result.stopped:
                self._cancel_timer()

    def _halt(self) -> SimulationConfig:
        self._cancel_timer()
        return self.storage.update_simulation_config(is_running=False)

    def _replace_timer(self, interval_seconds: float):
        self._cancel_timer()

        if not self.push_mode:
            return

        worker = self.worker_factory(interval_seconds, self._on_timer_fire)
        self._worker = worker
        worker.start()

    def _cancel_timer(self):
        if self._worker is not None:
            self._worker.stop()
            self._worker = None

    def _publish_status(self, config: SimulationConfig):
        self.broadcaster.publish(SimulationStatusEvent(config=config))
