import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from src.binmonitoring.domain.exceptions import StorageError
from src.binmonitoring.domain.model.events import (
    AlertEvent,
    BinUpdateEvent,
    DomainEvent,
    SimulationStatusEvent
)
from src.binmonitoring.domain.services.fill_simulation import (
    MAX_FILL_LEVEL,
    classify_status,
    compute_increment,
    crossed_threshold,
    next_fill_level
)
from src.binmonitoring.infrastructure.messaging import EventBroadcaster
from src.binmonitoring.infrastructure.persistence import BinStorage

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Outcome of one simulation tick"""

    updated: bool = False
    stopped: bool = False
    events: List[DomainEvent] = field(default_factory=list)


class SimulationEngine:
    """
    Applies one simulation step to every active bin

    Complete flow per bin:
    1. Skip inactive bins
    2. Draw an increment for the configured pattern
    3. Classify the new level against the bin's effective threshold
    4. Persist the bin and append a reading
    5. Publish binUpdate (and alert on an upward threshold crossing)
    6. When a bin is full, stop the simulation and end the tick

    The engine holds no state between ticks besides its random source;
    callers are responsible for serializing calls to tick().
    """

    def __init__(self, storage: BinStorage, broadcaster: EventBroadcaster,
                 rng: Optional[random.Random] = None):
        """
        Initialize engine with dependencies

        Args:
            storage: Bin storage backend
            broadcaster: Event publisher for observers
            rng: Random source for increments (module random if omitted)
        """
        self.storage = storage
        self.broadcaster = broadcaster
        self.rng = rng

    def tick(self) -> TickResult:
        """
        Run one simulation step if the simulation is running

        A StorageError aborts the remainder of the tick; it is logged and
        never raised, so a timer thread calling this keeps running.

        Returns:
            TickResult with the events emitted during the step
        """
        result = TickResult()

        try:
            config = self.storage.get_simulation_config()
            if not config.is_running:
                logger.debug("Tick skipped: simulation is not running")
                return result

            for dustbin in self.storage.get_all_bins():
                if not dustbin.is_active:
                    continue

                threshold = dustbin.effective_threshold(config.alert_threshold)
                increment = compute_increment(config.pattern, self.rng)
                new_level = next_fill_level(dustbin.fill_level, increment)
                status = classify_status(new_level, threshold)

                if self.storage.update_bin(dustbin.id, fill_level=new_level, status=status) is None:
                    logger.warning(f"Bin {dustbin.id} disappeared during tick, skipping")
                    continue
                self.storage.add_reading(dustbin.id, new_level, status)
                result.updated = True

                logger.debug(
                    f"Bin {dustbin.name!r}: {dustbin.fill_level:.1f}% -> "
                    f"{new_level:.1f}% ({status.value})"
                )

                self._emit(result, BinUpdateEvent(
                    bin_id=dustbin.id,
                    fill_level=new_level,
                    status=status
                ))

                if crossed_threshold(dustbin.fill_level, new_level, threshold):
                    alert = AlertEvent.for_bin(dustbin.id, dustbin.name, new_level)
                    logger.warning(f"ALERT ({alert.severity.value}): {alert.message}")
                    self._emit(result, alert)

                if new_level >= MAX_FILL_LEVEL:
                    # Set first so the caller cancels the timer even if the write fails
                    result.stopped = True
                    stopped_config = self.storage.update_simulation_config(is_running=False)
                    logger.info(
                        f"Bin {dustbin.name!r} is full, stopping simulation; "
                        f"remaining bins are not updated this tick"
                    )
                    self._emit(result, SimulationStatusEvent(config=stopped_config))
                    break

        except StorageError as e:
            logger.error(f"Simulation tick aborted by storage failure: {e}")

        return result

    def _emit(self, result: TickResult, event: DomainEvent):
        result.events.append(event)
        self.broadcaster.publish(event)
