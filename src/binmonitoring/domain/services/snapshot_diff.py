"""
Differential polling: synthesize observer events from two state snapshots.

Used when no push channel exists. The alert rule here deliberately uses a
fixed 80% crossing instead of the configured threshold.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from src.binmonitoring.domain.model.aggregates import Bin, SimulationConfig
from src.binmonitoring.domain.model.events import (
    AlertEvent,
    BinUpdateEvent,
    DomainEvent,
    SimulationStatusEvent
)
from .fill_simulation import crossed_threshold

POLL_ALERT_LEVEL = 80


@dataclass
class StateSnapshot:
    """Config and bin list as seen by an observer at one poll"""

    config: SimulationConfig
    bins: List[Bin] = field(default_factory=list)


def diff_snapshots(previous: Optional[StateSnapshot],
                   current: StateSnapshot) -> List[DomainEvent]:
    """
    Compute the events an observer would have received between two polls

    Rules:
    - simulationStatus when isRunning changed (always on the first poll)
    - binUpdate for every bin that is new or whose fillLevel/status changed
    - alert when a previously known bin crossed 80% upward

    Bin events are only produced once a previous bin list exists.

    Args:
        previous: Last snapshot seen, or None on the first poll
        current: Freshly fetched snapshot

    Returns:
        Events in delivery order
    """
    events: List[DomainEvent] = []

    if previous is None or previous.config.is_running != current.config.is_running:
        events.append(SimulationStatusEvent(config=current.config))

    if previous is None:
        return events

    known = {b.id: b for b in previous.bins}

    for dustbin in current.bins:
        old = known.get(dustbin.id)

        if old is not None and old.fill_level == dustbin.fill_level and old.status == dustbin.status:
            continue

        events.append(BinUpdateEvent.from_bin(dustbin))

        if old is not None and crossed_threshold(old.fill_level, dustbin.fill_level, POLL_ALERT_LEVEL):
            events.append(
                AlertEvent.for_bin(dustbin.id, dustbin.name, dustbin.fill_level)
            )

    return events
