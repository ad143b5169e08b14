import math
from dataclasses import dataclass
from typing import List, Optional

from src.binmonitoring.domain.model.aggregates import BinReading, BinStatus

# Number of most recent readings used for the time-to-full estimate
RATE_WINDOW = 5
MIN_READINGS_FOR_ESTIMATE = 3

SECONDS_PER_HOUR = 3600


@dataclass
class ReadingStatistics:
    """
    Summary of a bin's retained reading history
    """

    total_updates: int
    average_fill_rate: float
    max_fill_level: float
    alert_count: int
    seconds_to_full: Optional[float]

    @staticmethod
    def from_readings(readings: List[BinReading]) -> 'ReadingStatistics':
        """
        Factory method: compute statistics from readings ordered oldest→newest

        The average fill rate (percentage points per hour) spans the first and
        last retained readings; it is 0 with fewer than two readings or when no
        time elapsed between them. The time-to-full estimate extrapolates the
        fill rate of the last five readings; it is None when fewer than three
        readings exist or the level is not increasing.
        """
        if not readings:
            return ReadingStatistics(
                total_updates=0,
                average_fill_rate=0.0,
                max_fill_level=0.0,
                alert_count=0,
                seconds_to_full=None
            )

        return ReadingStatistics(
            total_updates=len(readings),
            average_fill_rate=_average_fill_rate(readings),
            max_fill_level=max(r.fill_level for r in readings),
            alert_count=sum(1 for r in readings if r.status is BinStatus.ALERT),
            seconds_to_full=_estimate_seconds_to_full(readings)
        )

    def to_dict(self) -> dict:
        return {
            'totalUpdates': self.total_updates,
            'averageFillRate': _round_half_up(self.average_fill_rate, 1),
            'maxFillLevel': _round_half_up(self.max_fill_level),
            'alertCount': self.alert_count,
            'secondsToFull': (
                round(self.seconds_to_full) if self.seconds_to_full is not None else None
            )
        }


def _average_fill_rate(readings: List[BinReading]) -> float:
    if len(readings) < 2:
        return 0.0

    first, last = readings[0], readings[-1]
    hours = (last.timestamp - first.timestamp).total_seconds() / SECONDS_PER_HOUR
    if hours <= 0:
        return 0.0
    return (last.fill_level - first.fill_level) / hours


def _estimate_seconds_to_full(readings: List[BinReading]) -> Optional[float]:
    if len(readings) < MIN_READINGS_FOR_ESTIMATE:
        return None

    recent = readings[-RATE_WINDOW:]
    first, last = recent[0], recent[-1]

    elapsed = (last.timestamp - first.timestamp).total_seconds()
    fill_diff = last.fill_level - first.fill_level

    if fill_diff <= 0 or elapsed <= 0:
        return None

    rate = fill_diff / elapsed
    return (100 - last.fill_level) / rate


def _round_half_up(value: float, digits: int = 0):
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5) / scale
    return int(rounded) if digits == 0 else rounded
