"""
Pure fill-level rules used by the simulation engine.

Nothing here touches storage or emits events, so every rule can be
exercised directly with an injected random source.
"""
import math
import random
from typing import Optional

from src.binmonitoring.domain.model.aggregates import BinStatus, FillPattern

# Width of the warning band below the alert threshold
WARNING_BAND = 10

MAX_FILL_LEVEL = 100.0


def compute_increment(pattern: FillPattern, rng: Optional[random.Random] = None) -> float:
    """
    Draw the fill increment for one bin in one tick

    - random: integer in [2, 9]
    - linear: constant 2
    - realistic: 1.5 plus noise in [-1, 1], never below 0.5

    Args:
        pattern: Increment-generating strategy
        rng: Random source (module-level random when omitted)

    Returns:
        Percentage points to add to the fill level
    """
    rng = rng or random

    if pattern is FillPattern.RANDOM:
        return math.floor(rng.random() * 8) + 2
    if pattern is FillPattern.LINEAR:
        return 2
    if pattern is FillPattern.REALISTIC:
        variation = (rng.random() - 0.5) * 2
        return max(0.5, 1.5 + variation)

    raise ValueError(f"Unknown fill pattern: {pattern!r}")


def classify_status(fill_level: float, threshold: float) -> BinStatus:
    """
    Derive a bin's status from its fill level

    Boundaries belong to the higher-severity bucket.

    Args:
        fill_level: Current fill level (0-100)
        threshold: Effective alert threshold for the bin

    Returns:
        ALERT at or above the threshold, WARNING within 10 points below it,
        NORMAL otherwise
    """
    if fill_level >= threshold:
        return BinStatus.ALERT
    if fill_level >= threshold - WARNING_BAND:
        return BinStatus.WARNING
    return BinStatus.NORMAL


def next_fill_level(fill_level: float, increment: float) -> float:
    """Apply an increment, capped at 100%"""
    return min(MAX_FILL_LEVEL, fill_level + increment)


def crossed_threshold(previous: float, current: float, threshold: float) -> bool:
    """True when the level moved from below the threshold to at/above it"""
    return current >= threshold and previous < threshold
