from .fill_simulation import classify_status, compute_increment
from .snapshot_diff import StateSnapshot, diff_snapshots
from .reading_statistics import ReadingStatistics

__all__ = [
    'classify_status',
    'compute_increment',
    'StateSnapshot',
    'diff_snapshots',
    'ReadingStatistics'
]
