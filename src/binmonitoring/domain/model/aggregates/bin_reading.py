from dataclasses import dataclass
from datetime import datetime

from .bin import BinStatus


@dataclass(frozen=True)
class BinReading:
    """
    Bin Reading - immutable historical sample of a bin's fill level
    """

    id: str
    bin_id: str
    fill_level: float
    status: BinStatus
    timestamp: datetime

    def to_dict(self) -> dict:
        """Serialize to the REST representation"""
        return {
            'id': self.id,
            'binId': self.bin_id,
            'fillLevel': self.fill_level,
            'status': self.status.value,
            'timestamp': self.timestamp.isoformat()
        }
