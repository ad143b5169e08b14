from dataclasses import dataclass, field
from datetime import datetime

from src.binmonitoring.domain.model.aggregates import Bin, BinStatus
from .domain_event import DomainEvent


@dataclass
class BinUpdateEvent(DomainEvent):
    """
    Domain Event: Bin Update

    Emitted after a bin's fill level or status has been persisted.

    Payload structure:
    {
        "binId": "1f0c...",
        "fillLevel": 42.0,
        "status": "normal",
        "timestamp": "2025-01-15T10:30:00"
    }
    """

    event_type = 'binUpdate'

    bin_id: str
    fill_level: float
    status: BinStatus
    timestamp: datetime = field(default_factory=datetime.now)

    @staticmethod
    def from_bin(dustbin: Bin) -> 'BinUpdateEvent':
        """Factory method: snapshot the current state of a bin"""
        return BinUpdateEvent(
            bin_id=dustbin.id,
            fill_level=dustbin.fill_level,
            status=dustbin.status
        )

    def to_dict(self) -> dict:
        return {
            'binId': self.bin_id,
            'fillLevel': self.fill_level,
            'status': self.status.value,
            'timestamp': self.timestamp.isoformat()
        }
