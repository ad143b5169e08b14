from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class BinStatus(Enum):
    NORMAL = "normal"
    WARNING = "warning"
    ALERT = "alert"


@dataclass
class Bin:
    """
    Bin Aggregate - a monitored dustbin and its current fill level

    `status` is a cached derivation of `fill_level` against the effective
    threshold at the time of the last update.
    """

    id: str
    name: str
    location: str
    fill_level: float = 0.0
    status: BinStatus = BinStatus.NORMAL
    alert_threshold: Optional[float] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Validations after initialization"""
        if not self.id:
            raise ValueError("id cannot be empty")

        if not self.name:
            raise ValueError("name cannot be empty")

        if not (0 <= self.fill_level <= 100):
            raise ValueError(
                f"fill_level must be between 0 and 100, got {self.fill_level}"
            )

        if self.alert_threshold is not None and not (0 <= self.alert_threshold <= 100):
            raise ValueError(
                f"alert_threshold must be between 0 and 100, "
                f"got {self.alert_threshold}"
            )

    def effective_threshold(self, global_threshold: float) -> float:
        """
        Threshold in effect for this bin

        Args:
            global_threshold: Threshold from the global SimulationConfig

        Returns:
            The per-bin override if set, else the global threshold
        """
        if self.alert_threshold is not None:
            return self.alert_threshold
        return global_threshold

    @staticmethod
    def from_dict(data: dict) -> 'Bin':
        """
        Rebuild a Bin from its REST representation

        Raises:
            ValueError: If required fields are missing or malformed
        """
        try:
            return Bin(
                id=data['id'],
                name=data['name'],
                location=data['location'],
                fill_level=float(data['fillLevel']),
                status=BinStatus(data['status']),
                alert_threshold=data.get('alertThreshold'),
                is_active=bool(data.get('isActive', True)),
                created_at=_parse_datetime(data['createdAt']),
                updated_at=_parse_datetime(data['updatedAt'])
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid bin payload: {e}") from e

    def to_dict(self) -> dict:
        """Serialize to the REST representation"""
        return {
            'id': self.id,
            'name': self.name,
            'location': self.location,
            'fillLevel': self.fill_level,
            'status': self.status.value,
            'alertThreshold': self.alert_threshold,
            'isActive': self.is_active,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat()
        }

    def __repr__(self) -> str:
        return (
            f"Bin(id={self.id!r}, name={self.name!r}, "
            f"fill={self.fill_level:.1f}%, status={self.status.value})"
        )


def _parse_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace('Z', '+00:00'))

