import math
from dataclasses import dataclass
from enum import Enum

from .domain_event import DomainEvent


class AlertSeverity(Enum):
    WARNING = "warning"
    ALERT = "alert"


@dataclass
class AlertEvent(DomainEvent):
    """
    Domain Event: Alert

    Emitted when a bin's fill level crosses its alert threshold upward.
    Severity is ALERT only once the bin is completely full.
    """

    event_type = 'alert'

    bin_id: str
    message: str
    severity: AlertSeverity

    @staticmethod
    def for_bin(bin_id: str, bin_name: str, fill_level: float) -> 'AlertEvent':
        """
        Factory method: build the human-readable alert for a bin

        Args:
            bin_id: Bin identifier
            bin_name: Display name used in the message
            fill_level: Fill level that triggered the alert
        """
        severity = AlertSeverity.ALERT if fill_level >= 100 else AlertSeverity.WARNING
        return AlertEvent(
            bin_id=bin_id,
            message=(
                f"Dustbin {bin_name} is {math.floor(fill_level + 0.5)}% full "
                f"and requires attention!"
            ),
            severity=severity
        )

    def to_dict(self) -> dict:
        return {
            'binId': self.bin_id,
            'message': self.message,
            'severity': self.severity.value
        }
