from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Optional

from config.simulation_config import SimulationSettings
from src.binmonitoring.domain.exceptions import ValidationError


class FillPattern(Enum):
    RANDOM = "random"
    LINEAR = "linear"
    REALISTIC = "realistic"


@dataclass(frozen=True)
class SimulationConfig:
    """
    Simulation Config - the single global simulation record

    Created once with defaults and updated in place by partial merges.
    """

    pattern: FillPattern = FillPattern(SimulationSettings.DEFAULT_PATTERN)
    update_interval: float = SimulationSettings.DEFAULT_UPDATE_INTERVAL
    alert_threshold: float = SimulationSettings.DEFAULT_ALERT_THRESHOLD
    is_running: bool = False

    def merge(self, **changes) -> 'SimulationConfig':
        """
        Return a copy with the given fields replaced

        Raises:
            ValidationError: If a field name is unknown
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ValidationError(f"Unknown config fields: {unknown}")
        return replace(self, **changes)

    @staticmethod
    def from_dict(data: dict) -> 'SimulationConfig':
        """
        Rebuild a config from its REST representation

        Raises:
            ValueError: If required fields are missing or malformed
        """
        try:
            return SimulationConfig(
                pattern=FillPattern(data['pattern']),
                update_interval=data['updateInterval'],
                alert_threshold=data['alertThreshold'],
                is_running=bool(data['isRunning'])
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid simulation config payload: {e}") from e

    def to_dict(self) -> dict:
        """Serialize to the REST / event representation"""
        return {
            'pattern': self.pattern.value,
            'updateInterval': self.update_interval,
            'alertThreshold': self.alert_threshold,
            'isRunning': self.is_running
        }


@dataclass(frozen=True)
class SimulationConfigPatch:
    """
    Validated partial update of the SimulationConfig

    Fields left as None are not part of the patch.
    """

    pattern: Optional[FillPattern] = None
    update_interval: Optional[float] = None
    alert_threshold: Optional[float] = None
    is_running: Optional[bool] = None

    # camelCase request key -> attribute name
    FIELD_NAMES = {
        'pattern': 'pattern',
        'updateInterval': 'update_interval',
        'alertThreshold': 'alert_threshold',
        'isRunning': 'is_running',
    }

    @staticmethod
    def from_request_payload(payload) -> 'SimulationConfigPatch':
        """
        Factory method: Validate a PATCH body field by field

        The whole patch is rejected on the first invalid field, so a caller
        never sees a partially applied configuration.

        Args:
            payload: Parsed JSON body

        Returns:
            SimulationConfigPatch instance

        Raises:
            ValidationError: If the body is not an object, carries unknown
                fields, or any value is of the wrong type or out of range
        """
        if not isinstance(payload, dict):
            raise ValidationError("Configuration patch must be a JSON object")

        unknown = sorted(set(payload) - set(SimulationConfigPatch.FIELD_NAMES))
        if unknown:
            raise ValidationError(f"Unknown configuration fields: {unknown}")

        values = {}

        if 'pattern' in payload:
            try:
                values['pattern'] = FillPattern(payload['pattern'])
            except ValueError:
                raise ValidationError(
                    f"pattern must be one of "
                    f"{[p.value for p in FillPattern]}, got {payload['pattern']!r}"
                )

        if 'updateInterval' in payload:
            values['update_interval'] = _bounded_number(
                'updateInterval',
                payload['updateInterval'],
                SimulationSettings.MIN_UPDATE_INTERVAL,
                SimulationSettings.MAX_UPDATE_INTERVAL
            )

        if 'alertThreshold' in payload:
            values['alert_threshold'] = _bounded_number(
                'alertThreshold',
                payload['alertThreshold'],
                SimulationSettings.MIN_ALERT_THRESHOLD,
                SimulationSettings.MAX_ALERT_THRESHOLD
            )

        if 'isRunning' in payload:
            if not isinstance(payload['isRunning'], bool):
                raise ValidationError("isRunning must be a boolean")
            values['is_running'] = payload['isRunning']

        return SimulationConfigPatch(**values)

    def to_changes(self) -> dict:
        """Fields present in the patch, keyed by attribute name"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


def _bounded_number(name: str, value, minimum: float, maximum: float) -> float:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number")
    if not (minimum <= value <= maximum):
        raise ValidationError(
            f"{name} must be between {minimum} and {maximum}, got {value}"
        )
    return value
