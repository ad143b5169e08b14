import logging
from typing import List, Optional

from config.simulation_config import SimulationSettings
from src.binmonitoring.domain.exceptions import StorageError, ValidationError
from src.binmonitoring.domain.model.aggregates import (
    Bin, BinReading, SimulationConfig
)
from src.binmonitoring.domain.services import ReadingStatistics
from src.binmonitoring.infrastructure.persistence import BinStorage

logger = logging.getLogger(__name__)


class BinService:
    """
    Application Service for bin queries and bin creation

    Responsibilities:
    - Serve bins, readings and the simulation config to the REST layer
    - Fall back to the last successful read when storage is unavailable
    - Validate and create new bins
    - Seed the default bin on an empty store
    """

    def __init__(self, storage: BinStorage):
        """
        Initialize service with dependencies

        Args:
            storage: Bin storage backend
        """
        self.storage = storage
        self._cached_bins: Optional[List[Bin]] = None
        self._cached_config: Optional[SimulationConfig] = None

    def get_all_bins(self) -> List[Bin]:
        """
        Get all bins, serving the last known list if storage fails

        Raises:
            StorageError: If storage fails and nothing was read before
        """
        try:
            bins = self.storage.get_all_bins()
            self._cached_bins = bins
            return bins
        except StorageError:
            if self._cached_bins is None:
                raise
            logger.warning("Storage unavailable, serving cached bin list")
            return self._cached_bins

    def get_bin(self, bin_id: str) -> Optional[Bin]:
        """
        Get a bin by id

        Returns:
            Bin aggregate or None if not found
        """
        try:
            return self.storage.get_bin(bin_id)
        except StorageError:
            if self._cached_bins is None:
                raise
            logger.warning(f"Storage unavailable, serving cached bin {bin_id}")
            return next((b for b in self._cached_bins if b.id == bin_id), None)

    def get_simulation_config(self) -> SimulationConfig:
        """Get the simulation config, serving the last known one if storage fails"""
        try:
            config = self.storage.get_simulation_config()
            self._cached_config = config
            return config
        except StorageError:
            if self._cached_config is None:
                raise
            logger.warning("Storage unavailable, serving cached simulation config")
            return self._cached_config

    def get_readings(self, bin_id: str,
                     limit: int = SimulationSettings.DEFAULT_READINGS_LIMIT
                     ) -> Optional[List[BinReading]]:
        """
        Get the latest readings of a bin, oldest first

        Returns:
            List of readings, or None if the bin does not exist
        """
        if self.get_bin(bin_id) is None:
            return None
        return self.storage.get_bin_readings(bin_id, limit)

    def get_statistics(self, bin_id: str) -> Optional[ReadingStatistics]:
        """
        Summarize the full retained history of a bin

        Returns:
            ReadingStatistics, or None if the bin does not exist
        """
        readings = self.get_readings(bin_id, self.storage.readings_per_bin)
        if readings is None:
            return None
        return ReadingStatistics.from_readings(readings)

    def create_bin(self, payload) -> Bin:
        """
        Validate a creation request and persist the new bin

        Request Body (JSON):
        {
            "name": "Main Lobby",
            "location": "Building A - Ground Floor",
            "alertThreshold": 85,      (optional)
            "isActive": true           (optional)
        }

        Raises:
            ValidationError: If the payload is malformed
        """
        if not isinstance(payload, dict):
            raise ValidationError("Bin payload must be a JSON object")

        missing_fields = [f for f in ('name', 'location') if not payload.get(f)]
        if missing_fields:
            raise ValidationError(f"Missing required fields: {missing_fields}")

        for field_name in ('name', 'location'):
            if not isinstance(payload[field_name], str):
                raise ValidationError(f"{field_name} must be a string")

        alert_threshold = payload.get('alertThreshold')
        if alert_threshold is not None:
            if isinstance(alert_threshold, bool) or not isinstance(alert_threshold, (int, float)):
                raise ValidationError("alertThreshold must be a number")
            if not (0 <= alert_threshold <= 100):
                raise ValidationError("alertThreshold must be between 0 and 100")

        is_active = payload.get('isActive', True)
        if not isinstance(is_active, bool):
            raise ValidationError("isActive must be a boolean")

        dustbin = self.storage.create_bin(
            name=payload['name'],
            location=payload['location'],
            alert_threshold=alert_threshold,
            is_active=is_active
        )
        logger.info(f"Bin registered: {dustbin}")
        return dustbin

    def seed_default_bin(self) -> Optional[Bin]:
        """Create the default bin if storage holds none"""
        if self.storage.get_all_bins():
            return None

        dustbin = self.storage.create_bin(
            name=SimulationSettings.DEFAULT_BIN_NAME,
            location=SimulationSettings.DEFAULT_BIN_LOCATION,
            is_active=True
        )
        logger.info(f"Default bin seeded: {dustbin}")
        return dustbin
