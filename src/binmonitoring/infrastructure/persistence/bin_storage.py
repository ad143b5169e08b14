from abc import ABC, abstractmethod
from typing import List, Optional

from src.binmonitoring.domain.model.aggregates import (
    Bin, BinReading, BinStatus, SimulationConfig
)


class BinStorage(ABC):
    """
    Storage capability for bins, their readings and the simulation config

    The engine, scheduler and controllers depend only on this interface.
    Implementations raise StorageError on backend failures and return None
    (never raise) for unknown bin ids.
    """

    # Maximum readings retained per bin, oldest evicted first
    readings_per_bin: int = 50

    # ---- Bins ----

    @abstractmethod
    def get_bin(self, bin_id: str) -> Optional[Bin]:
        """Find a bin by id, or None"""

    @abstractmethod
    def get_all_bins(self) -> List[Bin]:
        """All bins in a stable creation order"""

    @abstractmethod
    def create_bin(self, name: str, location: str, fill_level: float = 0.0,
                   status: BinStatus = BinStatus.NORMAL,
                   alert_threshold: Optional[float] = None,
                   is_active: bool = True) -> Bin:
        """Create a bin with a fresh id and timestamps"""

    @abstractmethod
    def update_bin(self, bin_id: str, **changes) -> Optional[Bin]:
        """
        Merge changes into a bin and refresh updated_at

        Returns:
            The updated bin, or None if the id is unknown
        """

    # ---- Readings ----

    @abstractmethod
    def add_reading(self, bin_id: str, fill_level: float,
                    status: BinStatus) -> BinReading:
        """
        Append a reading stamped now, evicting the oldest beyond the cap

        Raises:
            StorageError: If no bin with this id exists
        """

    @abstractmethod
    def get_bin_readings(self, bin_id: str, limit: int = 20) -> List[BinReading]:
        """Latest `limit` readings ordered oldest→newest"""

    # ---- Simulation config ----

    @abstractmethod
    def get_simulation_config(self) -> SimulationConfig:
        """The global simulation config"""

    @abstractmethod
    def update_simulation_config(self, **changes) -> SimulationConfig:
        """Merge changes into the global config and return the result"""
