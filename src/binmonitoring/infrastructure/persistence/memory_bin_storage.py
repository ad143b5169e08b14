import logging
import threading
import uuid
from collections import deque
from dataclasses import replace
from datetime import datetime
from typing import Deque, Dict, List, Optional

from src.binmonitoring.domain.exceptions import StorageError
from src.binmonitoring.domain.model.aggregates import (
    Bin, BinReading, BinStatus, SimulationConfig
)
from .bin_storage import BinStorage

logger = logging.getLogger(__name__)


class MemoryBinStorage(BinStorage):
    """
    In-memory implementation of BinStorage

    Bins live in an insertion-ordered dict; readings in a bounded deque per
    bin. Returned aggregates are copies, so callers cannot mutate the store.
    """

    def __init__(self, readings_per_bin: int = 50,
                 config: Optional[SimulationConfig] = None):
        self.readings_per_bin = readings_per_bin
        self._bins: Dict[str, Bin] = {}
        self._readings: Dict[str, Deque[BinReading]] = {}
        self._config = config or SimulationConfig()
        self._lock = threading.Lock()

        logger.info(
            f"In-memory bin storage initialized "
            f"(readings per bin: {readings_per_bin})"
        )

    def get_bin(self, bin_id: str) -> Optional[Bin]:
        with self._lock:
            dustbin = self._bins.get(bin_id)
            return replace(dustbin) if dustbin else None

    def get_all_bins(self) -> List[Bin]:
        with self._lock:
            return [replace(b) for b in self._bins.values()]

    def create_bin(self, name: str, location: str, fill_level: float = 0.0,
                   status: BinStatus = BinStatus.NORMAL,
                   alert_threshold: Optional[float] = None,
                   is_active: bool = True) -> Bin:
        now = datetime.now()
        dustbin = Bin(
            id=str(uuid.uuid4()),
            name=name,
            location=location,
            fill_level=fill_level,
            status=status,
            alert_threshold=alert_threshold,
            is_active=is_active,
            created_at=now,
            updated_at=now
        )

        with self._lock:
            self._bins[dustbin.id] = dustbin
            self._readings[dustbin.id] = deque(maxlen=self.readings_per_bin)

        logger.info(f"Bin created: {dustbin}")
        return replace(dustbin)

    def update_bin(self, bin_id: str, **changes) -> Optional[Bin]:
        with self._lock:
            dustbin = self._bins.get(bin_id)
            if dustbin is None:
                logger.debug(f"Bin not found for update: {bin_id}")
                return None

            changes.pop('id', None)
            changes.pop('created_at', None)
            changes.pop('updated_at', None)
            updated = replace(dustbin, **changes, updated_at=datetime.now())
            self._bins[bin_id] = updated
            return replace(updated)

    def add_reading(self, bin_id: str, fill_level: float,
                    status: BinStatus) -> BinReading:
        reading = BinReading(
            id=str(uuid.uuid4()),
            bin_id=bin_id,
            fill_level=fill_level,
            status=status,
            timestamp=datetime.now()
        )

        with self._lock:
            history = self._readings.get(bin_id)
            if history is None:
                raise StorageError(f"Failed to add reading for unknown bin {bin_id}")
            # deque(maxlen) drops the oldest entry on overflow
            history.append(reading)

        logger.debug(f"Reading added: bin={bin_id}, fill={fill_level}%")
        return reading

    def get_bin_readings(self, bin_id: str, limit: int = 20) -> List[BinReading]:
        if limit <= 0:
            return []
        with self._lock:
            history = list(self._readings.get(bin_id, ()))
        return history[-limit:]

    def get_simulation_config(self) -> SimulationConfig:
        with self._lock:
            return self._config

    def update_simulation_config(self, **changes) -> SimulationConfig:
        with self._lock:
            self._config = self._config.merge(**changes)
            logger.info(f"Simulation config updated: {self._config.to_dict()}")
            return self._config
