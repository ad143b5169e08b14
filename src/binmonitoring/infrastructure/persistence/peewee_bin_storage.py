import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from peewee import (
    AutoField, BooleanField, CharField, DateTimeField, FloatField,
    ForeignKeyField, IntegerField, PeeweeException, SQL
)

from src.binmonitoring.domain.exceptions import StorageError
from src.binmonitoring.domain.model.aggregates import (
    Bin, BinReading, BinStatus, FillPattern, SimulationConfig
)
from src.shared.infrastructure.database import BaseModel, database
from .bin_storage import BinStorage

logger = logging.getLogger(__name__)

CONFIG_ROW_ID = 1


class BinModel(BaseModel):
    """
    Peewee ORM model for bins table
    """

    id = CharField(primary_key=True, max_length=36)  # UUID
    name = CharField()
    location = CharField()
    fill_level = FloatField(default=0)
    status = CharField(max_length=16, default=BinStatus.NORMAL.value)
    alert_threshold = FloatField(null=True)
    is_active = BooleanField(default=True)
    created_at = DateTimeField(index=True)
    updated_at = DateTimeField()

    class Meta:
        table_name = 'bins'


class BinReadingModel(BaseModel):
    """
    Peewee ORM model for bin_readings table

    `seq` gives a strict insertion order used for FIFO eviction.
    """

    seq = AutoField()
    reading_id = CharField(max_length=36, unique=True)  # UUID
    bin = ForeignKeyField(BinModel, backref='readings', on_delete='CASCADE')
    fill_level = FloatField()
    status = CharField(max_length=16)
    timestamp = DateTimeField()

    class Meta:
        table_name = 'bin_readings'
        indexes = (
            (('bin', 'seq'), False),
        )


class SimulationConfigModel(BaseModel):
    """
    Peewee ORM model for the single-row simulation_config table
    """

    id = IntegerField(primary_key=True)
    pattern = CharField(max_length=16)
    update_interval = FloatField()
    alert_threshold = FloatField()
    is_running = BooleanField(default=False)

    class Meta:
        table_name = 'simulation_config'


class PeeweeBinStorage(BinStorage):
    """
    Persistent implementation of BinStorage on SQLite

    Every backend error is logged and re-raised as StorageError.
    """

    def __init__(self, readings_per_bin: int = 50,
                 default_config: Optional[SimulationConfig] = None):
        self.readings_per_bin = readings_per_bin
        self._default_config = default_config or SimulationConfig()
        self._ensure_tables_exist()

    def _ensure_tables_exist(self):
        """Create tables and the config row if they don't exist"""
        try:
            database.create_tables(
                [BinModel, BinReadingModel, SimulationConfigModel], safe=True
            )

            if SimulationConfigModel.get_or_none(
                    SimulationConfigModel.id == CONFIG_ROW_ID) is None:
                self._write_config(self._default_config, insert=True)

        except PeeweeException as e:
            logger.error(f"Error preparing bin storage tables: {e}", exc_info=True)
            raise StorageError("Could not initialize bin storage") from e

        logger.info("Bin storage tables verified/created")

    # ---- Bins ----

    def get_bin(self, bin_id: str) -> Optional[Bin]:
        try:
            model = BinModel.get_or_none(BinModel.id == bin_id)
            if model is None:
                logger.debug(f"Bin not found: {bin_id}")
                return None
            return self._to_bin(model)

        except PeeweeException as e:
            logger.error(f"Error finding bin {bin_id}: {e}", exc_info=True)
            raise StorageError(f"Failed to fetch bin {bin_id}") from e

    def get_all_bins(self) -> List[Bin]:
        try:
            models = BinModel.select().order_by(BinModel.created_at, SQL('rowid'))
            return [self._to_bin(model) for model in models]

        except PeeweeException as e:
            logger.error(f"Error finding all bins: {e}", exc_info=True)
            raise StorageError("Failed to fetch bins") from e

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

        try:
            BinModel.create(
                id=dustbin.id,
                name=dustbin.name,
                location=dustbin.location,
                fill_level=dustbin.fill_level,
                status=dustbin.status.value,
                alert_threshold=dustbin.alert_threshold,
                is_active=dustbin.is_active,
                created_at=dustbin.created_at,
                updated_at=dustbin.updated_at
            )
            logger.info(f"Bin saved: {dustbin}")
            return dustbin

        except PeeweeException as e:
            logger.error(f"Error saving bin {name!r}: {e}", exc_info=True)
            raise StorageError("Failed to create bin") from e

    def update_bin(self, bin_id: str, **changes) -> Optional[Bin]:
        current = self.get_bin(bin_id)
        if current is None:
            return None

        changes.pop('id', None)
        changes.pop('created_at', None)
        values = dict(changes, updated_at=datetime.now())

        # replace() re-runs the aggregate validations before anything is written
        updated = replace(current, **values)

        if 'status' in values:
            values['status'] = values['status'].value

        try:
            BinModel.update(**values).where(BinModel.id == bin_id).execute()
            logger.debug(f"Bin updated: {updated}")
            return updated

        except PeeweeException as e:
            logger.error(f"Error updating bin {bin_id}: {e}", exc_info=True)
            raise StorageError(f"Failed to update bin {bin_id}") from e

    # ---- Readings ----

    def add_reading(self, bin_id: str, fill_level: float,
                    status: BinStatus) -> BinReading:
        reading = BinReading(
            id=str(uuid.uuid4()),
            bin_id=bin_id,
            fill_level=fill_level,
            status=status,
            timestamp=datetime.now()
        )

        try:
            with database.atomic():
                BinReadingModel.create(
                    reading_id=reading.id,
                    bin=bin_id,
                    fill_level=reading.fill_level,
                    status=reading.status.value,
                    timestamp=reading.timestamp
                )
                self._evict_old_readings(bin_id)

            logger.debug(f"Reading saved: bin={bin_id}, fill={fill_level}%")
            return reading

        except PeeweeException as e:
            logger.error(f"Error saving reading for bin {bin_id}: {e}", exc_info=True)
            raise StorageError(f"Failed to add reading for bin {bin_id}") from e

    def _evict_old_readings(self, bin_id: str):
        """Delete everything beyond the newest `readings_per_bin` rows"""
        stale = (BinReadingModel
                 .select(BinReadingModel.seq)
                 .where(BinReadingModel.bin == bin_id)
                 .order_by(BinReadingModel.seq.desc())
                 .offset(self.readings_per_bin))

        deleted = (BinReadingModel
                   .delete()
                   .where(BinReadingModel.seq.in_(stale))
                   .execute())

        if deleted:
            logger.debug(f"Evicted {deleted} old readings for bin {bin_id}")

    def get_bin_readings(self, bin_id: str, limit: int = 20) -> List[BinReading]:
        if limit <= 0:
            return []

        try:
            models = (BinReadingModel
                      .select()
                      .where(BinReadingModel.bin == bin_id)
                      .order_by(BinReadingModel.seq.desc())
                      .limit(limit))

            return [self._to_reading(model) for model in reversed(list(models))]

        except PeeweeException as e:
            logger.error(f"Error finding readings for bin {bin_id}: {e}", exc_info=True)
            raise StorageError(f"Failed to fetch readings for bin {bin_id}") from e

    # ---- Simulation config ----

    def get_simulation_config(self) -> SimulationConfig:
        try:
            model = SimulationConfigModel.get_by_id(CONFIG_ROW_ID)
            return SimulationConfig(
                pattern=FillPattern(model.pattern),
                update_interval=model.update_interval,
                alert_threshold=model.alert_threshold,
                is_running=model.is_running
            )

        except (PeeweeException, SimulationConfigModel.DoesNotExist) as e:
            logger.error(f"Error reading simulation config: {e}", exc_info=True)
            raise StorageError("Failed to fetch simulation config") from e

    def update_simulation_config(self, **changes) -> SimulationConfig:
        merged = self.get_simulation_config().merge(**changes)

        try:
            self._write_config(merged)
            logger.info(f"Simulation config updated: {merged.to_dict()}")
            return merged

        except PeeweeException as e:
            logger.error(f"Error updating simulation config: {e}", exc_info=True)
            raise StorageError("Failed to update simulation config") from e

    def _write_config(self, config: SimulationConfig, insert: bool = False):
        values = dict(
            pattern=config.pattern.value,
            update_interval=config.update_interval,
            alert_threshold=config.alert_threshold,
            is_running=config.is_running
        )
        if insert:
            SimulationConfigModel.create(id=CONFIG_ROW_ID, **values)
        else:
            (SimulationConfigModel
             .update(**values)
             .where(SimulationConfigModel.id == CONFIG_ROW_ID)
             .execute())

    # ---- Mapping ----

    def _to_bin(self, model: BinModel) -> Bin:
        """
        Convert Peewee model to Domain aggregate

        Args:
            model: BinModel instance

        Returns:
            Bin aggregate
        """
        return Bin(
            id=model.id,
            name=model.name,
            location=model.location,
            fill_level=model.fill_level,
            status=BinStatus(model.status),
            alert_threshold=model.alert_threshold,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at
        )

    def _to_reading(self, model: BinReadingModel) -> BinReading:
        return BinReading(
            id=model.reading_id,
            bin_id=model.bin_id,
            fill_level=model.fill_level,
            status=BinStatus(model.status),
            timestamp=model.timestamp
        )
