import pytest

from src.binmonitoring.domain.exceptions import StorageError, ValidationError
from src.binmonitoring.domain.model.aggregates import BinStatus, FillPattern
from src.binmonitoring.infrastructure.persistence import PeeweeBinStorage


def test_create_and_get_bin(any_storage):
    created = any_storage.create_bin("Main Lobby", "Building A - Ground Floor")

    fetched = any_storage.get_bin(created.id)

    assert fetched.id == created.id
    assert fetched.name == "Main Lobby"
    assert fetched.fill_level == 0
    assert fetched.status is BinStatus.NORMAL
    assert fetched.alert_threshold is None
    assert fetched.is_active


def test_get_unknown_bin_returns_none(any_storage):
    assert any_storage.get_bin("does-not-exist") is None
    assert any_storage.update_bin("does-not-exist", fill_level=10) is None


def test_bins_listed_in_creation_order(any_storage):
    names = ["Lobby", "Cafeteria", "Parking"]
    for name in names:
        any_storage.create_bin(name, "Campus")

    assert [b.name for b in any_storage.get_all_bins()] == names


def test_update_bin_merges_fields(any_storage):
    dustbin = any_storage.create_bin("Main Lobby", "Building A")

    updated = any_storage.update_bin(dustbin.id, fill_level=84.5, status=BinStatus.WARNING)

    assert updated.fill_level == 84.5
    assert updated.status is BinStatus.WARNING
    assert updated.updated_at >= dustbin.updated_at
    assert any_storage.get_bin(dustbin.id).status is BinStatus.WARNING


def test_update_bin_rejects_invalid_fill(any_storage):
    dustbin = any_storage.create_bin("Main Lobby", "Building A")

    with pytest.raises(ValueError):
        any_storage.update_bin(dustbin.id, fill_level=120)


def test_returned_bins_are_copies(storage):
    dustbin = storage.create_bin("Main Lobby", "Building A")

    storage.get_bin(dustbin.id).fill_level = 50

    assert storage.get_bin(dustbin.id).fill_level == 0


def test_readings_returned_oldest_first_with_limit(any_storage):
    dustbin = any_storage.create_bin("Main Lobby", "Building A")
    for level in range(2, 22, 2):
        any_storage.add_reading(dustbin.id, level, BinStatus.NORMAL)

    readings = any_storage.get_bin_readings(dustbin.id, limit=3)

    assert [r.fill_level for r in readings] == [16, 18, 20]
    assert all(r.bin_id == dustbin.id for r in readings)


def test_readings_capped_at_50_dropping_oldest(any_storage):
    dustbin = any_storage.create_bin("Main Lobby", "Building A")
    for i in range(55):
        any_storage.add_reading(dustbin.id, i, BinStatus.NORMAL)

    readings = any_storage.get_bin_readings(dustbin.id, limit=1000)

    assert len(readings) == 50
    assert readings[0].fill_level == 5
    assert readings[-1].fill_level == 54


def test_readings_are_kept_per_bin(any_storage):
    first = any_storage.create_bin("Lobby", "A")
    second = any_storage.create_bin("Cafeteria", "B")
    any_storage.add_reading(first.id, 10, BinStatus.NORMAL)

    assert any_storage.get_bin_readings(second.id) == []
    assert any_storage.get_bin_readings(first.id, limit=0) == []


def test_simulation_config_defaults_and_merge(any_storage):
    assert any_storage.get_simulation_config().pattern is FillPattern.RANDOM

    merged = any_storage.update_simulation_config(pattern=FillPattern.LINEAR, is_running=True)

    assert merged.pattern is FillPattern.LINEAR
    assert merged.update_interval == 10
    assert any_storage.get_simulation_config() == merged


def test_simulation_config_rejects_unknown_field(any_storage):
    with pytest.raises(ValidationError):
        any_storage.update_simulation_config(speed=3)


def test_sqlite_config_row_survives_new_storage_instance(sqlite_storage):
    sqlite_storage.update_simulation_config(is_running=True, update_interval=20)

    reopened = PeeweeBinStorage()

    assert reopened.get_simulation_config().is_running
    assert reopened.get_simulation_config().update_interval == 20


def test_reading_for_unknown_bin_is_rejected(any_storage):
    with pytest.raises(StorageError):
        any_storage.add_reading("does-not-exist", 10, BinStatus.NORMAL)

    assert any_storage.get_bin_readings("does-not-exist") == []
