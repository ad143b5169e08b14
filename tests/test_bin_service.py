import pytest

from src.binmonitoring.application.services import BinService
from src.binmonitoring.domain.exceptions import StorageError, ValidationError


def test_seed_default_bin_only_on_empty_storage(storage):
    service = BinService(storage)

    seeded = service.seed_default_bin()

    assert seeded.name == "Main Lobby"
    assert service.seed_default_bin() is None
    assert len(service.get_all_bins()) == 1


def test_create_bin_validates_payload(storage):
    service = BinService(storage)

    with pytest.raises(ValidationError):
        service.create_bin({'name': "Lobby", 'location': 12})
    with pytest.raises(ValidationError):
        service.create_bin({'name': "Lobby", 'location': "A", 'isActive': "yes"})
    with pytest.raises(ValidationError):
        service.create_bin("Lobby")

    assert service.create_bin({'name': "Lobby", 'location': "A", 'isActive': False}).is_active is False


def test_stale_config_served_after_storage_failure(storage, monkeypatch):
    service = BinService(storage)
    config = service.get_simulation_config()

    def unavailable():
        raise StorageError("database is locked")

    monkeypatch.setattr(storage, 'get_simulation_config', unavailable)

    assert service.get_simulation_config() == config


def test_storage_failure_without_cache_propagates(storage, monkeypatch):
    service = BinService(storage)

    def unavailable():
        raise StorageError("database is locked")

    monkeypatch.setattr(storage, 'get_all_bins', unavailable)

    with pytest.raises(StorageError):
        service.get_all_bins()


def test_readings_of_unknown_bin(storage):
    assert BinService(storage).get_readings("missing") is None
