import pytest

from app import create_flask_app
from config.simulation_config import SimulationSettings
from src.binmonitoring.application.services import (
    SimulationEngine,
    SimulationScheduler
)
from src.binmonitoring.domain.exceptions import StorageError
from src.binmonitoring.domain.model.aggregates import FillPattern
from src.binmonitoring.infrastructure.messaging import EventBroadcaster
from src.binmonitoring.infrastructure.persistence import (
    MemoryBinStorage,
    PeeweeBinStorage
)
from src.container import Container
from src.shared.infrastructure.database import init_database


class FakeRandom:
    """Returns the given values from random() in a loop."""

    def __init__(self, *values):
        self.values = list(values) or [0.5]
        self.calls = 0

    def random(self):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class FailingUpdateStorage:
    """Wraps a storage and fails every bin update."""

    def __init__(self, storage):
        self._storage = storage

    def __getattr__(self, name):
        return getattr(self._storage, name)

    def update_bin(self, bin_id, **changes):
        raise StorageError("disk on fire")


class FailingStopStorage:
    """Wraps a storage and fails only the write that stops the simulation."""

    def __init__(self, storage):
        self._storage = storage

    def __getattr__(self, name):
        return getattr(self._storage, name)

    def update_simulation_config(self, **changes):
        if changes.get('is_running') is False:
            raise StorageError("database is locked")
        return self._storage.update_simulation_config(**changes)


class EventRecorder:
    """Broadcaster listener that keeps every event it receives."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    @property
    def types(self):
        return [e.event_type for e in self.events]

    def of_type(self, event_type):
        return [e for e in self.events if e.event_type == event_type]

    def clear(self):
        self.events.clear()


class FakeWorker:
    """Stand-in for SimulationTickWorker that only fires when told to."""

    def __init__(self, interval_seconds, on_fire):
        self.interval_seconds = interval_seconds
        self.on_fire = on_fire
        self.running = False
        self.start_calls = 0
        self.stop_calls = 0

    def start(self):
        self.start_calls += 1
        self.running = True

    def stop(self, wait=False):
        self.stop_calls += 1
        self.running = False

    def is_running(self):
        return self.running

    def fire(self):
        self.on_fire(self)


class WorkerFactory:
    def __init__(self):
        self.created = []

    def __call__(self, interval_seconds, on_fire):
        worker = FakeWorker(interval_seconds, on_fire)
        self.created.append(worker)
        return worker

    def live(self):
        return [w for w in self.created if w.running]


@pytest.fixture()
def storage():
    return MemoryBinStorage(readings_per_bin=50)


@pytest.fixture()
def sqlite_storage():
    init_database(':memory:')
    return PeeweeBinStorage(readings_per_bin=50)


@pytest.fixture(params=['memory', 'sqlite'])
def any_storage(request):
    """Run a test against both storage backends."""
    if request.param == 'sqlite':
        return request.getfixturevalue('sqlite_storage')
    return request.getfixturevalue('storage')


@pytest.fixture()
def recorder():
    return EventRecorder()


@pytest.fixture()
def broadcaster(recorder):
    broadcaster = EventBroadcaster()
    broadcaster.subscribe(recorder)
    return broadcaster


@pytest.fixture()
def linear_engine(storage, broadcaster):
    storage.update_simulation_config(pattern=FillPattern.LINEAR)
    return SimulationEngine(storage, broadcaster, rng=FakeRandom(0.5))


@pytest.fixture()
def worker_factory():
    return WorkerFactory()


@pytest.fixture()
def scheduler(storage, broadcaster, linear_engine, worker_factory):
    return SimulationScheduler(
        storage,
        linear_engine,
        broadcaster,
        push_mode=True,
        worker_factory=worker_factory
    )


@pytest.fixture()
def container(monkeypatch, worker_factory):
    """Container with in-memory storage, one seeded bin and no network transports."""
    monkeypatch.setattr(SimulationSettings, 'SEED_DEFAULT_BIN', True)

    container = Container(
        storage=MemoryBinStorage(),
        push_mode=True,
        mqtt_enabled=False,
        websocket_enabled=False,
        rng=FakeRandom(0.5)
    )
    container.scheduler.worker_factory = worker_factory
    yield container
    container.shutdown()


@pytest.fixture()
def api_client(container):
    app = create_flask_app(container)
    app.testing = True
    with app.test_client() as client:
        yield client, container
