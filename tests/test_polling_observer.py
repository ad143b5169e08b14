import requests

from src.binmonitoring.application.services import (
    BinService,
    SimulationEngine,
    SimulationScheduler
)
from src.binmonitoring.domain.model.aggregates import FillPattern
from src.binmonitoring.interfaces.polling import (
    HttpStateSource,
    PollingObserver,
    PollingWorker,
    ServiceStateSource
)
from tests.conftest import EventRecorder, FakeRandom


def make_observer(storage, broadcaster, recorder):
    engine = SimulationEngine(storage, broadcaster, rng=FakeRandom(0.5))
    scheduler = SimulationScheduler(storage, engine, broadcaster, push_mode=False)
    source = ServiceStateSource(BinService(storage), scheduler)
    return PollingObserver(source, on_event=recorder), scheduler


def test_first_poll_reports_status_only(storage, broadcaster):
    storage.create_bin("Main Lobby", "Building A")
    observer, _ = make_observer(storage, broadcaster, EventRecorder())

    events = observer.poll_once()

    assert [e.event_type for e in events] == ['simulationStatus']
    assert observer.last_snapshot is not None


def test_running_poll_triggers_tick_and_reports_changes(storage, broadcaster):
    dustbin = storage.create_bin("Main Lobby", "Building A", fill_level=76)
    storage.update_simulation_config(pattern=FillPattern.LINEAR, is_running=True)
    delivered = EventRecorder()
    observer, _ = make_observer(storage, broadcaster, delivered)

    observer.poll_once()
    events = observer.poll_once()

    assert storage.get_bin(dustbin.id).fill_level == 80
    assert [e.event_type for e in events] == ['binUpdate', 'alert']
    assert delivered.types == ['simulationStatus', 'binUpdate', 'alert']


def test_stopped_simulation_is_not_ticked(storage, broadcaster):
    dustbin = storage.create_bin("Main Lobby", "Building A", fill_level=10)
    observer, _ = make_observer(storage, broadcaster, EventRecorder())

    observer.poll_once()
    assert observer.poll_once() == []
    assert storage.get_bin(dustbin.id).fill_level == 10


def test_status_change_between_polls_is_reported(storage, broadcaster):
    observer, scheduler = make_observer(storage, broadcaster, EventRecorder())
    observer.poll_once()

    scheduler.start()
    events = observer.poll_once()

    assert [e.event_type for e in events] == ['simulationStatus']
    assert events[0].is_running


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, config, bins):
        self.config = config
        self.bins = bins
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(('GET', url))
        if url.endswith('/simulation/config'):
            return FakeResponse(self.config)
        return FakeResponse(self.bins)

    def post(self, url, timeout=None):
        self.calls.append(('POST', url))
        return FakeResponse({'updated': True})


class FailingSession:
    def get(self, url, timeout=None):
        raise requests.ConnectionError("connection refused")


def test_http_source_reads_rest_endpoints(storage):
    dustbin = storage.create_bin("Main Lobby", "Building A", fill_level=12)
    config = storage.update_simulation_config(is_running=True)
    session = FakeSession(config.to_dict(), [dustbin.to_dict()])
    source = HttpStateSource("http://api.local/api/", session=session)

    assert source.fetch_config() == config
    assert source.trigger_tick() is True
    assert source.fetch_bins()[0].fill_level == 12
    assert session.calls == [
        ('GET', 'http://api.local/api/simulation/config'),
        ('POST', 'http://api.local/api/simulation/trigger'),
        ('GET', 'http://api.local/api/bins'),
    ]


def test_observer_marks_disconnected_on_http_error():
    observer = PollingObserver(
        HttpStateSource("http://api.local/api", session=FailingSession()),
        on_event=EventRecorder()
    )

    assert observer.poll_once() == []
    assert observer.connected is False
    assert observer.last_snapshot is None


def test_polling_worker_polls_on_start(storage, broadcaster):
    delivered = EventRecorder()
    observer, _ = make_observer(storage, broadcaster, delivered)
    worker = PollingWorker(observer, interval_seconds=60)

    worker.start()
    worker.stop(wait=True)

    assert delivered.types == ['simulationStatus']



def test_observer_embedded_next_to_a_container(container):
    delivered = EventRecorder()
    source = ServiceStateSource(container.bin_service, container.scheduler)
    observer = PollingObserver(source, on_event=delivered)

    observer.poll_once()
    container.scheduler.start()
    observer.poll_once()

    # the seeded bin was ticked by the observer's trigger
    assert delivered.types == ['simulationStatus', 'simulationStatus', 'binUpdate']
    assert observer.last_snapshot.bins[0].fill_level == 6
