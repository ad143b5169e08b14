from src.binmonitoring.domain.exceptions import StorageError
from src.binmonitoring.domain.model.aggregates import BinStatus


def seeded_bin(client):
    return client.get("/api/bins").get_json()[0]


def test_default_bin_is_seeded(api_client):
    client, _ = api_client

    response = client.get("/api/bins")

    assert response.status_code == 200
    payload = response.get_json()
    assert len(payload) == 1
    assert payload[0]['name'] == "Main Lobby"
    assert payload[0]['location'] == "Building A - Ground Floor"
    assert payload[0]['fillLevel'] == 0
    assert payload[0]['status'] == 'normal'


def test_get_bin_and_unknown_bin(api_client):
    client, _ = api_client
    bin_id = seeded_bin(client)['id']

    assert client.get(f"/api/bins/{bin_id}").get_json()['id'] == bin_id
    assert client.get("/api/bins/missing").status_code == 404


def test_create_bin(api_client):
    client, _ = api_client

    response = client.post("/api/bins", json={
        'name': "Cafeteria", 'location': "Building B", 'alertThreshold': 85
    })

    assert response.status_code == 201
    assert response.get_json()['alertThreshold'] == 85
    assert len(client.get("/api/bins").get_json()) == 2


def test_create_bin_validation(api_client):
    client, _ = api_client

    assert client.post("/api/bins", json={'name': "Cafeteria"}).status_code == 400
    assert client.post("/api/bins", json={
        'name': "Cafeteria", 'location': "B", 'alertThreshold': 150
    }).status_code == 400
    assert client.post("/api/bins", data="name=x").status_code == 400


def test_simulation_config_defaults(api_client):
    client, _ = api_client

    assert client.get("/api/simulation/config").get_json() == {
        'pattern': 'random',
        'updateInterval': 10,
        'alertThreshold': 90,
        'isRunning': False
    }


def test_patch_config(api_client):
    client, _ = api_client

    response = client.patch("/api/simulation/config", json={'pattern': 'linear', 'updateInterval': 5})

    assert response.status_code == 200
    assert response.get_json()['pattern'] == 'linear'
    assert response.get_json()['updateInterval'] == 5
    assert client.get("/api/simulation/config").get_json()['pattern'] == 'linear'


def test_patch_config_rejects_whole_patch(api_client):
    client, _ = api_client

    response = client.patch("/api/simulation/config", json={'pattern': 'linear', 'alertThreshold': 50})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid configuration'
    assert client.get("/api/simulation/config").get_json()['pattern'] == 'random'


def test_start_stop_cycle(api_client, worker_factory):
    client, container = api_client

    started = client.post("/api/simulation/start")
    assert started.status_code == 200
    assert started.get_json()['config']['isRunning'] is True
    assert len(worker_factory.live()) == 1

    stopped = client.post("/api/simulation/stop")
    assert stopped.get_json()['message'] == 'Simulation stopped'
    assert stopped.get_json()['config']['isRunning'] is False
    assert worker_factory.live() == []


def test_trigger_when_stopped(api_client):
    client, _ = api_client

    response = client.post("/api/simulation/trigger")

    assert response.status_code == 200
    assert response.get_json() == {'message': 'Simulation is not running', 'updated': False}


def test_trigger_runs_one_tick_and_records_reading(api_client):
    client, _ = api_client
    bin_id = seeded_bin(client)['id']
    client.post("/api/simulation/start")

    response = client.post("/api/simulation/trigger")

    assert response.get_json()['updated'] is True
    assert response.get_json()['config']['isRunning'] is True
    # random pattern with a 0.5 draw adds 6 points
    assert client.get(f"/api/bins/{bin_id}").get_json()['fillLevel'] == 6

    readings = client.get(f"/api/bins/{bin_id}/readings").get_json()
    assert [r['fillLevel'] for r in readings] == [6]
    assert readings[0]['binId'] == bin_id


def test_reset_empties_bins(api_client):
    client, container = api_client
    bin_id = seeded_bin(client)['id']
    container.storage.update_bin(bin_id, fill_level=70, status=BinStatus.NORMAL)
    client.post("/api/simulation/start")

    response = client.post("/api/simulation/reset")

    assert response.get_json()['message'] == 'Simulation reset'
    assert response.get_json()['config']['isRunning'] is False
    assert client.get(f"/api/bins/{bin_id}").get_json()['fillLevel'] == 0


def test_readings_limit_validation(api_client):
    client, _ = api_client
    bin_id = seeded_bin(client)['id']

    assert client.get(f"/api/bins/{bin_id}/readings?limit=0").status_code == 400
    assert client.get(f"/api/bins/{bin_id}/readings?limit=1001").status_code == 400
    assert client.get("/api/bins/missing/readings").status_code == 404


def test_statistics(api_client):
    client, _ = api_client
    bin_id = seeded_bin(client)['id']
    client.post("/api/simulation/start")
    for _ in range(3):
        client.post("/api/simulation/trigger")

    payload = client.get(f"/api/bins/{bin_id}/statistics").get_json()

    assert payload['totalUpdates'] == 3
    assert payload['averageFillRate'] >= 0
    assert payload['maxFillLevel'] == 18
    assert client.get("/api/bins/missing/statistics").status_code == 404


def test_stale_bins_served_when_storage_fails(api_client, monkeypatch):
    client, container = api_client
    first = client.get("/api/bins").get_json()

    def unavailable():
        raise StorageError("database is locked")

    monkeypatch.setattr(container.storage, 'get_all_bins', unavailable)

    response = client.get("/api/bins")
    assert response.status_code == 200
    assert response.get_json() == first


def test_health_and_info(api_client):
    client, _ = api_client

    health = client.get("/health")
    assert health.status_code == 200
    assert health.get_json()['status'] == 'healthy'
    assert health.get_json()['websocket_running'] is False

    info = client.get("/info").get_json()
    assert info['mode'] == 'push'
    assert info['storage'] == 'MemoryBinStorage'
    assert info['simulation']['bins_count'] == 1
    assert info['mqtt']['enabled'] is False


def test_health_degraded_when_storage_down(api_client, monkeypatch):
    client, container = api_client

    def unavailable():
        raise StorageError("database is locked")

    monkeypatch.setattr(container.storage, 'get_simulation_config', unavailable)

    response = client.get("/health")
    assert response.status_code == 503
    assert response.get_json()['status'] == 'degraded'
