from datetime import datetime, timedelta

import pytest

from src.binmonitoring.domain.exceptions import ValidationError
from src.binmonitoring.domain.model.aggregates import (
    Bin,
    BinReading,
    BinStatus,
    FillPattern,
    SimulationConfig,
    SimulationConfigPatch
)
from src.binmonitoring.domain.model.events import AlertEvent, AlertSeverity, BinUpdateEvent
from src.binmonitoring.domain.services import ReadingStatistics


def test_bin_rejects_out_of_range_fill():
    with pytest.raises(ValueError):
        Bin(id="b1", name="Lobby", location="A", fill_level=101)


def test_bin_effective_threshold_prefers_override():
    assert Bin(id="b1", name="Lobby", location="A").effective_threshold(90) == 90
    assert Bin(id="b1", name="Lobby", location="A", alert_threshold=75).effective_threshold(90) == 75


def test_bin_dict_uses_camel_case_and_parses_back():
    dustbin = Bin(id="b1", name="Lobby", location="A", fill_level=42.0,
                  status=BinStatus.NORMAL)

    data = dustbin.to_dict()

    assert data['fillLevel'] == 42.0
    assert data['isActive'] is True
    assert Bin.from_dict(data).created_at == dustbin.created_at


def test_bin_from_dict_rejects_missing_fields():
    with pytest.raises(ValueError):
        Bin.from_dict({'id': 'b1'})


def test_patch_accepts_partial_payload():
    patch = SimulationConfigPatch.from_request_payload({'pattern': 'linear', 'updateInterval': 5})

    assert patch.to_changes() == {'pattern': FillPattern.LINEAR, 'update_interval': 5}


@pytest.mark.parametrize("payload", [
    {'updateInterval': 4},
    {'updateInterval': 61},
    {'alertThreshold': 69},
    {'alertThreshold': 101},
    {'updateInterval': '10'},
    {'updateInterval': True},
    {'pattern': 'exponential'},
    {'isRunning': 'yes'},
    {'speed': 3},
    ['pattern'],
    None,
])
def test_patch_rejects_invalid_payload(payload):
    with pytest.raises(ValidationError):
        SimulationConfigPatch.from_request_payload(payload)


def test_patch_accepts_bounds_inclusive():
    patch = SimulationConfigPatch.from_request_payload({
        'updateInterval': 60, 'alertThreshold': 70
    })
    assert patch.update_interval == 60
    assert patch.alert_threshold == 70


def test_config_merge_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        SimulationConfig().merge(speed=2)


def test_config_defaults():
    assert SimulationConfig().to_dict() == {
        'pattern': 'random',
        'updateInterval': 10,
        'alertThreshold': 90,
        'isRunning': False
    }


def test_alert_severity_depends_on_full_bin():
    assert AlertEvent.for_bin("b1", "Lobby", 92).severity is AlertSeverity.WARNING
    assert AlertEvent.for_bin("b1", "Lobby", 100).severity is AlertSeverity.ALERT


def test_alert_message_rounds_half_up():
    assert "91% full" in AlertEvent.for_bin("b1", "Lobby", 90.5).message


def test_event_envelope():
    event = BinUpdateEvent(bin_id="b1", fill_level=10, status=BinStatus.NORMAL)

    message = event.to_message()

    assert message['type'] == 'binUpdate'
    assert message['data']['binId'] == "b1"
    assert message['data']['status'] == 'normal'


def _reading(fill, seconds, status=BinStatus.NORMAL):
    return BinReading(id=f"r{seconds}", bin_id="b1", fill_level=fill, status=status,
                      timestamp=datetime(2025, 1, 15) + timedelta(seconds=seconds))


def test_statistics_estimate_time_to_full():
    readings = [_reading(10 * i, 10 * i) for i in range(1, 6)]

    statistics = ReadingStatistics.from_readings(readings)

    assert statistics.total_updates == 5
    # 40 points over 40 seconds
    assert statistics.average_fill_rate == pytest.approx(3600)
    assert statistics.max_fill_level == 50
    # 1 point per second over the last five readings, 50 points left
    assert statistics.seconds_to_full == pytest.approx(50)


def test_statistics_without_enough_readings():
    statistics = ReadingStatistics.from_readings([_reading(10, 0), _reading(20, 10)])

    assert statistics.seconds_to_full is None
    assert statistics.to_dict()['secondsToFull'] is None


def test_statistics_counts_alerts():
    readings = [_reading(85, 0), _reading(95, 10, BinStatus.ALERT), _reading(0, 20)]

    statistics = ReadingStatistics.from_readings(readings)

    assert statistics.alert_count == 1
    assert statistics.seconds_to_full is None


def test_statistics_empty_history():
    assert ReadingStatistics.from_readings([]).to_dict() == {
        'totalUpdates': 0,
        'averageFillRate': 0.0,
        'maxFillLevel': 0,
        'alertCount': 0,
        'secondsToFull': None
    }


def test_statistics_fill_rate_is_percent_per_hour():
    readings = [_reading(10 + 2 * i, 10 * i) for i in range(5)]

    payload = ReadingStatistics.from_readings(readings).to_dict()

    assert payload['averageFillRate'] == 720.0
    assert payload['maxFillLevel'] == 18
    assert payload['secondsToFull'] == 410


def test_statistics_rounding():
    readings = [_reading(10, 0), _reading(84.5, 7)]

    payload = ReadingStatistics.from_readings(readings).to_dict()

    # 74.5 points in 7 seconds
    assert payload['averageFillRate'] == 38314.3
    assert payload['maxFillLevel'] == 85


def test_statistics_fill_rate_zero_without_elapsed_time():
    assert ReadingStatistics.from_readings([_reading(10, 0)]).average_fill_rate == 0
    assert ReadingStatistics.from_readings([_reading(10, 0), _reading(20, 0)]).average_fill_rate == 0
