"""Tests del normalizador Station.

Ejecutar:
    pytest tests/test_station_normalizer.py -v
"""

import copy
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import pytest

from ruuvi_ingest.core.domain import ErrorKind, ReadingSource
from ruuvi_ingest.core.normalizers import normalize_station, parse_update_at


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def station_envelope() -> Dict[str, Any]:
    """Envelope tal como lo envía la app (camelCase)."""
    return {
        "deviceId": "phone-1",
        "eventId": "e-42",
        "batteryLevel": 85,
        "time": "2020-04-09T15:02:00+0200",
        "location": {"accuracy": 12.5, "latitude": 60.17, "longitude": 24.94},
        "tags": [
            {
                "id": "AA:BB:CC:DD:EE:FF",
                "name": "Office",
                "temperature": 21.5,
                "humidity": 45.2,
                "pressure": 101325,
                "accelX": 0.004,
                "accelY": -0.004,
                "accelZ": 1.036,
                "voltage": 2.977,
                "txPower": 4,
                "rssi": -71,
                "dataFormat": 5,
                "movementCounter": 66,
                "measurementSequenceNumber": 205,
                "updateAt": "2020-04-09T15:01:59+0200",
            }
        ],
    }


def _expected_update_at() -> datetime:
    return datetime(2020, 4, 9, 15, 1, 59, tzinfo=timezone(timedelta(hours=2)))


# =============================================================================
# TEST 1: LECTURA CANÓNICA
# =============================================================================

class TestStationReading:
    """Un tag produce una lectura con todos sus campos."""

    def test_single_tag(self, station_envelope):
        result = normalize_station(station_envelope)

        assert result.matched is True
        assert result.diagnostics == ()
        assert len(result.readings) == 1

        r = result.readings[0]
        assert r.source is ReadingSource.STATION
        assert r.sensor_id == "AA:BB:CC:DD:EE:FF"
        assert r.display_name == "Office"
        assert r.temperature_c == 21.5
        assert r.humidity_pct == 45.2
        assert r.pressure_pa == 101325.0
        assert r.accel_z_g == 1.036
        assert r.battery_voltage_v == 2.977
        assert r.tx_power_dbm == 4.0
        assert r.rssi_dbm == -71
        assert r.data_format_version == 5
        assert r.movement_counter == 66
        assert r.measurement_sequence == 205

    def test_update_at_unix_time(self, station_envelope):
        r = normalize_station(station_envelope).readings[0]

        assert r.updated_at == _expected_update_at()
        assert r.updated_at_unix == _expected_update_at().timestamp()

    def test_station_info_copied_to_each_tag(self, station_envelope):
        second = copy.deepcopy(station_envelope["tags"][0])
        second["id"] = "11:22:33:44:55:66"
        station_envelope["tags"].append(second)

        readings = normalize_station(station_envelope).readings

        assert len(readings) == 2
        for r in readings:
            assert r.battery_level_pct == 85.0
            assert r.location_accuracy == 12.5
            assert r.latitude == 60.17
            assert r.longitude == 24.94
            assert r.has_station_info is True

    def test_keys_are_case_insensitive(self, station_envelope):
        tag = station_envelope["tags"][0]
        tag["TEMPERATURE"] = tag.pop("temperature")
        tag["updateat"] = tag.pop("updateAt")

        r = normalize_station(station_envelope).readings[0]

        assert r.temperature_c == 21.5
        assert r.updated_at == _expected_update_at()

    def test_missing_and_null_fields_default_to_zero(self):
        envelope = {"tags": [{"id": "X", "temperature": None}]}

        r = normalize_station(envelope).readings[0]

        assert r.temperature_c == 0.0
        assert r.rssi_dbm == 0
        assert r.display_name == "X"

    def test_empty_tag_list_matches(self):
        result = normalize_station({"tags": []})

        assert result.matched is True
        assert result.readings == ()


# =============================================================================
# TEST 2: NOMBRES
# =============================================================================

class TestDisplayName:

    def test_override_wins(self, station_envelope):
        lookup = {"AA:BB:CC:DD:EE:FF": "Kitchen"}.get

        r = normalize_station(station_envelope, name_lookup=lookup).readings[0]

        assert r.display_name == "Kitchen"

    def test_reported_name_when_no_override(self, station_envelope):
        r = normalize_station(station_envelope, name_lookup=lambda _id: None).readings[0]

        assert r.display_name == "Office"

    def test_falls_back_to_id(self, station_envelope):
        station_envelope["tags"][0]["name"] = ""

        r = normalize_station(station_envelope).readings[0]

        assert r.display_name == "AA:BB:CC:DD:EE:FF"


# =============================================================================
# TEST 3: TIMESTAMPS
# =============================================================================

class TestUpdateAt:

    def test_compact_offset(self):
        assert parse_update_at("2020-04-09T15:01:59+0200") == _expected_update_at()

    def test_colon_offset(self):
        assert parse_update_at("2020-04-09T15:01:59+02:00") == _expected_update_at()

    def test_fractional_seconds(self):
        parsed = parse_update_at("2020-04-09T15:01:59.250+0200")
        assert parsed == _expected_update_at() + timedelta(milliseconds=250)

    def test_negative_offset(self):
        parsed = parse_update_at("2020-04-09T08:01:59-0500")
        assert parsed == datetime(2020, 4, 9, 13, 1, 59, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [
        "",
        "2020-04-09 15:01:59",
        "2020-04-09T15:01:59Z",
        "yesterday",
        "2020-04-09T15:01:59+0200\n",
        "2020-04-09T15:01:59+02:00\n",
        " 2020-04-09T15:01:59+0200",
    ])
    def test_unparsable(self, value):
        with pytest.raises(ValueError):
            parse_update_at(value)

    def test_unparsable_timestamp_keeps_reading(self, station_envelope):
        station_envelope["tags"][0]["updateAt"] = "not a date"

        result = normalize_station(station_envelope)

        assert result.matched is True
        assert len(result.readings) == 1
        assert result.readings[0].updated_at is None
        assert result.readings[0].updated_at_unix is None
        assert [d.kind for d in result.diagnostics] == [ErrorKind.TIMESTAMP_UNPARSABLE]
        assert result.diagnostics[0].sensor_id == "AA:BB:CC:DD:EE:FF"


# =============================================================================
# TEST 4: DETECCIÓN DE ESQUEMA
# =============================================================================

class TestSchemaMismatch:

    @pytest.mark.parametrize("envelope", [
        {},
        [],
        "tags",
        None,
        {"tags": None},
        {"tags": "nope"},
        {"AA:BB:CC:DD:EE:FF": {"rssi": -72, "timestamp": 1700000000, "data": "00"}},
    ])
    def test_not_a_station_envelope(self, envelope):
        result = normalize_station(envelope)

        assert result.matched is False
        assert result.readings == ()
        assert result.diagnostics[0].kind is ErrorKind.SCHEMA_MISMATCH
        assert result.diagnostics[0].schema == "station"

    def test_wrong_field_type(self, station_envelope):
        station_envelope["tags"][0]["temperature"] = "warm"

        assert normalize_station(station_envelope).matched is False


# =============================================================================
# TEST 5: ANIDAMIENTO PROFUNDO
# =============================================================================

def _nested_list(depth: int) -> list:
    value: list = []
    for _ in range(depth):
        value = [value]
    return value


class TestDeepNesting:
    """Campos desconocidos anidados a cualquier profundidad no rompen el parseo."""

    def test_deep_unknown_envelope_field(self, station_envelope):
        station_envelope["x"] = _nested_list(sys.getrecursionlimit() + 100)

        result = normalize_station(station_envelope)

        assert result.matched is True
        assert len(result.readings) == 1

    def test_deep_unknown_tag_field(self, station_envelope):
        station_envelope["tags"][0]["Extra"] = _nested_list(sys.getrecursionlimit() + 100)

        result = normalize_station(station_envelope)

        assert result.matched is True
        assert result.readings[0].temperature_c == 21.5

