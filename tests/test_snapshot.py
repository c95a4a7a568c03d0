"""Tests for snapshot models and the JSON store."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from obd_reader.models.dtc import DiagnosticCode, DTCCategory
from obd_reader.models.live import LiveReading
from obd_reader.models.session import SessionSnapshot, utc_timestamp
from obd_reader.storage.snapshots import SnapshotStore


@pytest.fixture
def snapshot():
    return SessionSnapshot.build(
        LiveReading(rpm=800, speed_kmh=0, coolant_c=-5, battery_v=12.6),
        [DiagnosticCode.from_string("P0301"), DiagnosticCode.from_string("U0100")],
        now=datetime(2025, 6, 1, 12, 30, 0, tzinfo=timezone.utc),
    )


class TestModels:
    def test_live_reading_is_immutable(self):
        reading = LiveReading(rpm=1000)
        with pytest.raises(ValidationError):
            reading.rpm = 2000

    @pytest.mark.parametrize("field", ["rpm", "speed_kmh", "battery_v"])
    def test_live_reading_rejects_negative(self, field):
        with pytest.raises(ValidationError):
            LiveReading(**{field: -1})

    def test_coolant_may_be_negative(self):
        assert LiveReading(coolant_c=-40).coolant_c == -40

    def test_code_from_string(self):
        dtc = DiagnosticCode.from_string(" c0123 ")
        assert dtc.category == DTCCategory.CHASSIS
        assert dtc.code == "0123"
        assert not DiagnosticCode.from_string("P1234").is_generic

    @pytest.mark.parametrize(
        "text, generic",
        [
            ("P0301", True),
            ("P2101", True),
            ("C0035", True),
            ("U0100", True),
            ("B2AAA", False),
            ("C2100", False),
            ("U2100", False),
            ("B1001", False),
        ],
    )
    def test_generic_codes(self, text, generic):
        assert DiagnosticCode.from_string(text).is_generic is generic

    @pytest.mark.parametrize("text", ["", "P030","X0301", "P03011", "PZZZZ"])
    def test_code_from_string_rejects(self, text):
        with pytest.raises(ValueError):
            DiagnosticCode.from_string(text)

    def test_timestamp_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        assert utc_timestamp(datetime(2025, 1, 1, 2, 0, 0, tzinfo=plus_two)) == "2025-01-01T00:00:00Z"

    def test_timestamp_defaults_to_now(self):
        stamp = utc_timestamp()
        assert stamp.endswith("Z")
        assert datetime.strptime(stamp, "%Y-%m-%dT%H:%M:%SZ")


class TestExport:
    def test_schema(self, snapshot):
        data = snapshot.to_dict_for_export()

        assert data == {
            "timestamp": "2025-06-01T12:30:00Z",
            "dtcs": ["P0301", "U0100"],
            "live": {"rpm": 800, "speed_kmh": 0, "coolant_c": -5, "battery_v": 12.6},
        }
        assert isinstance(data["live"]["rpm"], int)
        assert isinstance(data["live"]["battery_v"], float)

    def test_empty_dtcs_is_empty_list(self):
        data = SessionSnapshot.build(LiveReading(), []).to_dict_for_export()
        assert data["dtcs"] == []


class TestStore:
    def test_save_writes_pretty_json(self, snapshot, tmp_path):
        store = SnapshotStore(tmp_path / "docs")

        path = store.save(snapshot)

        assert path == tmp_path / "docs" / "obd_session.json"
        text = path.read_text()
        assert json.loads(text) == snapshot.to_dict_for_export()
        assert '\n  "timestamp"' in text

    def test_save_overwrites_default_file(self, snapshot, tmp_path):
        store = SnapshotStore(tmp_path)
        store.save(snapshot)
        store.save(SessionSnapshot.build(LiveReading(rpm=3000), []))

        assert store.load().live.rpm == 3000
        assert store.list_snapshots() == [tmp_path / "obd_session.json"]

    def test_load_restores_snapshot(self, snapshot, tmp_path):
        store = SnapshotStore(tmp_path)
        path = store.save(snapshot, filename="trip.json")

        assert store.load(path) == snapshot

    def test_list_snapshots_missing_dir(self, tmp_path):
        assert SnapshotStore(tmp_path / "missing").list_snapshots() == []
