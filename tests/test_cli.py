"""CLI smoke tests against the built-in simulator."""

import json

import pytest
from typer.testing import CliRunner

from obd_reader.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch, clean_settings_cache):
    monkeypatch.setenv("OBD_READER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("OBD_READER_INIT_DELAY", "0")
    return tmp_path


def test_read_json():
    result = runner.invoke(app, ["read", "--simulate", "--json"])

    assert result.exit_code == 0, result.output
    assert "P0301" in result.output
    assert "1726" in result.output


def test_read_tables():
    result = runner.invoke(app, ["read", "--simulate"])

    assert result.exit_code == 0, result.output
    assert "Engine RPM" in result.output
    assert "P0301" in result.output


def test_read_and_save(isolated_settings):
    result = runner.invoke(app, ["read", "--simulate", "--save", "--output", "trip.json"])

    assert result.exit_code == 0, result.output
    data = json.loads((isolated_settings / "trip.json").read_text())
    assert data["dtcs"] == ["P0301"]
    assert data["live"]["speed_kmh"] == 50


def test_show_saved_snapshot(isolated_settings):
    runner.invoke(app, ["read", "--simulate", "--save"])

    result = runner.invoke(app, ["show"])

    assert result.exit_code == 0, result.output
    assert "P0301" in result.output


def test_show_missing_file(isolated_settings):
    result = runner.invoke(app, ["show", str(isolated_settings / "nope.json")])

    assert result.exit_code == 1
    assert "No snapshot" in result.output


def test_raw_command():
    result = runner.invoke(app, ["raw", "ATRV", "--simulate"])

    assert result.exit_code == 0, result.output
    assert "12.3V" in result.output


def test_monitor_fixed_cycles():
    result = runner.invoke(app, ["monitor", "--simulate", "--count", "2", "--interval", "0"])

    assert result.exit_code == 0, result.output
    assert "Monitoring stopped after 2 cycles" in result.output


def test_connection_failure_exits(tmp_path):
    result = runner.invoke(app, ["read", "--port", str(tmp_path / "no-such-device")])

    assert result.exit_code == 1
    assert "Connection failed" in result.output
