"""Pytest fixtures for OBD reader tests."""

import time

import pytest

from obd_reader.config import ReaderSettings, get_settings
from obd_reader.connection.engine import SessionEngine
from obd_reader.connection.simulator import SimulatedTransport


@pytest.fixture
def settings(tmp_path):
    """Fast settings with no handshake delay."""
    return ReaderSettings(
        port="/dev/null-adapter",
        command_timeout=0.5,
        reset_timeout=0.5,
        init_delay=0.0,
        data_dir=tmp_path / "snapshots",
    )


@pytest.fixture
def sim():
    """Simulated adapter with default replies."""
    return SimulatedTransport()


@pytest.fixture
def open_sim(sim):
    """Simulated adapter that is already open."""
    sim.open()
    yield sim
    sim.close()


@pytest.fixture
def make_engine(settings):
    """Factory building an engine around a given transport."""
    engines = []

    def _make(transport=None, **overrides):
        transport = transport or SimulatedTransport()
        engine_settings = settings.model_copy(update=overrides) if overrides else settings
        engine = SessionEngine(transport_factory=lambda _ref: transport, settings=engine_settings)
        engines.append(engine)
        return engine, transport

    yield _make

    for engine in engines:
        engine.disconnect()


@pytest.fixture
def wait_for():
    """Poll a condition until it holds or a timeout passes."""
    def _wait(condition, timeout: float = 2.0) -> None:
        deadline = time.monotonic() + timeout
        while not condition():
            if time.monotonic() > deadline:
                raise AssertionError("Condition not met in time")
            time.sleep(0.005)
    return _wait


@pytest.fixture
def clean_settings_cache():
    """Make get_settings() re-read the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
