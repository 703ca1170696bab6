"""Fixtures compartidos."""

from typing import List
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine

from sensor_live.core.domain.sample import ms_to_datetime
from sensor_live.core.engine import LiveEngine
from sensor_live.core.persistence.store import SensorLogStore, StoredReading

# Instante base arbitrario (ms epoch), múltiplo de 1000
T0 = 1_700_000_000_000


class FakeClock:
    """Reloj manual en milisegundos."""

    def __init__(self, start_ms: int = T0):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class FakeTransport:
    """Transporte en memoria: guarda el handler y permite publicar."""

    def __init__(self, connect_ok: bool = True):
        self.handler = None
        self.connect_ok = connect_ok
        self.connected = False
        self.disconnect_calls = 0

    def set_message_handler(self, handler):
        self.handler = handler

    def connect(self) -> bool:
        self.connected = self.connect_ok
        return self.connect_ok

    def disconnect(self):
        self.connected = False
        self.disconnect_calls += 1

    @property
    def is_connected(self) -> bool:
        return self.connected

    def publish(self, topic: str, payload: bytes):
        self.handler(topic, payload)


def make_readings(points) -> List[StoredReading]:
    """[(ts_ms, temperature, humidity), ...] → StoredReading."""
    return [
        StoredReading(temperature=t, humidity=h, created_at=ms_to_datetime(ts))
        for ts, t, h in points
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store() -> MagicMock:
    """Store mock: historial vacío, inserts OK."""
    s = MagicMock()
    s.fetch_since_ms.return_value = []
    s.insert.return_value = True
    s.is_configured = True
    s.ping.return_value = True
    return s


@pytest.fixture
def writer() -> MagicMock:
    w = MagicMock()
    w.submit.return_value = True
    w.metrics = {"queue_depth": 0, "submitted": 0}
    return w


@pytest.fixture
def engine(transport, store, writer, clock) -> LiveEngine:
    """Motor sin tick en background (los tests llaman a tick() a mano)."""
    eng = LiveEngine(
        transport,
        store,
        topic="jetson/box/sensor",
        window_duration="1m",
        writer=writer,
        clock=clock,
        tick_interval=3600.0,
    )
    yield eng
    eng.stop()


@pytest.fixture
def sqlite_engine(tmp_path):
    db = create_engine(
        f"sqlite:///{tmp_path / 'sensor.db'}",
        connect_args={"check_same_thread": False},
    )
    yield db
    db.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine) -> SensorLogStore:
    s = SensorLogStore(sqlite_engine)
    assert s.ensure_schema()
    return s
