"""Tests del ticker periódico, configuración y engine de BD."""

import threading

import pytest

from common import db as db_module
from common.config import get_settings
from sensor_live.core.scheduler import PeriodicTicker


# =============================================================================
# TICKER
# =============================================================================

class TestPeriodicTicker:

    def test_invokes_callback(self):
        fired = threading.Event()
        ticker = PeriodicTicker(0.01, fired.set, name="test-ticker")
        ticker.start()
        try:
            assert fired.wait(2.0)
            assert ticker.is_running
        finally:
            ticker.stop()
        assert not ticker.is_running

    def test_survives_callback_errors(self):
        calls = []
        done = threading.Event()

        def flaky():
            calls.append(1)
            if len(calls) >= 3:
                done.set()
            raise RuntimeError("tick failed")

        ticker = PeriodicTicker(0.01, flaky)
        ticker.start()
        try:
            assert done.wait(2.0)
        finally:
            ticker.stop()

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            PeriodicTicker(0, lambda: None)


# =============================================================================
# CONFIG
# =============================================================================

_ENV_VARS = (
    "MQTT_BROKER_HOST", "MQTT_BROKER_PORT", "MQTT_TRANSPORT", "MQTT_WS_PATH",
    "MQTT_TLS", "MQTT_USERNAME", "MQTT_PASSWORD", "MQTT_TOPIC", "MQTT_CLIENT_ID",
    "DATABASE_URL", "LIVE_WINDOW_DEFAULT", "STORE_WRITER_QUEUE_SIZE",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        # setenv primero: al deshacer se borra lo que cargue load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("SENSOR_LIVE_ENV_FILE", str(tmp_path / "missing.env"))
    return monkeypatch


class TestSettings:

    def test_defaults(self, clean_env):
        s = get_settings()
        assert s.mqtt_broker_host == "broker.hivemq.com"
        assert s.mqtt_broker_port == 8884
        assert s.mqtt_transport == "websockets"
        assert s.mqtt_tls is True
        assert s.mqtt_topic == "jetson/box/sensor"
        assert s.database_url is None
        assert s.window_default == "1m"

    def test_env_overrides(self, clean_env):
        clean_env.setenv("MQTT_BROKER_PORT", "1883")
        clean_env.setenv("MQTT_TRANSPORT", "TCP")
        clean_env.setenv("MQTT_TLS", "false")
        clean_env.setenv("LIVE_WINDOW_DEFAULT", "1h")
        s = get_settings()
        assert s.mqtt_broker_port == 1883
        assert s.mqtt_transport == "tcp"
        assert s.mqtt_tls is False
        assert s.window_default == "1h"

    def test_env_file_loaded(self, clean_env, tmp_path):
        env_file = tmp_path / "service.env"
        env_file.write_text("MQTT_TOPIC=lab/sensor\n")
        clean_env.setenv("SENSOR_LIVE_ENV_FILE", str(env_file))
        assert get_settings().mqtt_topic == "lab/sensor"


# =============================================================================
# DB ENGINE
# =============================================================================

class TestDbEngine:

    @pytest.fixture(autouse=True)
    def _reset_singleton(self):
        db_module.dispose_engine()
        yield
        db_module.dispose_engine()

    def test_no_url_disables_persistence(self, clean_env):
        assert db_module.get_engine() is None

    def test_sqlite_engine_singleton(self, clean_env, tmp_path):
        clean_env.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'svc.db'}")
        engine = db_module.get_engine()
        assert engine is not None
        assert engine.dialect.name == "sqlite"
        assert db_module.get_engine() is engine
