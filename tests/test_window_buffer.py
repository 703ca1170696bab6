"""Tests de la ventana deslizante y del menú de duraciones."""

import pytest

from sensor_live.core.buffer import SlidingWindowBuffer
from sensor_live.core.domain import Sample, WindowDuration
from sensor_live.core.domain.sample import datetime_to_ms, ms_to_datetime

from conftest import T0


def _s(ts, t=20.0, h=50.0, synthetic=False):
    return Sample(timestamp_ms=ts, temperature=t, humidity=h, synthetic=synthetic)


# =============================================================================
# WINDOW DURATION
# =============================================================================

class TestWindowDuration:
    """Menú cerrado de duraciones."""

    @pytest.mark.parametrize("label,seconds", [
        ("1m", 60), ("5m", 300), ("30m", 1800), ("1h", 3600), ("6h", 21600), ("1d", 86400),
    ])
    def test_labels(self, label, seconds):
        d = WindowDuration.parse(label)
        assert d.seconds == seconds
        assert d.milliseconds == seconds * 1000

    def test_parse_seconds(self):
        assert WindowDuration.parse(300) is WindowDuration.FIVE_MINUTES
        assert WindowDuration.parse("3600") is WindowDuration.ONE_HOUR

    def test_parse_enum_passthrough(self):
        assert WindowDuration.parse(WindowDuration.ONE_DAY) is WindowDuration.ONE_DAY

    @pytest.mark.parametrize("bad", ["2m", "", 120, "forever"])
    def test_rejects_values_outside_menu(self, bad):
        with pytest.raises(ValueError):
            WindowDuration.parse(bad)


# =============================================================================
# SLIDING WINDOW BUFFER
# =============================================================================

class TestSlidingWindowBuffer:
    """Orden, unicidad de timestamps y evicción."""

    def test_in_order_append(self):
        buf = SlidingWindowBuffer()
        for i in range(5):
            assert buf.append(_s(T0 + i * 1000))
        ts = [s.timestamp_ms for s in buf.snapshot()]
        assert ts == sorted(ts)
        assert len(buf) == 5

    def test_out_of_order_insert_keeps_order(self):
        buf = SlidingWindowBuffer([_s(T0), _s(T0 + 2000), _s(T0 + 3000)])
        assert buf.append(_s(T0 + 1000, t=99.0))
        ts = [s.timestamp_ms for s in buf.snapshot()]
        assert ts == [T0, T0 + 1000, T0 + 2000, T0 + 3000]
        assert buf.snapshot()[1].temperature == 99.0

    def test_same_timestamp_overwrites(self):
        buf = SlidingWindowBuffer([_s(T0), _s(T0 + 1000)])
        assert buf.append(_s(T0 + 1000, t=30.0)) is False
        assert buf.append(_s(T0, t=31.0)) is False
        assert len(buf) == 2
        assert [s.temperature for s in buf.snapshot()] == [31.0, 30.0]

    def test_evict_before_horizon(self):
        buf = SlidingWindowBuffer(_s(T0 + i * 1000) for i in range(10))
        evicted = buf.evict_before(T0 + 4000)
        assert evicted == 4
        assert buf.snapshot()[0].timestamp_ms == T0 + 4000

    def test_evict_everything(self):
        buf = SlidingWindowBuffer([_s(T0)])
        assert buf.evict_before(T0 + 1) == 1
        assert not buf
        assert buf.latest() is None

    def test_snapshot_is_immutable_copy(self):
        buf = SlidingWindowBuffer([_s(T0)])
        snap = buf.snapshot()
        buf.append(_s(T0 + 1000))
        assert len(snap) == 1

    def test_clear(self):
        buf = SlidingWindowBuffer([_s(T0), _s(T0 + 1000)])
        buf.clear()
        assert len(buf) == 0


# =============================================================================
# SAMPLE
# =============================================================================

class TestSample:

    def test_carried_forward_is_synthetic_copy(self):
        real = _s(T0, t=21.5, h=40.0)
        filled = real.carried_forward(T0 + 1000, offline=True)
        assert filled.synthetic and filled.offline
        assert (filled.temperature, filled.humidity) == (21.5, 40.0)
        assert filled.timestamp_ms == T0 + 1000
        assert real.is_genuine

    def test_datetime_roundtrip_utc(self):
        dt = ms_to_datetime(T0)
        assert dt.tzinfo is not None
        assert datetime_to_ms(dt) == T0

    def test_naive_datetime_is_utc(self):
        naive = ms_to_datetime(T0).replace(tzinfo=None)
        assert datetime_to_ms(naive) == T0
