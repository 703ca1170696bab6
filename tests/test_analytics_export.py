"""Tests de tendencia, estadísticos y exportación CSV."""

import pytest

from sensor_live.core.analytics import TrendAggregator, moving_average, summarize
from sensor_live.core.domain import Sample
from sensor_live.core.export import (
    CSV_HEADER,
    STATUS_MISSING,
    STATUS_REAL,
    rows_from_snapshot,
    rows_from_store,
    to_csv,
)

from conftest import T0


def _real(ts, t=20.0, h=50.0):
    return Sample(timestamp_ms=ts, temperature=t, humidity=h)


# =============================================================================
# TREND / SUMMARY
# =============================================================================

class TestTrend:

    def test_moving_average_clips_at_start(self):
        assert moving_average([10, 20, 30], 3) == [10.0, 15.0, 20.0]

    def test_moving_average_window(self):
        assert moving_average([1, 2, 3, 4, 5], 2) == [1.0, 1.5, 2.5, 3.5, 4.5]

    def test_moving_average_invalid_lookback(self):
        with pytest.raises(ValueError):
            moving_average([1.0], 0)

    def test_summary_mean(self):
        samples = [_real(T0 + i * 1000, t=v, h=v * 2) for i, v in enumerate([10.0, 20.0, 30.0])]
        stats = TrendAggregator().summary(samples)
        assert stats.temperature.mean == 20.0
        assert stats.temperature.min == 10.0
        assert stats.temperature.max == 30.0
        assert stats.humidity.mean == 40.0
        assert stats.temperature.count == 3

    def test_empty_window_is_zero(self):
        stats = TrendAggregator().summary([])
        assert stats.to_dict() == {
            "temperature": {"mean": 0.0, "min": 0.0, "max": 0.0, "count": 0},
            "humidity": {"mean": 0.0, "min": 0.0, "max": 0.0, "count": 0},
        }
        assert summarize([]).mean == 0.0

    def test_trend_aligned_with_snapshot(self):
        samples = [_real(T0 + i * 1000, t=float(i)) for i in range(12)]
        trend = TrendAggregator(lookback=10).trend(samples)
        assert len(trend.temperature) == 12
        assert trend.timestamps_ms[0] == T0
        assert trend.temperature[-1] == pytest.approx(sum(range(2, 12)) / 10)


# =============================================================================
# EXPORT
# =============================================================================

class TestExport:

    def test_snapshot_rows_keep_synthetic_status(self):
        real = _real(T0)
        rows = rows_from_snapshot([real, real.carried_forward(T0 + 1000), _real(T0 + 2000)])
        assert [r.status for r in rows] == [STATUS_REAL, STATUS_MISSING, STATUS_REAL]

    def test_store_gap_filled_once(self):
        samples = [
            _real(T0, t=20.0),
            _real(T0 + 15_000, t=21.0),
            _real(T0 + 45_000, t=22.0),
        ]
        rows = rows_from_store(samples, step_interval_ms=15_000)

        assert len(rows) == 4
        missing = [r for r in rows if not r.is_real]
        assert len(missing) == 1
        assert missing[0].timestamp_ms == T0 + 30_000
        assert missing[0].temperature == 21.0
        assert [r.temperature for r in rows if r.is_real] == [20.0, 21.0, 22.0]

    def test_store_jitter_within_tolerance_not_filled(self):
        rows = rows_from_store([_real(T0), _real(T0 + 22_000)], step_interval_ms=15_000)
        assert all(r.is_real for r in rows)

    def test_store_long_outage(self):
        rows = rows_from_store([_real(T0), _real(T0 + 60_000)], step_interval_ms=15_000)
        assert [r.status for r in rows].count(STATUS_MISSING) == 3

    def test_empty_store_rows(self):
        assert rows_from_store([]) == []

    def test_csv_format(self):
        real = _real(T0, t=20.5, h=41.0)
        body = to_csv(rows_from_snapshot([real, real.carried_forward(T0 + 1000)]))
        lines = body.strip().split("\n")

        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[1].endswith(",20.5,41.0,REAL")
        assert lines[2].endswith("MISSING → filled from last value")
        assert lines[1].startswith("2023-11-14T22:13:20.000")

    def test_csv_header_only_when_empty(self):
        assert to_csv([]) == "time,temperature,humidity,status\n"
