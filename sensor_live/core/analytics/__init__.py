from .trend import (
    MetricSummary,
    SummaryStats,
    TrendAggregator,
    TrendSeries,
    moving_average,
    summarize,
)

__all__ = [
    "MetricSummary",
    "SummaryStats",
    "TrendAggregator",
    "TrendSeries",
    "moving_average",
    "summarize",
]
