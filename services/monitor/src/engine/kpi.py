"""Period KPIs and their change against the preceding period."""

from __future__ import annotations

import math
from typing import Sequence

from src.domain.models import DashboardKpi, DashboardKpiTrends
from src.engine.aggregator import WindowBucket
from src.engine.quantile import quantile, to_fixed

KPI_FIELDS = ("requests", "error_rate", "p75_latency", "p95_latency", "p99_latency")


def build_dashboard_kpis(
    buckets: Sequence[WindowBucket], global_durations: Sequence[float]
) -> DashboardKpi:
    """Latency percentiles come from the pooled samples of the whole range."""
    total_requests = sum(b.request_count for b in buckets)
    total_errors = sum(b.error_count for b in buckets)
    ordered = sorted(global_durations)
    return DashboardKpi(
        requests=total_requests,
        error_rate=total_errors / total_requests if total_requests else 0,
        p75_latency=to_fixed(quantile(ordered, 0.75), 2),
        p95_latency=to_fixed(quantile(ordered, 0.95), 2),
        p99_latency=to_fixed(quantile(ordered, 0.99), 2),
    )


def trend_percent(current: float, previous: float, precision: int = 2) -> float:
    if not (math.isfinite(current) and math.isfinite(previous)):
        return 0
    if previous == 0:
        return 0 if current == 0 else 100
    return to_fixed((current - previous) / previous * 100, precision)


def build_kpi_trends(
    current: DashboardKpi, previous: DashboardKpi
) -> DashboardKpiTrends:
    return DashboardKpiTrends(
        **{
            name: trend_percent(getattr(current, name), getattr(previous, name))
            for name in KPI_FIELDS
        }
    )
