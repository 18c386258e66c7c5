"""Per-window series for the dashboard charts."""

from __future__ import annotations

from typing import Sequence

from src.domain.models import (
    ClsTrendPoint,
    DashboardCharts,
    FcpLcpTrendPoint,
    PercentileTrendPoint,
    RequestErrorTrendPoint,
)
from src.engine.aggregator import WindowBucket
from src.engine.quantile import percentile3, quantile, to_fixed


def _latency_point(label: str, samples: Sequence[float]) -> PercentileTrendPoint:
    ordered = sorted(samples)
    return PercentileTrendPoint(
        time_window=label,
        p75=to_fixed(quantile(ordered, 0.75), 2),
        p95=to_fixed(quantile(ordered, 0.95), 2),
        p99=to_fixed(quantile(ordered, 0.99), 2),
    )


def request_error_trend(buckets: Sequence[WindowBucket]) -> list[RequestErrorTrendPoint]:
    return [
        RequestErrorTrendPoint(
            time_window=b.label,
            requests=b.request_count,
            error_rate=(
                to_fixed(b.error_count / b.request_count, 4) if b.request_count else 0
            ),
        )
        for b in buckets
    ]


def latency_percentile_trend(
    buckets: Sequence[WindowBucket],
) -> list[PercentileTrendPoint]:
    return [_latency_point(b.label, b.durations) for b in buckets]


def resource_percentile_trend(
    buckets: Sequence[WindowBucket],
) -> list[PercentileTrendPoint]:
    return [_latency_point(b.label, b.resource_durations) for b in buckets]


def fcp_lcp_trend(buckets: Sequence[WindowBucket]) -> list[FcpLcpTrendPoint]:
    points = []
    for b in buckets:
        fcp = percentile3(b.fcp_seconds)
        lcp = percentile3(b.lcp_seconds)
        points.append(
            FcpLcpTrendPoint(
                time_window=b.label,
                fcp_p75=to_fixed(fcp["p75"], 3),
                fcp_p90=to_fixed(fcp["p90"], 3),
                fcp_p99=to_fixed(fcp["p99"], 3),
                lcp_p75=to_fixed(lcp["p75"], 3),
                lcp_p90=to_fixed(lcp["p90"], 3),
                lcp_p99=to_fixed(lcp["p99"], 3),
            )
        )
    return points


def cls_trend(buckets: Sequence[WindowBucket]) -> list[ClsTrendPoint]:
    points = []
    for b in buckets:
        cls = percentile3(b.cls_values)
        points.append(
            ClsTrendPoint(
                time_window=b.label,
                cls_p75=cls["p75"],
                cls_p90=cls["p90"],
                cls_p99=cls["p99"],
            )
        )
    return points


def build_charts(buckets: Sequence[WindowBucket]) -> DashboardCharts:
    return DashboardCharts(
        request_error_trend=request_error_trend(buckets),
        latency_percentile_trend=latency_percentile_trend(buckets),
        resource_percentile_trend=resource_percentile_trend(buckets),
        fcp_lcp_trend=fcp_lcp_trend(buckets),
        cls_trend=cls_trend(buckets),
    )
