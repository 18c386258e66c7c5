"""Top-N rankings of routes and slow requests / resources.

Ties keep first-seen order (sorts are stable over insertion-ordered dicts).
"""

from __future__ import annotations

from typing import Mapping

from src.domain.models import RouteMetric, SlowResourceMetric, SlowRouteMetric
from src.engine.aggregator import KeyedDurationStats, ResourceDurationStats
from src.engine.quantile import quantile, to_fixed

SLOW_QUANTILE = 0.95


def _p95(durations: list[float]) -> float:
    return to_fixed(quantile(sorted(durations), SLOW_QUANTILE), 2)


def to_route_metrics(counter: Mapping[str, int], limit: int) -> list[RouteMetric]:
    """Share of each top-N route, relative to the top-N total only."""
    entries = sorted(counter.items(), key=lambda item: item[1], reverse=True)[:limit]
    total = sum(count for _, count in entries)
    if not total:
        return []
    return [
        RouteMetric(path=path, percentage=to_fixed(count / total * 100, 2))
        for path, count in entries
    ]


def to_slow_route_metrics(
    counter: Mapping[str, KeyedDurationStats], limit: int
) -> list[SlowRouteMetric]:
    metrics = [
        SlowRouteMetric(
            path=path,
            avg_duration_ms=_p95(stats.durations),
            request_count=len(stats.durations),
        )
        for path, stats in counter.items()
    ]
    metrics.sort(key=lambda m: m.avg_duration_ms, reverse=True)
    return metrics[:limit]


def to_slow_resource_metrics(
    counter: Mapping[str, ResourceDurationStats], limit: int
) -> list[SlowResourceMetric]:
    metrics = [
        SlowResourceMetric(
            name=stats.name,
            initiator_type=stats.initiator_type,
            avg_duration_ms=_p95(stats.durations),
            sample_count=len(stats.durations),
        )
        for stats in counter.values()
    ]
    metrics.sort(key=lambda m: m.avg_duration_ms, reverse=True)
    return metrics[:limit]
