"""Folds a batch of event rows into per-window and keyed accumulators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from typing import Iterable

from src.domain.rows import DashboardQuery, MonitorEventRow
from src.engine.classifier import (
    UNKNOWN,
    ListeningSample,
    PageViewSample,
    PaintSample,
    RequestSample,
    ResourceBatchSample,
    classify,
    parse_occurred_at,
)
from src.engine.windows import Window, build_windows, find_window_index

API_PREFIX = "/api"


@dataclass
class WindowBucket:
    label: str
    start: int
    request_count: int = 0
    error_count: int = 0
    durations: list[float] = field(default_factory=list)
    resource_durations: list[float] = field(default_factory=list)
    fcp_seconds: list[float] = field(default_factory=list)
    lcp_seconds: list[float] = field(default_factory=list)
    cls_values: list[float] = field(default_factory=list)

    @classmethod
    def from_window(cls, window: Window) -> "WindowBucket":
        return cls(label=window.label, start=window.start)


@dataclass
class KeyedDurationStats:
    key: str
    durations: list[float] = field(default_factory=list)


@dataclass
class ResourceDurationStats(KeyedDurationStats):
    name: str = UNKNOWN
    initiator_type: str = ""


@dataclass
class AggregationResult:
    buckets: list[WindowBucket]
    global_durations: list[float] = field(default_factory=list)
    api_routes: dict[str, int] = field(default_factory=dict)
    page_routes: dict[str, int] = field(default_factory=dict)
    request_durations: dict[str, KeyedDurationStats] = field(default_factory=dict)
    api_durations: dict[str, KeyedDurationStats] = field(default_factory=dict)
    resource_durations: dict[str, ResourceDurationStats] = field(
        default_factory=dict
    )
    rows_aggregated: int = 0
    rows_dropped: int = 0


def _add_duration(
    counter: dict[str, KeyedDurationStats], key: str, duration: float
) -> None:
    stats = counter.get(key)
    if stats is None:
        stats = counter[key] = KeyedDurationStats(key=key)
    stats.durations.append(duration)


class WindowAggregator:
    """Accumulates rows for one query range.

    Buckets are mutated in place, so an instance must only be fed from one
    thread; aggregate current and previous periods with separate instances.
    """

    def __init__(self, query: DashboardQuery, tz: tzinfo = timezone.utc):
        windows = build_windows(query.start, query.end, tz)
        self._starts = [w.start for w in windows]
        self.result = AggregationResult(
            buckets=[WindowBucket.from_window(w) for w in windows]
        )

    def add(self, row: MonitorEventRow) -> bool:
        """Fold one row; returns False when it could not be placed in a window."""
        occurred_ms = parse_occurred_at(row.occurred_at)
        idx = -1 if occurred_ms is None else find_window_index(self._starts, occurred_ms)
        if idx < 0:
            self.result.rows_dropped += 1
            return False

        self.result.rows_aggregated += 1
        bucket = self.result.buckets[idx]
        sample = classify(row.event_name, row.props)
        if isinstance(sample, RequestSample):
            self._add_request(bucket, sample)
        elif isinstance(sample, PageViewSample):
            if sample.path:
                routes = self.result.page_routes
                routes[sample.path] = routes.get(sample.path, 0) + 1
        elif isinstance(sample, PaintSample):
            if sample.fcp_seconds is not None:
                bucket.fcp_seconds.append(sample.fcp_seconds)
        elif isinstance(sample, ResourceBatchSample):
            self._add_resources(bucket, sample)
        elif isinstance(sample, ListeningSample):
            if sample.lcp_seconds is not None:
                bucket.lcp_seconds.append(sample.lcp_seconds)
            if sample.cls is not None:
                bucket.cls_values.append(sample.cls)
        return True

    def add_all(self, rows: Iterable[MonitorEventRow]) -> AggregationResult:
        for row in rows:
            self.add(row)
        return self.result

    def _add_request(self, bucket: WindowBucket, sample: RequestSample) -> None:
        result = self.result
        bucket.request_count += 1
        if sample.is_error:
            bucket.error_count += 1

        duration = sample.duration
        if duration is not None:
            bucket.durations.append(duration)
            result.global_durations.append(duration)
            request_key = f"{sample.method} {sample.path or UNKNOWN}"
            _add_duration(result.request_durations, request_key, duration)

        path = sample.path
        if path and path.startswith(API_PREFIX):
            result.api_routes[path] = result.api_routes.get(path, 0) + 1
            if duration is not None:
                _add_duration(result.api_durations, path, duration)

    def _add_resources(self, bucket: WindowBucket, sample: ResourceBatchSample) -> None:
        counter = self.result.resource_durations
        for entry in sample.entries:
            bucket.resource_durations.append(entry.duration)
            key = f"{entry.initiator_type}|{entry.name}"
            stats = counter.get(key)
            if stats is None:
                stats = counter[key] = ResourceDurationStats(
                    key=key, name=entry.name, initiator_type=entry.initiator_type
                )
            stats.durations.append(entry.duration)


def aggregate_rows(
    rows: Iterable[MonitorEventRow],
    query: DashboardQuery,
    tz: tzinfo = timezone.utc,
) -> AggregationResult:
    return WindowAggregator(query, tz).add_all(rows)
