"""Aligned time windows for dashboard charts.

Ranges longer than 48 hours are split into daily windows aligned to local
midnight, shorter ones into hourly windows. Steps are fixed-length (1h / 24h)
from the aligned start through the aligned end inclusive, so there is always
at least one window.
"""

from __future__ import annotations

from bisect import bisect_right
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import NamedTuple, Sequence

from src.domain.errors import InvalidQueryError
from src.domain.rows import from_epoch_ms, iso_label, to_epoch_ms

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS
DAY_WINDOW_THRESHOLD_MS = 48 * HOUR_MS


class WindowGranularity(str, Enum):
    HOUR = "hour"
    DAY = "day"

    @property
    def step_ms(self) -> int:
        return DAY_MS if self is WindowGranularity.DAY else HOUR_MS


class Window(NamedTuple):
    start: int  # epoch ms
    label: str


def resolve_granularity(start_ms: int, end_ms: int) -> WindowGranularity:
    duration_ms = max(0, end_ms - start_ms)
    if duration_ms > DAY_WINDOW_THRESHOLD_MS:
        return WindowGranularity.DAY
    return WindowGranularity.HOUR


def align(ms: int, granularity: WindowGranularity, tz: tzinfo) -> int:
    """Floor ``ms`` to the start of its hour, or to midnight in ``tz``."""
    local = from_epoch_ms(ms).astimezone(tz)
    if granularity is WindowGranularity.DAY:
        local = local.replace(hour=0, minute=0, second=0, microsecond=0)
    else:
        local = local.replace(minute=0, second=0, microsecond=0)
    return to_epoch_ms(local)


def build_windows(
    start: datetime, end: datetime, tz: tzinfo = timezone.utc
) -> list[Window]:
    start_ms = to_epoch_ms(start)
    end_ms = to_epoch_ms(end)
    if start_ms > end_ms:
        raise InvalidQueryError("Invalid query: from must be earlier than to")

    granularity = resolve_granularity(start_ms, end_ms)
    step = granularity.step_ms
    ts = align(start_ms, granularity, tz)
    last = align(end_ms, granularity, tz)

    windows = []
    while ts <= last:
        windows.append(Window(start=ts, label=iso_label(ts)))
        ts += step
    return windows


def find_window_index(starts: Sequence[int], timestamp_ms: int) -> int:
    """Index of the last window starting at or before ``timestamp_ms``.

    There is no upper bound: anything after the last start belongs to the last
    window. Returns -1 when the timestamp precedes every window.
    """
    return bisect_right(starts, timestamp_ms) - 1
