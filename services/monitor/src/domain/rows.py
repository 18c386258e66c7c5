"""Inputs of the dashboard engine: the query and the rows fetched for it."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any

from shared.constants import MonitorEnv

from .errors import InvalidQueryError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_epoch_ms(value: datetime) -> int:
    return (ensure_aware(value) - EPOCH) // _ONE_MS


def from_epoch_ms(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=ms)


def iso_label(ms: int) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. ``2024-05-01T10:00:00.000Z``."""
    dt = from_epoch_ms(ms)
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{dt.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class DashboardQuery:
    """Time range ``[start, end]`` plus optional app / environment filters."""

    start: datetime
    end: datetime
    app_id: str | None = None
    env: MonitorEnv | None = None

    def __post_init__(self):
        object.__setattr__(self, "start", ensure_aware(self.start))
        object.__setattr__(self, "end", ensure_aware(self.end))
        if self.start > self.end:
            raise InvalidQueryError("Invalid query: from must be earlier than to")

    @property
    def start_ms(self) -> int:
        return to_epoch_ms(self.start)

    @property
    def end_ms(self) -> int:
        return to_epoch_ms(self.end)

    def previous_period(self) -> "DashboardQuery":
        """Immediately preceding range of the same length (at least 1 ms)."""
        span = max(_ONE_MS, self.end - self.start)
        return replace(self, start=self.start - span, end=self.start)


@dataclass(frozen=True)
class MonitorEventRow:
    occurred_at: Any  # datetime, ISO string or epoch ms; parsed leniently
    event_name: str
    props: dict[str, Any] | None = field(default=None)
    app_id: str | None = None
    env: str | None = None


@dataclass(frozen=True)
class MonitorErrorRow:
    occurred_at: str
    message: str
    id: str | int | None = None
    error_type: str | None = None
    filename: str | None = None
    lineno: int | None = None
    colno: int | None = None
    stack: str | None = None
    app_id: str | None = None
    env: str | None = None
