"""Turns raw event rows into typed samples.

This is the only place that looks inside the untyped ``props`` bag. Every
field that is missing, of the wrong type, non-finite or negative is treated
as absent; classification never raises on row content.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Union
from urllib.parse import quote, urlsplit

from shared.constants import EventNames
from src.domain.rows import ensure_aware, to_epoch_ms

UNKNOWN = "[unknown]"


@dataclass(frozen=True)
class RequestSample:
    duration: float | None
    path: str | None
    method: str
    is_error: bool


@dataclass(frozen=True)
class PageViewSample:
    path: str | None


@dataclass(frozen=True)
class PaintSample:
    fcp_seconds: float | None


@dataclass(frozen=True)
class ResourceEntry:
    name: str
    initiator_type: str
    duration: float


@dataclass(frozen=True)
class ResourceBatchSample:
    entries: tuple[ResourceEntry, ...]


@dataclass(frozen=True)
class ListeningSample:
    lcp_seconds: float | None
    cls: float | None


Sample = Union[
    RequestSample, PageViewSample, PaintSample, ResourceBatchSample, ListeningSample
]


_RADIX_PREFIXES = {"0x": 16, "0o": 8, "0b": 2}

# Path characters left as-is when re-encoding an absolute URL path
_PATH_SAFE = "/%:@!$&'()*+,;=[]^|"


def to_number(value: Any) -> float | None:
    """Finite number or numeric string as float, otherwise None.

    Blank strings count as 0 and ``0x`` / ``0o`` / ``0b`` literals are read in
    their radix.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        if "_" in value:  # float() and int() accept digit separators
            return None
        text = value.strip()
        if not text:
            return 0.0
        radix = _RADIX_PREFIXES.get(text[:2].lower())
        if radix is not None:
            digits = text[2:]
            if not (digits.isascii() and digits.isalnum()):
                return None
            try:
                return float(int(digits, radix))
            except (ValueError, OverflowError):
                return None
        value = text
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def to_non_negative(value: Any) -> float | None:
    number = to_number(value)
    if number is None or number < 0:
        return None
    return number


def _is_dot(segment: str, dots: int) -> bool:
    return segment.lower().replace("%2e", ".") == "." * dots


def normalize_url_path(path: str) -> str:
    """Path of an absolute URL as a browser reports it.

    Dot segments are resolved and characters outside the path set are
    percent-encoded, so ``/api/../a b`` becomes ``/a%20b``.
    """
    segments = path.replace("\\", "/").split("/")[1:] or [""]
    output: list[str] = []
    last = len(segments) - 1
    for i, segment in enumerate(segments):
        if _is_dot(segment, 2):
            if output:
                output.pop()
            if i == last:
                output.append("")
        elif _is_dot(segment, 1):
            if i == last:
                output.append("")
        else:
            output.append(segment)
    return quote("/" + "/".join(output), safe=_PATH_SAFE)


def extract_path(url_like: Any) -> str | None:
    """Pathname of an absolute URL, or the part of a relative one before ``?``.

    ``https://a.com/api/v1/x?foo=1`` and ``/api/v1/x?foo=1`` both give
    ``/api/v1/x``.
    """
    if not isinstance(url_like, str) or not url_like.strip():
        return None
    if url_like.startswith(("http://", "https://")):
        try:
            parts = urlsplit(url_like)
        except ValueError:
            return None
        if not parts.netloc:
            return None
        return normalize_url_path(parts.path)
    return url_like.split("?", 1)[0] or "/"


def to_http_method(value: Any) -> str:
    if not isinstance(value, str):
        return "GET"
    return value.strip().upper() or "GET"


def normalize_initiator_type(value: Any) -> str:
    initiator = value.strip().lower() if isinstance(value, str) else ""
    return "img" if initiator == "image" else initiator


def to_resource_entries(value: Any) -> tuple[ResourceEntry, ...]:
    if not isinstance(value, list):
        return ()
    entries = []
    for item in value:
        if not isinstance(item, Mapping):
            continue
        duration = to_non_negative(item.get("duration"))
        if duration is None:
            continue
        name = item.get("name")
        name = name.strip() if isinstance(name, str) else ""
        entries.append(
            ResourceEntry(
                name=name or UNKNOWN,
                initiator_type=normalize_initiator_type(item.get("initiatorType")),
                duration=duration,
            )
        )
    return tuple(entries)


def parse_occurred_at(value: Any) -> int | None:
    """Epoch milliseconds of a row timestamp, or None when unparseable.

    Accepts datetimes, ISO-8601 strings (naive values are UTC) and epoch-ms
    numbers.
    """
    if isinstance(value, datetime):
        return to_epoch_ms(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_epoch_ms(ensure_aware(datetime.fromisoformat(text)))
        except ValueError:
            return None
    return None


def _is_error(props: Mapping[str, Any]) -> bool:
    if props.get("ok") is False:
        return True
    status = to_number(props.get("status"))
    return status is not None and status >= 400


def _request(props: Mapping[str, Any]) -> RequestSample:
    return RequestSample(
        duration=to_non_negative(props.get("duration")),
        path=extract_path(props.get("url")),
        method=to_http_method(props.get("method")),
        is_error=_is_error(props),
    )


def _page_view(props: Mapping[str, Any]) -> PageViewSample:
    return PageViewSample(path=extract_path(props.get("url")))


def _paint(props: Mapping[str, Any]) -> PaintSample:
    paints = props.get("paints")
    fcp_ms = to_non_negative(paints.get("fcp")) if isinstance(paints, Mapping) else None
    return PaintSample(fcp_seconds=None if fcp_ms is None else fcp_ms / 1000)


def _resources(props: Mapping[str, Any]) -> ResourceBatchSample:
    return ResourceBatchSample(entries=to_resource_entries(props.get("resources")))


def _listening(props: Mapping[str, Any]) -> ListeningSample:
    lcp_ms = to_non_negative(props.get("lcp"))
    return ListeningSample(
        lcp_seconds=None if lcp_ms is None else lcp_ms / 1000,
        cls=to_non_negative(props.get("cls")),
    )


_CLASSIFIERS: dict[str, Callable[[Mapping[str, Any]], Sample]] = {
    EventNames.REQUEST: _request,
    EventNames.PAGE_VIEW: _page_view,
    EventNames.PERFORMANCE_PAINT: _paint,
    EventNames.PERFORMANCE_RESOURCE: _resources,
    EventNames.PERFORMANCE_LISTENING: _listening,
}


def classify(event_name: Any, props: Any) -> Sample | None:
    """Typed sample for a known event name, None for anything else."""
    classifier = _CLASSIFIERS.get(event_name) if isinstance(event_name, str) else None
    if classifier is None:
        return None
    return classifier(props if isinstance(props, Mapping) else {})
