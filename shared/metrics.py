"""Unified metrics helpers.

Thin wrappers around prometheus_client primitives with service name
prefixing, optional labels and basic naming validation. The default registry
is used so the `/metrics` endpoint can expose everything with
``generate_latest()``.
"""

from __future__ import annotations

import re
from typing import Sequence

from prometheus_client import Counter, Histogram

_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

def _validate(name: str) -> str:
    if not _NAME_RE.match(name):  # pragma: no cover - simple guard
        raise ValueError(
            f"Invalid metric name '{name}'. Use snake_case alphanumerics/underscores."
        )
    return name

def _prefix(name: str, service: str | None) -> str:
    if service and not name.startswith(service + "_"):
        return f"{service}_{name}"
    return name

def get_counter(
    name: str,
    documentation: str,
    service: str | None = None,
    labelnames: Sequence[str] = (),
) -> Counter:
    return Counter(_validate(_prefix(name, service)), documentation, labelnames)

def get_histogram(
    name: str,
    documentation: str,
    service: str | None = None,
    buckets: list[float] | None = None,
    labelnames: Sequence[str] = (),
) -> Histogram:
    full_name = _validate(_prefix(name, service))
    if buckets is None:
        return Histogram(full_name, documentation, labelnames)
    return Histogram(full_name, documentation, labelnames, buckets=buckets)

__all__ = [
    "get_counter",
    "get_histogram",
]
