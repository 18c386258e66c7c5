"""Percentile helpers shared by the KPI, ranking and chart builders."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Iterable, Sequence

# Wide enough to quantize any finite double without overflowing the context.
_FIXED_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def to_fixed(value: float, digits: int) -> float:
    """Round half-up on the exact binary value of ``value``.

    Matches the display rounding used by the dashboard front-end, where
    ``0.125`` becomes ``0.13`` (``round()`` would give ``0.12``).
    """
    if not math.isfinite(value):
        return value
    exponent = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(exponent, context=_FIXED_CONTEXT))


def quantile(sorted_values: Sequence[float], q: float) -> float:
    """Linearly interpolated quantile of an ascending sequence.

    Returns 0 for an empty sequence and the single element for a
    one-element sequence.
    """
    if not sorted_values:
        return 0
    if len(sorted_values) == 1:
        return sorted_values[0]
    idx = (len(sorted_values) - 1) * q
    lo = math.floor(idx)
    hi = math.ceil(idx)
    lo_value = sorted_values[lo]
    if lo == hi:
        return lo_value
    ratio = idx - lo
    return lo_value * (1 - ratio) + sorted_values[hi] * ratio


def percentile3(values: Iterable[float]) -> dict[str, float]:
    """p75 / p90 / p99 of unsorted samples, fixed to 4 decimals."""
    ordered = sorted(values)
    return {
        "p75": to_fixed(quantile(ordered, 0.75), 4),
        "p90": to_fixed(quantile(ordered, 0.9), 4),
        "p99": to_fixed(quantile(ordered, 0.99), 4),
    }
