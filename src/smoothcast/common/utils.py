"""
src/smoothcast/common/utils.py

Small conversion helpers used by config and CLI code.
"""

from __future__ import annotations

import math
from typing import Any, Iterable


def safe_int(value: Any, default: int) -> int:
    """Best-effort int conversion with fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def safe_float(value: Any, default: float) -> float:
    """Best-effort float conversion with fallback."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def float_tuple(values: Iterable[Any] | None, default: tuple[float, ...]) -> tuple[float, ...]:
    """Convert a YAML list to a tuple of floats; empty or missing -> default."""
    if not values:
        return default
    return tuple(float(v) for v in values)


def none_if_nan(value: float | None) -> float | None:
    """JSON-friendly float: NaN and infinities become None."""
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None
