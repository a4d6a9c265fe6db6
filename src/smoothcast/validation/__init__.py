"""src/smoothcast/validation/__init__.py"""

from __future__ import annotations

from .checks import CheckResult, validate_series, validate_series_frame
from .schemas import FORECAST_OUTPUT, LEADERBOARD_OUTPUT, SERIES_INPUT, SchemaSpec, assert_schema

__all__ = [
    # checks
    "CheckResult",
    "validate_series",
    "validate_series_frame",
    # schemas
    "SchemaSpec",
    "assert_schema",
    "SERIES_INPUT",
    "FORECAST_OUTPUT",
    "LEADERBOARD_OUTPUT",
]
