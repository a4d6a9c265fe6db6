"""src/smoothcast/validation/schemas.py"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import pandas as pd


@dataclass(frozen=True)
class SchemaSpec:
    """Minimal schema specification for a DataFrame."""
    name: str
    required_cols: tuple[str, ...]
    dtype_hints: dict[str, str] | None = None  # e.g. {"timestamp": "int", "value": "float"}


def _missing_cols(df: pd.DataFrame, required: Iterable[str]) -> list[str]:
    req = list(required)
    return [c for c in req if c not in df.columns]


# Canonical series table produced by io.readers.read_series_csv
SERIES_INPUT = SchemaSpec(
    name="series_input",
    required_cols=("timestamp", "value"),
    dtype_hints={"timestamp": "int", "value": "float"},
)

# ForecastResult.to_frame() with the default value column
FORECAST_OUTPUT = SchemaSpec(
    name="forecast_output",
    required_cols=("step", "forecast", "model", "confidence"),
    dtype_hints={"step": "int", "forecast": "float", "model": "string", "confidence": "float"},
)

LEADERBOARD_OUTPUT = SchemaSpec(
    name="leaderboard_output",
    required_cols=("rank", "index", "model", "alpha", "beta", "gamma", "damping", "rmse", "mae"),
)


def assert_schema(df: pd.DataFrame, spec: SchemaSpec) -> None:
    """Raise a KeyError if required columns are missing."""
    missing = _missing_cols(df, spec.required_cols)
    if missing:
        raise KeyError(
            f"{spec.name}: missing columns {missing}. Found: {list(df.columns)}"
        )
