"""src/smoothcast/validation/checks.py"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from smoothcast.common.errors import InsufficientDataError, InvalidInputError
from smoothcast.validation.schemas import SERIES_INPUT, SchemaSpec, assert_schema


@dataclass(frozen=True)
class CheckResult:
    ok: bool
    errors: tuple[str, ...]
    n_observations: int = 0
    required: int = 0

    @property
    def too_short(self) -> bool:
        return self.n_observations < self.required

    def raise_if_failed(self) -> None:
        if self.ok:
            return
        msg = "\n".join(self.errors) if self.errors else "Validation failed."
        # a short but otherwise clean series is recoverable (callers fall back)
        if self.too_short and len(self.errors) == 1:
            raise InsufficientDataError(msg, n_observations=self.n_observations, required=self.required)
        raise InvalidInputError(msg)


def check_equal_length(values: np.ndarray, timestamps: np.ndarray | None) -> list[str]:
    if timestamps is None or len(timestamps) == len(values):
        return []
    return [f"timestamps and values differ in length: {len(timestamps)} vs {len(values)}"]


def check_finite(values: np.ndarray) -> list[str]:
    bad = ~np.isfinite(values)
    n_bad = int(bad.sum())
    if n_bad:
        sample = np.flatnonzero(bad)[:10].tolist()
        return [f"values: {n_bad} NaN or infinite entries; positions={sample}"]
    return []


def check_min_length(values: np.ndarray, min_length: int) -> list[str]:
    if values.size < int(min_length):
        return [f"series has {values.size} observations; at least {int(min_length)} required"]
    return []


def check_unique_timestamps(timestamps: np.ndarray | None) -> list[str]:
    if timestamps is None or len(timestamps) == 0:
        return []
    s = pd.Series(timestamps)
    dup_mask = s.duplicated(keep=False)
    n_dup = int(dup_mask.sum())
    if n_dup:
        sample = s[dup_mask].unique()[:10].tolist()
        return [f"duplicate timestamps; dup_rows={n_dup}; sample={sample}"]
    return []


def validate_series(
    values: Sequence[float] | np.ndarray,
    timestamps: Sequence[float] | np.ndarray | None = None,
    *,
    min_length: int = 2,
) -> CheckResult:
    """
    Shape/content checks run before any fitting:
    - timestamps and values have equal length (if timestamps given)
    - values are finite
    - at least `min_length` observations
    - timestamps are unique
    """
    try:
        v = np.asarray(values, dtype=float).ravel()
    except (TypeError, ValueError) as e:
        return CheckResult(ok=False, errors=(f"values are not numeric: {e}",))
    t = None if timestamps is None else np.asarray(timestamps).ravel()

    errors: list[str] = []
    errors.extend(check_equal_length(v, t))
    if errors:
        # lengths disagree: pairing-based checks would be meaningless
        return CheckResult(ok=False, errors=tuple(errors))

    errors.extend(check_finite(v))
    errors.extend(check_unique_timestamps(t))
    short = check_min_length(v, min_length)
    errors.extend(short)

    return CheckResult(
        ok=(len(errors) == 0),
        errors=tuple(errors),
        n_observations=int(v.size),
        required=int(min_length),
    )


def validate_series_frame(
    df: pd.DataFrame,
    *,
    schema: SchemaSpec = SERIES_INPUT,
    value_col: str = "value",
    time_col: str | None = "timestamp",
    min_length: int = 2,
) -> CheckResult:
    try:
        assert_schema(df, schema)
    except KeyError as e:
        # If schema fails, don't attempt downstream checks that may crash
        return CheckResult(ok=False, errors=(str(e),))

    values = pd.to_numeric(df[value_col], errors="coerce").to_numpy(dtype=float)
    timestamps = None if time_col is None else df[time_col].to_numpy()
    return validate_series(values, timestamps, min_length=min_length)
