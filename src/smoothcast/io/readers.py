"""src/smoothcast/io/readers.py"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from smoothcast.common.errors import InvalidInputError


_EPOCH = pd.Timestamp("1970-01-01", tz="UTC")


def read_csv(path: Path, *, dtype: dict[str, Any] | None = None) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Missing file:\n{path}")
    return pd.read_csv(path, dtype=dtype)


def to_epoch_ms(s: pd.Series) -> pd.Series:
    """Numeric columns pass through as float; anything else is parsed as datetimes (UTC epoch ms)."""
    numeric = pd.to_numeric(s, errors="coerce")
    if numeric.notna().all():
        return numeric.astype(float)
    dt = pd.to_datetime(s, utc=True, errors="coerce")
    if dt.isna().any():
        bad = s[dt.isna()].astype(str).unique()[:10].tolist()
        raise InvalidInputError(f"Unparseable timestamps: {bad}")
    return ((dt - _EPOCH) // pd.Timedelta(milliseconds=1)).astype("int64")


def read_series_csv(path: Path, value_col: str, time_col: str | None = None) -> pd.DataFrame:
    """
    Standardize a single series into:
        timestamp, value

    value is coerced to float (unparseable cells become NaN and are reported
    by validation, never dropped here). Without a time column the row
    position 0..n-1 is used as timestamp.
    """
    df = read_csv(Path(path))
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]

    if value_col not in df.columns:
        raise KeyError(f"Missing value column '{value_col}'. Found columns: {list(df.columns)}")
    if time_col is not None and time_col not in df.columns:
        raise KeyError(f"Missing time column '{time_col}'. Found columns: {list(df.columns)}")

    out = pd.DataFrame({"value": pd.to_numeric(df[value_col], errors="coerce").astype(float)})
    if time_col is None:
        out.insert(0, "timestamp", np.arange(len(df), dtype="int64"))
    else:
        out.insert(0, "timestamp", to_epoch_ms(df[time_col]).to_numpy())
    return out.reset_index(drop=True)
