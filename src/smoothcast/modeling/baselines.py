"""src/smoothcast/modeling/baselines.py"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class NaiveLastModel:
    """Forecast = last observed value repeated."""
    last_value: float
    residuals: np.ndarray
    fitted: np.ndarray

    def predict(self, steps: int) -> np.ndarray:
        steps = int(steps)
        if steps < 0:
            raise ValueError("steps must be >= 0")
        return np.full(shape=(steps,), fill_value=float(self.last_value), dtype=float)


def fit_naive_last(y_train: np.ndarray) -> NaiveLastModel:
    """
    One-step naive fit: fitted[t] = y[t-1] (NaN at t=0), residuals are the
    differences y[t] - y[t-1] (empty for a single observation).
    """
    y = np.asarray(y_train, dtype=float)
    if y.size == 0:
        raise ValueError("Cannot fit NaiveLastModel on empty series.")
    fitted = np.full(y.size, np.nan, dtype=float)
    fitted[1:] = y[:-1]
    return NaiveLastModel(last_value=float(y[-1]), residuals=np.diff(y), fitted=fitted)
