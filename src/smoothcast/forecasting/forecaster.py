"""src/smoothcast/forecasting/forecaster.py"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd
from scipy.stats import norm

from smoothcast.common.errors import InvalidParametersError
from smoothcast.common.utils import none_if_nan
from smoothcast.modeling.baselines import fit_naive_last
from smoothcast.modeling.params import SmoothingParameters
from smoothcast.modeling.smoothing import FittedState, check_horizon, point_forecast


logger = logging.getLogger(__name__)

# Two-sided normal quantiles used for the standard confidence levels.
Z_TABLE: dict[float, float] = {
    0.80: 1.282,
    0.90: 1.645,
    0.95: 1.96,
    0.99: 2.576,
}


def z_for(confidence: float) -> float:
    """
    z such that P(|Z| <= z) = confidence.

    The four standard levels come from Z_TABLE; anything else in (0, 1) is
    computed as norm.ppf((1 + c) / 2).
    """
    c = float(confidence)
    if not math.isfinite(c) or not (0.0 < c < 1.0):
        raise InvalidParametersError(f"confidence must be in (0, 1), got {confidence!r}")
    for level, z in Z_TABLE.items():
        if abs(c - level) < 1e-9:
            return z
    return float(norm.ppf((1.0 + c) / 2.0))


def residual_variance(residuals: Iterable[float]) -> float:
    """Sample variance (ddof=1) of residuals; NaN with fewer than 2 of them."""
    res = np.asarray(list(residuals), dtype=float)
    if res.size < 2:
        return float("nan")
    return float(np.var(res, ddof=1))


def interval_half_widths(variance: float, horizon: int, confidence: float, *, trended: bool) -> np.ndarray:
    """
    z * sqrt(var * (1 + 0.1h) * (1 + sqrt(h)/10)) for trended models,
    z * sqrt(var * (1 + sqrt(h)/10)) otherwise.
    """
    H = check_horizon(horizon)
    z = z_for(confidence)
    steps = np.arange(1, H + 1, dtype=float)
    inflation = 1.0 + np.sqrt(steps) / 10.0
    if trended:
        inflation = inflation * (1.0 + 0.1 * steps)
    if not math.isfinite(variance):
        return np.full(H, np.nan, dtype=float)
    return z * np.sqrt(variance * inflation)


@dataclass(frozen=True)
class ForecastResult:
    """
    Point forecasts with prediction intervals.

    lower/upper are NaN when the residual variance could not be estimated.
    params is None for the naive fallback.
    """
    point: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    confidence: float
    residual_variance: float
    label: str
    params: SmoothingParameters | None = None

    @property
    def horizon(self) -> int:
        return int(self.point.size)

    def intervals(self) -> list[dict[str, float | None]]:
        return [
            {"lower": none_if_nan(lo), "upper": none_if_nan(hi), "point": none_if_nan(p)}
            for lo, hi, p in zip(self.lower, self.upper, self.point)
        ]

    def to_frame(self, index: Iterable | None = None, value_col: str = "forecast") -> pd.DataFrame:
        steps = list(index) if index is not None else list(range(1, self.horizon + 1))
        pct = int(round(self.confidence * 100))
        return pd.DataFrame(
            {
                "step": steps,
                value_col: self.point.astype(float),
                f"{value_col}_lower_{pct}": self.lower.astype(float),
                f"{value_col}_upper_{pct}": self.upper.astype(float),
                "model": self.label,
                "confidence": float(self.confidence),
            }
        )


def _build_result(
    points: np.ndarray,
    variance: float,
    confidence: float,
    *,
    trended: bool,
    label: str,
    params: SmoothingParameters | None,
) -> ForecastResult:
    half = interval_half_widths(variance, points.size, confidence, trended=trended)
    if np.isnan(half).all():
        logger.warning("%s: fewer than 2 residuals, prediction intervals left undefined", label)
    return ForecastResult(
        point=points,
        lower=points - half,
        upper=points + half,
        confidence=float(confidence),
        residual_variance=float(variance),
        label=label,
        params=params,
    )


def forecast(state: FittedState, horizon: int, confidence: float = 0.95) -> ForecastResult:
    points = point_forecast(state, horizon)
    return _build_result(
        points,
        residual_variance(state.residuals),
        confidence,
        trended=state.trend is not None,
        label=state.params.model.label,
        params=state.params,
    )


def naive_forecast(series: Iterable[float], horizon: int, confidence: float = 0.95) -> ForecastResult:
    """Last-value forecast; intervals from the variance of one-step naive differences."""
    model = fit_naive_last(np.asarray(list(series), dtype=float))
    points = model.predict(check_horizon(horizon))
    return _build_result(
        points,
        residual_variance(model.residuals),
        confidence,
        trended=False,
        label="naive_last_value",
        params=None,
    )
