"""src/smoothcast/modeling/stats.py"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from smoothcast.modeling.params import Holt, SmoothingParameters


def as_series(values: Iterable[float]) -> np.ndarray:
    if not isinstance(values, np.ndarray):
        values = list(values)
    return np.asarray(values, dtype=float).ravel()


def mean(series: Iterable[float]) -> float:
    x = as_series(series)
    if x.size == 0:
        return float("nan")
    return float(np.mean(x))


def variance(series: Iterable[float]) -> float:
    """Population variance (divides by n)."""
    x = as_series(series)
    if x.size == 0:
        return float("nan")
    return float(np.mean((x - np.mean(x)) ** 2))


def coefficient_of_variation(series: Iterable[float]) -> float:
    """sqrt(variance) / mean; NaN when the mean is zero."""
    m = mean(series)
    if not math.isfinite(m) or m == 0.0:
        return float("nan")
    return math.sqrt(variance(series)) / m


def linear_trend_slope(series: Iterable[float]) -> float:
    """Closed-form OLS slope of the series against 0..n-1 (0.0 if undefined)."""
    y = as_series(series)
    n = y.size
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=float)
    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = float(np.dot(x, y))
    sum_xx = float(np.dot(x, x))
    denom = n * sum_xx - sum_x * sum_x
    if denom == 0.0:
        return 0.0
    slope = (n * sum_xy - sum_x * sum_y) / denom
    return float(slope) if math.isfinite(slope) else 0.0


def autocorrelation(series: Iterable[float], lag: int) -> float:
    """
    Sample autocorrelation at `lag`:

        rho_k = sum_{t=k}^{n-1} (x_t - xbar)(x_{t-k} - xbar) / sum_t (x_t - xbar)^2

    Returns 0.0 when the denominator is zero or the lag does not fit the series.
    """
    x = as_series(series)
    n = x.size
    k = int(lag)
    if n == 0 or k < 0 or k >= n:
        return 0.0
    d = x - x.mean()
    denom = float(np.dot(d, d))
    if denom == 0.0:
        return 0.0
    num = float(np.dot(d[k:], d[: n - k]))
    return num / denom


def detect_seasonal_period(series: Iterable[float], *, max_period: int = 12) -> tuple[int | None, float]:
    """
    Scan lags 2..min(max_period, n//4) and keep the one with the largest |rho|.

    Returns (period, strength); period is None when no lag can be scanned.
    """
    x = as_series(series)
    max_lag = min(int(max_period), x.size // 4)
    best_lag: int | None = None
    best_strength = 0.0
    for lag in range(2, max_lag + 1):
        r = abs(autocorrelation(x, lag))
        if best_lag is None or r > best_strength:
            best_lag = lag
            best_strength = r
    return best_lag, float(best_strength)


@dataclass(frozen=True)
class SeriesProfile:
    n: int
    mean: float
    variance: float
    cv: float
    slope: float
    trend_strength: float
    seasonal_period: int | None
    seasonal_strength: float

    def as_dict(self) -> dict:
        return {
            "n": self.n,
            "mean": self.mean,
            "variance": self.variance,
            "cv": self.cv,
            "slope": self.slope,
            "trend_strength": self.trend_strength,
            "seasonal_period": self.seasonal_period,
            "seasonal_strength": self.seasonal_strength,
        }


def describe_series(series: Iterable[float]) -> SeriesProfile:
    x = as_series(series)
    m = mean(x)
    slope = linear_trend_slope(x)
    trend_strength = abs(slope) / m if math.isfinite(m) and m != 0.0 else float("nan")
    period, strength = detect_seasonal_period(x)
    return SeriesProfile(
        n=int(x.size),
        mean=m,
        variance=variance(x),
        cv=coefficient_of_variation(x),
        slope=slope,
        trend_strength=float(trend_strength),
        seasonal_period=period,
        seasonal_strength=strength,
    )


def suggest_parameters(series: Iterable[float]) -> SmoothingParameters:
    """
    Data-driven starting point when neither explicit parameters nor a grid
    search are requested.

    - alpha rises with variability (coefficient of variation)
    - beta rises with normalized trend strength |slope| / mean
    - damping 0.95 for clearly trending series longer than 20 points
    """
    p = describe_series(series)

    cv = abs(p.cv) if math.isfinite(p.cv) else 1.0
    if cv < 0.1:
        alpha = 0.1
    elif cv < 0.3:
        alpha = 0.3
    elif cv < 0.5:
        alpha = 0.5
    else:
        alpha = 0.7

    ts = p.trend_strength if math.isfinite(p.trend_strength) else 0.0
    if ts > 0.05:
        beta = 0.3
    elif ts > 0.02:
        beta = 0.2
    else:
        beta = 0.1

    damping = 0.95 if (ts > 0.03 and p.n > 20) else None
    return SmoothingParameters(alpha=alpha, beta=beta, model=Holt(damping=damping))


def suggest_gamma(series: Iterable[float]) -> float:
    """Seasonal smoothing suggestion from autocorrelation strength."""
    _, strength = detect_seasonal_period(series)
    if strength > 0.5:
        return 0.3
    if strength > 0.3:
        return 0.1
    return 0.01
