"""src/smoothcast/modeling/smoothing.py"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from smoothcast.common.errors import InsufficientDataError, InvalidInputError, InvalidParametersError
from smoothcast.modeling.params import (
    Holt,
    Simple,
    SmoothingParameters,
    Triple,
    min_observations,
)
from smoothcast.modeling.stats import as_series, linear_trend_slope


logger = logging.getLogger(__name__)

# Multiplicative divisors/multipliers never go below this.
SEASONAL_FLOOR = 0.001


def _read_only(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


@dataclass(frozen=True)
class FittedState:
    """
    Result of one model fit. Arrays are read-only.

    level[t], trend[t]: state after observing x_t (trend is None for simple models)
    seasonal[t + m]:    seasonal factor s_t; seasonal[0:m] hold the initial factors
    fitted[t]:          one-step-ahead prediction of x_t, NaN on the warm-up prefix
    """

    series: np.ndarray
    params: SmoothingParameters
    level: np.ndarray
    fitted: np.ndarray
    trend: np.ndarray | None = None
    seasonal: np.ndarray | None = None
    clamped_steps: int = 0

    @property
    def n(self) -> int:
        return int(self.series.size)

    @property
    def warmup(self) -> int:
        return self.params.warmup

    @property
    def eval_actual(self) -> np.ndarray:
        return self.series[self.warmup:]

    @property
    def eval_fitted(self) -> np.ndarray:
        return self.fitted[self.warmup:]

    @property
    def residuals(self) -> np.ndarray:
        """Actual minus fitted over the evaluation window [warmup, n)."""
        res = self.eval_actual - self.eval_fitted
        return res[np.isfinite(res)]

    @property
    def last_level(self) -> float:
        return float(self.level[-1])

    @property
    def last_trend(self) -> float:
        return 0.0 if self.trend is None else float(self.trend[-1])

    @property
    def latest_seasonal(self) -> np.ndarray | None:
        """Most recent factor for each of the m phases: s_{n-m} .. s_{n-1}."""
        if self.seasonal is None:
            return None
        return self.seasonal[self.n:]


def initial_window(n: int, params: SmoothingParameters) -> int:
    m = params.model.seasonal_period if isinstance(params.model, Triple) else 4
    return max(1, min(m, n // 2))


def initial_seasonal_factors(series: np.ndarray, period: int, seasonal_type: str) -> np.ndarray:
    """
    Classical-decomposition start values for the seasonal component.

    Each phase is averaged across the full cycles available and compared with
    the overall mean. Additive factors are centred to sum to 0, multiplicative
    factors scaled to a product of 1. With fewer than two full cycles the
    factors are neutral (0 or 1): an approximation, the recursion then has to
    learn the seasonality from scratch.
    """
    x = as_series(series)
    m = int(period)
    multiplicative = seasonal_type == "multiplicative"
    cycles = x.size // m
    if cycles < 2:
        return np.full(m, 1.0 if multiplicative else 0.0, dtype=float)

    phase_avg = x[: cycles * m].reshape(cycles, m).mean(axis=0)
    overall = float(x.mean())

    if not multiplicative:
        factors = phase_avg - overall
        return factors - factors.mean()

    factors = phase_avg / overall if overall > 0 else np.ones(m, dtype=float)
    product = float(np.prod(factors))
    if np.isfinite(product) and product > 0:
        factors = factors / product ** (1.0 / m)
    return factors


def fit(series: Iterable[float], params: SmoothingParameters) -> FittedState:
    """
    Run the smoothing recursion over `series` with fixed parameters.

    Pure function: no state survives between calls, so grid-search candidates
    can be evaluated in any order or in parallel.

    Raises:
        InvalidInputError: non-finite values in the series.
        InsufficientDataError: fewer than 2 points, or fewer than 2*m for Holt-Winters.
    """
    x = as_series(series).copy()
    n = x.size
    model = params.model

    required = min_observations(model)
    if n < required:
        raise InsufficientDataError(
            f"{model.label} needs at least {required} observations, got {n}",
            n_observations=n,
            required=required,
        )
    if not np.all(np.isfinite(x)):
        raise InvalidInputError("series contains NaN or infinite values")

    alpha = float(params.alpha)
    beta = 0.0 if params.beta is None else float(params.beta)
    gamma = 0.0 if params.gamma is None else float(params.gamma)
    phi = params.phi

    level = np.zeros(n, dtype=float)
    fitted = np.full(n, np.nan, dtype=float)
    trend = None if isinstance(model, Simple) else np.zeros(n, dtype=float)
    seasonal = None

    # --- initial state ---
    if isinstance(model, Holt):
        level[0] = x[0]
        trend[0] = x[1] - x[0]
    else:
        k = initial_window(n, params)
        level[0] = float(x[:k].mean())
        if trend is not None:
            trend[0] = linear_trend_slope(x[:k])

    m = 0
    multiplicative = False
    if isinstance(model, Triple):
        m = int(model.seasonal_period)
        multiplicative = model.seasonal_type == "multiplicative"
        seasonal = np.zeros(n + m, dtype=float)
        seasonal[:m] = initial_seasonal_factors(x, m, model.seasonal_type)
        # observation 0 anchors the state; s_0 keeps the phase-0 start value
        seasonal[m] = seasonal[0]

    clamped = 0

    # --- recursion ---
    for t in range(1, n):
        prev_level = level[t - 1]

        if trend is None:
            fitted[t] = prev_level
            level[t] = alpha * x[t] + (1.0 - alpha) * prev_level
            continue

        damped = phi * trend[t - 1]
        base = prev_level + damped

        if seasonal is None:
            fitted[t] = base
            level[t] = alpha * x[t] + (1.0 - alpha) * base
            trend[t] = beta * (level[t] - prev_level) + (1.0 - beta) * damped
            continue

        s_prev = seasonal[t]  # s_{t-m}
        if multiplicative:
            s_div = max(s_prev, SEASONAL_FLOOR)
            level[t] = alpha * (x[t] / s_div) + (1.0 - alpha) * base
            trend[t] = beta * (level[t] - prev_level) + (1.0 - beta) * damped
            l_div = max(level[t], SEASONAL_FLOOR)
            seasonal[t + m] = gamma * (x[t] / l_div) + (1.0 - gamma) * s_prev
            fitted[t] = base * s_div
            if s_prev < SEASONAL_FLOOR or level[t] < SEASONAL_FLOOR:
                clamped += 1
        else:
            level[t] = alpha * (x[t] - s_prev) + (1.0 - alpha) * base
            trend[t] = beta * (level[t] - prev_level) + (1.0 - beta) * damped
            seasonal[t + m] = gamma * (x[t] - level[t]) + (1.0 - gamma) * s_prev
            fitted[t] = base + s_prev

    fitted[: params.warmup] = np.nan

    if clamped:
        logger.warning(
            "%s: multiplicative floor %.3g applied on %d of %d steps (near-zero seasonal factor or level)",
            model.label,
            SEASONAL_FLOOR,
            clamped,
            n - 1,
        )

    return FittedState(
        series=_read_only(x),
        params=params,
        level=_read_only(level),
        fitted=_read_only(fitted),
        trend=None if trend is None else _read_only(trend),
        seasonal=None if seasonal is None else _read_only(seasonal),
        clamped_steps=clamped,
    )


def check_horizon(horizon: int) -> int:
    h = int(horizon)
    if h < 1:
        raise InvalidParametersError(f"horizon must be >= 1, got {horizon!r}")
    return h


def point_forecast(state: FittedState, horizon: int) -> np.ndarray:
    """
    point_h = level + sum_{j=1..h} phi^(j-1) * trend, then + s (additive) or
    * max(s, floor) (multiplicative), s being the latest smoothed factor of the
    phase that step h falls on.
    """
    H = check_horizon(horizon)
    steps = np.arange(1, H + 1, dtype=float)
    level = state.last_level

    if state.trend is None:
        points = np.full(H, level, dtype=float)
    else:
        phi = state.params.phi
        if phi == 1.0:
            cum = steps
        else:
            cum = (1.0 - phi ** steps) / (1.0 - phi)
        points = level + cum * state.last_trend

    model = state.params.model
    if isinstance(model, Triple) and state.seasonal is not None:
        m = int(model.seasonal_period)
        idx = state.n + (np.arange(H) % m)
        factors = state.seasonal[idx]
        if model.seasonal_type == "multiplicative":
            points = points * np.maximum(factors, SEASONAL_FLOOR)
        else:
            points = points + factors

    return points
