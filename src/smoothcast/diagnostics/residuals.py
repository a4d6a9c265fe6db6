"""
src/smoothcast/diagnostics/residuals.py

Residual diagnostics for a fitted smoothing model:
- autocorrelation function and the lags outside the 95% white-noise band
- Ljung-Box portmanteau test
- IQR / sigma normality proxy and Q-Q plot coordinates
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np
from scipy.stats import chi2, norm

from smoothcast.common.utils import none_if_nan
from smoothcast.modeling.smoothing import FittedState
from smoothcast.modeling.stats import as_series, autocorrelation


logger = logging.getLogger(__name__)


def default_max_lag(n: int) -> int:
    return max(1, min(20, int(n) // 4))


def acf(residuals: Iterable[float], max_lag: int) -> np.ndarray:
    """rho_1 .. rho_max_lag (lag 0 is omitted, it is always 1). Lags >= n are NaN."""
    x = as_series(residuals)
    n = x.size
    return np.array(
        [autocorrelation(x, k) if k < n else float("nan") for k in range(1, int(max_lag) + 1)],
        dtype=float,
    )


@dataclass(frozen=True)
class LjungBoxResult:
    q: float
    dof: int
    p_value: float
    lags: int


def ljung_box(residuals: Iterable[float], lags: int, model_df: int = 0) -> LjungBoxResult:
    """
    Q = n(n+2) * sum_{k=1..L} rho_k^2 / (n-k), compared with a chi-square
    distribution on max(1, L - model_df) degrees of freedom.

    L is clipped to n-1; with fewer than 2 residuals every field is NaN.
    """
    x = as_series(residuals)
    n = int(x.size)
    L = min(int(lags), n - 1)
    dof = max(1, L - int(model_df))
    if n < 2 or L < 1:
        return LjungBoxResult(q=float("nan"), dof=dof, p_value=float("nan"), lags=max(L, 0))

    rho = acf(x, L)
    k = np.arange(1, L + 1, dtype=float)
    q = float(n * (n + 2) * np.sum(rho ** 2 / (n - k)))
    p_value = float(chi2.sf(q, dof))
    return LjungBoxResult(q=q, dof=dof, p_value=p_value, lags=L)


def normality_score(residuals: Iterable[float]) -> float:
    """IQR / sigma; about 1.349 for normal residuals. NaN when sigma is 0."""
    x = as_series(residuals)
    if x.size < 2:
        return float("nan")
    sigma = float(np.std(x))
    if sigma == 0.0:
        return float("nan")
    q25, q75 = np.percentile(x, [25, 75])
    return float(q75 - q25) / sigma


def qq_points(residuals: Iterable[float]) -> list[tuple[float, float]]:
    """(theoretical, observed) pairs: sorted residuals against norm.ppf((i + 0.5) / n)."""
    x = np.sort(as_series(residuals))
    n = x.size
    if n == 0:
        return []
    theoretical = norm.ppf((np.arange(n) + 0.5) / n)
    return [(float(t), float(o)) for t, o in zip(theoretical, x)]


def significant_lags(rho: np.ndarray, n: int) -> list[int]:
    if n <= 0:
        return []
    bound = 1.96 / math.sqrt(n)
    return [i + 1 for i, r in enumerate(rho) if abs(r) > bound]


@dataclass(frozen=True)
class DiagnosticsReport:
    acf: np.ndarray
    ljung_box_q: float
    ljung_box_dof: int
    ljung_box_p_value: float
    residual_mean: float
    residual_std: float
    normality_score: float
    qq_points: list[tuple[float, float]]
    significant_lags: list[int]
    n_residuals: int

    @property
    def is_white_noise(self) -> bool | None:
        """Ljung-Box at the 5% level; None when the test is undefined."""
        if not math.isfinite(self.ljung_box_p_value):
            return None
        return self.ljung_box_p_value > 0.05

    def as_dict(self) -> dict:
        return {
            "acf": [none_if_nan(v) for v in self.acf],
            "ljungBoxQ": none_if_nan(self.ljung_box_q),
            "ljungBoxDof": int(self.ljung_box_dof),
            "ljungBoxPValue": none_if_nan(self.ljung_box_p_value),
            "residualMean": none_if_nan(self.residual_mean),
            "residualStd": none_if_nan(self.residual_std),
            "normalityScore": none_if_nan(self.normality_score),
            "qqPoints": [{"theoretical": t, "observed": o} for t, o in self.qq_points],
            "significantLags": list(self.significant_lags),
            "nResiduals": int(self.n_residuals),
        }


def diagnose_residuals(residuals: Iterable[float], *, max_lag: int | None = None, model_df: int = 0) -> DiagnosticsReport:
    x = as_series(residuals)
    n = int(x.size)
    lag = default_max_lag(n) if max_lag is None else max(1, int(max_lag))
    if lag > n - 1 and n >= 2:
        logger.debug("max_lag %d clipped to %d (%d residuals)", lag, n - 1, n)
        lag = n - 1
    rho = acf(x, lag)
    lb = ljung_box(x, lag, model_df=model_df)

    if n < 2:
        logger.warning("Only %d residual(s): diagnostics are undefined", n)

    return DiagnosticsReport(
        acf=rho,
        ljung_box_q=lb.q,
        ljung_box_dof=lb.dof,
        ljung_box_p_value=lb.p_value,
        residual_mean=float(x.mean()) if n else float("nan"),
        residual_std=float(np.std(x)) if n else float("nan"),
        normality_score=normality_score(x),
        qq_points=qq_points(x),
        significant_lags=significant_lags(rho, n),
        n_residuals=n,
    )


def diagnose(state: FittedState, max_lag: int | None = None) -> DiagnosticsReport:
    """Diagnostics of the post-warm-up residuals of a fit."""
    return diagnose_residuals(state.residuals, max_lag=max_lag, model_df=state.params.n_smoothing_params)
