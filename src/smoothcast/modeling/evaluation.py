"""src/smoothcast/modeling/evaluation.py"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING

import numpy as np

from smoothcast.common.utils import none_if_nan
from smoothcast.modeling.params import SmoothingParameters, Triple

if TYPE_CHECKING:
    from smoothcast.modeling.smoothing import FittedState


def _to_arrays(y_true: Iterable[float], y_pred: Iterable[float]) -> tuple[np.ndarray, np.ndarray]:
    yt = np.asarray(list(y_true), dtype=float)
    yp = np.asarray(list(y_pred), dtype=float)
    if yt.shape != yp.shape:
        raise ValueError(f"y_true and y_pred differ in shape: {yt.shape} vs {yp.shape}")
    return yt, yp


def mse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if y_true.size == 0:
        return float("nan")
    return float(np.mean((y_true - y_pred) ** 2))


def rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(math.sqrt(mse(y_true, y_pred))) if y_true.size else float("nan")


def mae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if y_true.size == 0:
        return float("nan")
    return float(np.mean(np.abs(y_true - y_pred)))


def mape(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Mean absolute percentage error over points with nonzero actuals (NaN if none)."""
    mask = y_true != 0
    if not mask.any():
        return float("nan")
    return float(np.mean(np.abs(y_true[mask] - y_pred[mask]) / np.abs(y_true[mask])) * 100.0)


def smape(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Symmetric MAPE; points where |y| + |yhat| == 0 are skipped (NaN if none left)."""
    denom = np.abs(y_true) + np.abs(y_pred)
    mask = denom != 0
    if not mask.any():
        return float("nan")
    return float(np.mean(2.0 * np.abs(y_true[mask] - y_pred[mask]) / denom[mask]) * 100.0)


def r2(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Coefficient of determination; NaN when the actuals are constant (SStot == 0)."""
    if y_true.size == 0:
        return float("nan")
    sst = float(np.sum((y_true - y_true.mean()) ** 2))
    if sst == 0.0:
        return float("nan")
    sse = float(np.sum((y_true - y_pred) ** 2))
    return 1.0 - sse / sst


def parameter_count(params: SmoothingParameters) -> int:
    """
    Smoothing parameters present (alpha, beta, gamma, damping) plus m-1 seasonal
    initial states for Holt-Winters models.
    """
    k = params.n_smoothing_params
    if isinstance(params.model, Triple):
        k += max(0, int(params.model.seasonal_period) - 1)
    return k


def information_criteria(sse: float, n: int, k: int) -> tuple[float, float]:
    """
    Gaussian-residual AIC/BIC:

        logL = -0.5 * n * ln(2*pi*SSE/n) - 0.5 * n
        AIC  = 2k - 2 logL
        BIC  = AIC + k * (ln(n) - 2)

    Undefined (NaN, NaN) for an empty window or a perfect fit (SSE == 0).
    """
    if n <= 0 or not math.isfinite(sse) or sse <= 0.0:
        return float("nan"), float("nan")
    log_lik = -0.5 * n * math.log(2.0 * math.pi * sse / n) - 0.5 * n
    aic = 2.0 * k - 2.0 * log_lik
    bic = aic + k * (math.log(n) - 2.0)
    return aic, bic


@dataclass(frozen=True)
class ScoreCard:
    """Out-of-sample (or in-sample fallback) score of one grid-search candidate."""

    rmse: float
    mae: float
    mape: float
    smape: float
    n: int

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.rmse) and math.isfinite(self.mae)

    def as_dict(self) -> dict[str, float | int | None]:
        return {
            "rmse": none_if_nan(self.rmse),
            "mae": none_if_nan(self.mae),
            "mape": none_if_nan(self.mape),
            "smape": none_if_nan(self.smape),
            "n": int(self.n),
        }


def score_forecast(y_true: Iterable[float], y_pred: Iterable[float]) -> ScoreCard:
    yt, yp = _to_arrays(y_true, y_pred)
    return ScoreCard(
        rmse=rmse(yt, yp),
        mae=mae(yt, yp),
        mape=mape(yt, yp),
        smape=smape(yt, yp),
        n=int(yt.size),
    )


@dataclass(frozen=True)
class AccuracyReport:
    mae: float
    mse: float
    rmse: float
    mape: float
    smape: float
    r2: float
    aic: float
    bic: float
    n_eval: int
    warmup: int

    def as_dict(self) -> dict[str, float | int | None]:
        # NaN -> None so consumers never read an undefined metric as a score
        return {
            "mae": none_if_nan(self.mae),
            "mse": none_if_nan(self.mse),
            "rmse": none_if_nan(self.rmse),
            "mape": none_if_nan(self.mape),
            "smape": none_if_nan(self.smape),
            "r2": none_if_nan(self.r2),
            "aic": none_if_nan(self.aic),
            "bic": none_if_nan(self.bic),
            "n_eval": int(self.n_eval),
            "warmup": int(self.warmup),
        }


def accuracy_report(
    y_true: Iterable[float],
    fitted: Iterable[float],
    params: SmoothingParameters,
) -> AccuracyReport:
    """
    In-sample accuracy over the evaluation window [s, n), s = warm-up length.

    Every metric, R^2 included, uses the same window.
    """
    yt, yp = _to_arrays(y_true, fitted)
    s = params.warmup
    y_eval = yt[s:]
    f_eval = yp[s:]
    n_eval = int(y_eval.size)

    sse = float(np.sum((y_eval - f_eval) ** 2)) if n_eval else float("nan")
    aic, bic = information_criteria(sse, n_eval, parameter_count(params))

    return AccuracyReport(
        mae=mae(y_eval, f_eval),
        mse=mse(y_eval, f_eval),
        rmse=rmse(y_eval, f_eval),
        mape=mape(y_eval, f_eval),
        smape=smape(y_eval, f_eval),
        r2=r2(y_eval, f_eval),
        aic=aic,
        bic=bic,
        n_eval=n_eval,
        warmup=s,
    )


def evaluate_fit(state: "FittedState") -> AccuracyReport:
    return accuracy_report(state.series, state.fitted, state.params)
