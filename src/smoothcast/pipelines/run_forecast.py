"""src/smoothcast/pipelines/run_forecast.py"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field as dc_field
from typing import Any, Sequence

import numpy as np
import pandas as pd

from smoothcast.common.errors import InvalidInputError
from smoothcast.common.utils import none_if_nan
from smoothcast.diagnostics.residuals import DiagnosticsReport, diagnose
from smoothcast.forecasting.forecaster import ForecastResult, forecast, naive_forecast
from smoothcast.modeling.baselines import fit_naive_last
from smoothcast.modeling.evaluation import AccuracyReport, ScoreCard, evaluate_fit
from smoothcast.modeling.grid_search import (
    CancellationToken,
    GridSearchResult,
    GridSpec,
    InsufficientData,
    TraceCallback,
    search,
)
from smoothcast.modeling.params import (
    Double,
    ModelSpec,
    SmoothingParameters,
    Triple,
    has_seasonal,
    has_trend,
    model_from_name,
)
from smoothcast.modeling.smoothing import fit
from smoothcast.modeling.stats import describe_series, detect_seasonal_period, suggest_gamma, suggest_parameters
from smoothcast.validation.checks import validate_series

logger = logging.getLogger(__name__)

VALID_CONFIDENCE: tuple[float, ...] = (0.80, 0.90, 0.95, 0.99)
MODEL_CHOICES: tuple[str, ...] = ("simple", "double", "holt", "triple", "auto")

# "auto" picks Holt-Winters only for clearly seasonal series
AUTO_SEASONAL_STRENGTH = 0.3

FALLBACK_NAIVE = "naive_last_value"
FALLBACK_DOUBLE = "double"


@dataclass(frozen=True)
class SmoothingConfig:
    """
    How to smooth a request's series.

    model:          simple | double | holt | triple | auto
    grid_search:    optimize alpha/beta/gamma (and damping if search_damping);
                    otherwise the explicit values are used, data-driven
                    suggestions filling any that are missing
    seasonal_period: detected from the autocorrelation when None
    holdout:        holdout length for the search (default ~20% of n)
    """
    model: str = "auto"
    grid_search: bool = True
    alpha: float | None = None
    beta: float | None = None
    gamma: float | None = None
    damping: float | None = None
    seasonal_period: int | None = None
    seasonal_type: str = "additive"
    search_damping: bool = False
    holdout: int | None = None

    def __post_init__(self) -> None:
        if str(self.model).strip().lower() not in MODEL_CHOICES:
            raise InvalidInputError(f"model must be one of {MODEL_CHOICES}, got {self.model!r}")


@dataclass(frozen=True)
class ForecastRequest:
    values: Sequence[float] | np.ndarray
    timestamps: Sequence[float] | np.ndarray | None = None
    field: str = "value"
    config: SmoothingConfig = dc_field(default_factory=SmoothingConfig)
    horizon: int = 12
    confidence: float = 0.95

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        value_col: str = "value",
        time_col: str | None = "timestamp",
        **kwargs: Any,
    ) -> "ForecastRequest":
        values = pd.to_numeric(df[value_col], errors="coerce").to_numpy(dtype=float)
        timestamps = None if time_col is None else df[time_col].to_numpy()
        kwargs.setdefault("field", value_col)
        return cls(values=values, timestamps=timestamps, **kwargs)

    def ordered_values(self) -> np.ndarray:
        """Values stably sorted by timestamp (input order when no timestamps)."""
        v = np.asarray(self.values, dtype=float).ravel()
        if self.timestamps is None:
            return v
        order = np.argsort(np.asarray(self.timestamps).ravel(), kind="stable")
        return v[order]


@dataclass(frozen=True)
class ForecastResponse:
    field: str
    forecast: ForecastResult
    fitted: np.ndarray
    horizon: int
    confidence: float
    params: SmoothingParameters | None = None
    metrics: AccuracyReport | None = None
    holdout_metrics: ScoreCard | None = None
    level: float | None = None
    trend: float | None = None
    diagnostics: DiagnosticsReport | None = None
    fallback: str | None = None
    search: GridSearchResult | None = None

    def to_dict(self) -> dict[str, Any]:
        p = self.params
        out: dict[str, Any] = {
            "field": self.field,
            "alpha": None if p is None else p.alpha,
            "beta": None if p is None else p.beta,
            "gamma": None if p is None else p.gamma,
            "damping": None if p is None else p.model.damping,
            "model": FALLBACK_NAIVE if p is None else p.model.kind,
            "modelLabel": self.forecast.label,
            "metrics": None if self.metrics is None else self.metrics.as_dict(),
            "holdoutMetrics": None if self.holdout_metrics is None else self.holdout_metrics.as_dict(),
            "pointForecasts": [none_if_nan(v) for v in self.forecast.point],
            "intervals": self.forecast.intervals(),
            "fittedTrain": [none_if_nan(v) for v in self.fitted],
            "level": none_if_nan(self.level),
            "trend": none_if_nan(self.trend),
            "confidence": self.confidence,
            "horizon": self.horizon,
            "diagnostics": None if self.diagnostics is None else self.diagnostics.as_dict(),
            "fallback": self.fallback,
        }
        if p is not None and isinstance(p.model, Triple):
            out["seasonalPeriod"] = int(p.model.seasonal_period)
            out["seasonalType"] = p.model.seasonal_type
        return out


def _check_request(request: ForecastRequest) -> None:
    if int(request.horizon) < 1:
        raise InvalidInputError(f"horizon must be >= 1, got {request.horizon!r}")
    if not any(abs(float(request.confidence) - c) < 1e-9 for c in VALID_CONFIDENCE):
        raise InvalidInputError(f"confidence must be one of {VALID_CONFIDENCE}, got {request.confidence!r}")
    # at least one point is needed even for the naive fallback
    validate_series(request.values, request.timestamps, min_length=1).raise_if_failed()


def resolve_model(series: np.ndarray, config: SmoothingConfig) -> tuple[ModelSpec, str | None]:
    """
    Turn the configured model name into a concrete ModelSpec.

    Returns (model, fallback); fallback is "double" when a Holt-Winters model
    was asked for but the series holds fewer than two full seasons (or no
    period could be detected).
    """
    kind = str(config.model).strip().lower()
    n = int(series.size)

    if kind == "auto":
        profile = describe_series(series)
        period = config.seasonal_period or profile.seasonal_period
        if (
            period is not None
            and profile.seasonal_strength >= AUTO_SEASONAL_STRENGTH
            and n >= 2 * int(period)
        ):
            kind = "triple"
        else:
            kind = "holt"
        logger.info("Auto model selection: %s (seasonal strength %.3f)", kind, profile.seasonal_strength)

    if kind != "triple":
        return model_from_name(kind, damping=config.damping), None

    period = config.seasonal_period
    if period is None:
        period, strength = detect_seasonal_period(series)
        logger.info("Detected seasonal period %s (|acf| %.3f)", period, strength)

    if period is None or n < 2 * int(period):
        logger.warning(
            "Holt-Winters needs two full seasons (n=%d, m=%s); falling back to double smoothing", n, period
        )
        return Double(damping=config.damping), FALLBACK_DOUBLE

    model = model_from_name(
        "triple",
        seasonal_period=int(period),
        seasonal_type=config.seasonal_type,
        damping=config.damping,
    )
    return model, None


def explicit_parameters(series: np.ndarray, model: ModelSpec, config: SmoothingConfig) -> SmoothingParameters:
    """Configured alpha/beta/gamma, data-driven suggestions for the missing ones."""
    suggested = suggest_parameters(series)
    alpha = config.alpha if config.alpha is not None else suggested.alpha
    beta = None
    gamma = None
    if has_trend(model):
        beta = config.beta if config.beta is not None else suggested.beta
    if has_seasonal(model):
        gamma = config.gamma if config.gamma is not None else suggest_gamma(series)
    return SmoothingParameters(alpha=alpha, beta=beta, gamma=gamma, model=model)


def _naive_response(request: ForecastRequest, series: np.ndarray, reason: str) -> ForecastResponse:
    logger.warning("Field %s: %s; using naive last-value forecast", request.field, reason)
    baseline = fit_naive_last(series)
    return ForecastResponse(
        field=request.field,
        forecast=naive_forecast(series, request.horizon, request.confidence),
        fitted=baseline.fitted,
        horizon=int(request.horizon),
        confidence=float(request.confidence),
        level=baseline.last_value,
        fallback=FALLBACK_NAIVE,
    )


def run_forecast(
    request: ForecastRequest,
    *,
    grid: GridSpec | None = None,
    holdout_fraction: float = 0.2,
    max_lag: int | None = None,
    token: CancellationToken | None = None,
    trace: TraceCallback | None = None,
) -> ForecastResponse:
    """
    Fit, forecast and diagnose one series.

    Raises InvalidInputError (bad shape/content, horizon or confidence) before
    any fitting. Series too short for the requested model degrade to double
    smoothing or to the naive last-value forecast instead of failing.
    """
    _check_request(request)
    cfg = request.config
    series = request.ordered_values()
    n = int(series.size)

    if n < 2:
        return _naive_response(request, series, f"{n} observation(s)")

    model, fallback = resolve_model(series, cfg)

    search_result: GridSearchResult | None = None
    if cfg.grid_search:
        outcome = search(
            series,
            model,
            grid=grid,
            holdout=cfg.holdout,
            holdout_fraction=holdout_fraction,
            search_damping=cfg.search_damping,
            token=token,
            trace=trace,
        )
        if isinstance(outcome, InsufficientData):
            return _naive_response(request, series, outcome.reason)
        search_result = outcome
        params = outcome.params
        state = outcome.state
    else:
        params = explicit_parameters(series, model, cfg)
        state = fit(series, params)

    result = forecast(state, request.horizon, request.confidence)
    report = evaluate_fit(state)
    diagnostics = diagnose(state, max_lag=max_lag)

    logger.info(
        "Field %s: %s alpha=%s beta=%s gamma=%s rmse=%s",
        request.field,
        params.model.label,
        params.alpha,
        params.beta,
        params.gamma,
        none_if_nan(report.rmse),
    )

    return ForecastResponse(
        field=request.field,
        forecast=result,
        fitted=np.array(state.fitted, dtype=float),
        horizon=int(request.horizon),
        confidence=float(request.confidence),
        params=params,
        metrics=report,
        holdout_metrics=None if search_result is None else search_result.score,
        level=state.last_level,
        trend=None if state.trend is None else state.last_trend,
        diagnostics=diagnostics,
        fallback=fallback,
        search=search_result,
    )
