"""src/smoothcast/modeling/__init__.py"""

from .baselines import NaiveLastModel, fit_naive_last
from .evaluation import AccuracyReport, ScoreCard, accuracy_report, evaluate_fit, score_forecast
from .params import Double, Holt, ModelSpec, Simple, SmoothingParameters, Triple, model_from_name
from .smoothing import FittedState, fit
from .stats import SeriesProfile, describe_series, detect_seasonal_period, suggest_parameters
from .grid_search import (
    CancellationToken,
    GridSearchResult,
    GridSpec,
    InsufficientData,
    TraceEvent,
    search,
)

__all__ = [
    "NaiveLastModel",
    "fit_naive_last",
    "AccuracyReport",
    "ScoreCard",
    "accuracy_report",
    "evaluate_fit",
    "score_forecast",
    "Simple",
    "Double",
    "Holt",
    "Triple",
    "ModelSpec",
    "SmoothingParameters",
    "model_from_name",
    "FittedState",
    "fit",
    "SeriesProfile",
    "describe_series",
    "detect_seasonal_period",
    "suggest_parameters",
    "CancellationToken",
    "GridSearchResult",
    "GridSpec",
    "InsufficientData",
    "TraceEvent",
    "search",
]
