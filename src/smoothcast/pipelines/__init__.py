"""src/smoothcast/pipelines/__init__.py"""

from .run_forecast import ForecastRequest, ForecastResponse, SmoothingConfig, run_forecast

__all__ = [
    "ForecastRequest",
    "ForecastResponse",
    "SmoothingConfig",
    "run_forecast",
]
