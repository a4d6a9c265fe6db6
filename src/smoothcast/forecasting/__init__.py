"""src/smoothcast/forecasting/__init__.py"""

from .forecaster import ForecastResult, forecast, naive_forecast, point_forecast, z_for

__all__ = [
    "ForecastResult",
    "forecast",
    "naive_forecast",
    "point_forecast",
    "z_for",
]
