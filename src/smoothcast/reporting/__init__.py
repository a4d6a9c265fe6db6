"""src/smoothcast/reporting/__init__.py"""

from __future__ import annotations

from .tables import make_acf_table, make_forecast_table, make_leaderboard_table, make_metrics_table

__all__ = [
    "make_acf_table",
    "make_forecast_table",
    "make_leaderboard_table",
    "make_metrics_table",
]
