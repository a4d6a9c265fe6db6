"""src/smoothcast/reporting/tables.py"""

from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from smoothcast.diagnostics.residuals import DiagnosticsReport
from smoothcast.forecasting.forecaster import ForecastResult
from smoothcast.modeling.evaluation import AccuracyReport, ScoreCard
from smoothcast.modeling.grid_search import GridSearchResult


LEADERBOARD_COLUMNS = ["rank", "index", "model", "alpha", "beta", "gamma", "damping", "rmse", "mae", "mape", "smape"]


def make_forecast_table(result: ForecastResult, index: Iterable | None = None, value_col: str = "forecast") -> pd.DataFrame:
    """
    One row per forecast step:
        step, <value_col>, <value_col>_lower_<pct>, <value_col>_upper_<pct>, model, confidence
    """
    return result.to_frame(index=index, value_col=value_col)


def make_metrics_table(report: AccuracyReport, holdout: ScoreCard | None = None) -> pd.DataFrame:
    """
    Output (one row per metric):
        metric, in_sample, holdout

    Undefined metrics stay NaN; holdout is NaN for metrics the holdout
    score does not carry.
    """
    in_sample = report.as_dict()
    held = holdout.as_dict() if holdout is not None else {}
    rows = []
    for metric in ("mae", "mse", "rmse", "mape", "smape", "r2", "aic", "bic"):
        rows.append(
            {
                "metric": metric,
                "in_sample": np.nan if in_sample.get(metric) is None else in_sample[metric],
                "holdout": np.nan if held.get(metric) is None else held[metric],
            }
        )
    return pd.DataFrame(rows, columns=["metric", "in_sample", "holdout"])


def make_leaderboard_table(search_result: GridSearchResult) -> pd.DataFrame:
    """Best grid-search candidates, rank 1 = selected."""
    if not search_result.leaderboard:
        return pd.DataFrame(columns=LEADERBOARD_COLUMNS)

    rows = []
    for rank, cand in enumerate(search_result.leaderboard, start=1):
        p = cand.params
        rows.append(
            {
                "rank": rank,
                "index": cand.index,
                "model": p.model.label,
                "alpha": p.alpha,
                "beta": np.nan if p.beta is None else p.beta,
                "gamma": np.nan if p.gamma is None else p.gamma,
                "damping": np.nan if p.model.damping is None else p.model.damping,
                "rmse": cand.score.rmse,
                "mae": cand.score.mae,
                "mape": cand.score.mape,
                "smape": cand.score.smape,
            }
        )
    return pd.DataFrame(rows, columns=LEADERBOARD_COLUMNS)


def make_acf_table(report: DiagnosticsReport) -> pd.DataFrame:
    """
    Output:
        lag, acf, significant
    """
    sig = set(report.significant_lags)
    lags = np.arange(1, report.acf.size + 1)
    return pd.DataFrame(
        {
            "lag": lags,
            "acf": report.acf.astype(float),
            "significant": [int(k) in sig for k in lags],
        }
    )
