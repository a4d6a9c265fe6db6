"""tests/unit/test_evaluation.py"""

from __future__ import annotations

import math

import numpy as np

from smoothcast.modeling.evaluation import (
    accuracy_report,
    evaluate_fit,
    information_criteria,
    mae,
    mape,
    parameter_count,
    r2,
    rmse,
    score_forecast,
    smape,
)
from smoothcast.modeling.params import Holt, Simple, SmoothingParameters, Triple
from smoothcast.modeling.smoothing import fit


def test_rmse_basic() -> None:
    y_true = np.array([1.0, 2.0, 3.0])
    y_pred = np.array([1.0, 2.0, 4.0])  # error: [0,0,1]
    # MSE = (0 + 0 + 1)/3 = 1/3, RMSE = sqrt(1/3)
    expected = math.sqrt(1.0 / 3.0)
    assert abs(rmse(y_true, y_pred) - expected) < 1e-12


def test_mae_basic() -> None:
    y_true = np.array([1.0, 2.0, 3.0])
    y_pred = np.array([2.0, 2.0, 1.0])  # abs err: [1,0,2]
    expected = (1.0 + 0.0 + 2.0) / 3.0
    assert abs(mae(y_true, y_pred) - expected) < 1e-12


def test_mape_skips_zero_actuals() -> None:
    y_true = np.array([0.0, 100.0])
    y_pred = np.array([5.0, 110.0])
    assert abs(mape(y_true, y_pred) - 10.0) < 1e-12
    assert math.isnan(mape(np.zeros(3), np.ones(3)))


def test_smape_skips_zero_denominators() -> None:
    y_true = np.array([0.0, 100.0])
    y_pred = np.array([0.0, 110.0])
    # only the second point: 2*10 / 210
    expected = 2.0 * 10.0 / 210.0 * 100.0
    assert abs(smape(y_true, y_pred) - expected) < 1e-12
    assert math.isnan(smape(np.zeros(2), np.zeros(2)))


def test_percentage_errors_are_scale_invariant() -> None:
    y_true = np.array([10.0, 20.0, 30.0, 40.0])
    y_pred = np.array([12.0, 18.0, 33.0, 39.0])
    k = 3.5
    assert abs(mape(k * y_true, k * y_pred) - mape(y_true, y_pred)) < 1e-9
    assert abs(smape(k * y_true, k * y_pred) - smape(y_true, y_pred)) < 1e-9
    assert abs(mae(k * y_true, k * y_pred) - k * mae(y_true, y_pred)) < 1e-9
    assert abs(rmse(k * y_true, k * y_pred) - k * rmse(y_true, y_pred)) < 1e-9


def test_r2_perfect_and_degenerate() -> None:
    y = np.array([1.0, 2.0, 4.0])
    assert r2(y, y) == 1.0
    assert math.isnan(r2(np.full(4, 3.0), np.array([1.0, 2.0, 3.0, 4.0])))


def test_empty_window_metrics_are_nan() -> None:
    empty = np.array([], dtype=float)
    assert math.isnan(rmse(empty, empty))
    assert math.isnan(mae(empty, empty))
    assert math.isnan(r2(empty, empty))


def test_information_criteria_formula() -> None:
    n, sse, k = 10, 20.0, 2
    log_lik = -0.5 * n * math.log(2.0 * math.pi * sse / n) - 0.5 * n
    aic, bic = information_criteria(sse, n, k)
    assert abs(aic - (2 * k - 2 * log_lik)) < 1e-12
    assert abs(bic - (aic + k * (math.log(n) - 2.0))) < 1e-12


def test_information_criteria_perfect_fit_is_nan() -> None:
    aic, bic = information_criteria(0.0, 10, 2)
    assert math.isnan(aic)
    assert math.isnan(bic)


def test_parameter_count() -> None:
    assert parameter_count(SmoothingParameters(alpha=0.5, model=Simple())) == 1
    assert parameter_count(SmoothingParameters(alpha=0.5, beta=0.1, model=Holt())) == 2
    damped_hw = SmoothingParameters(alpha=0.5, beta=0.1, gamma=0.1, model=Triple(seasonal_period=6, damping=0.9))
    # alpha, beta, gamma, phi + 5 free seasonal states
    assert parameter_count(damped_hw) == 9


def test_accuracy_report_uses_post_warmup_window(seasonal_18: np.ndarray) -> None:
    params = SmoothingParameters(alpha=0.867, beta=0.003, gamma=0.0001, model=Triple(seasonal_period=6))
    state = fit(seasonal_18, params)
    report = evaluate_fit(state)

    assert report.warmup == 6
    assert report.n_eval == 12
    res = seasonal_18[6:] - state.fitted[6:]
    assert abs(report.mse - float(np.mean(res ** 2))) < 1e-9
    assert abs(report.rmse - math.sqrt(report.mse)) < 1e-12
    assert abs(report.mae - float(np.mean(np.abs(res)))) < 1e-9
    assert math.isfinite(report.aic)
    assert math.isfinite(report.r2)


def test_accuracy_report_is_deterministic(seasonal_18: np.ndarray) -> None:
    params = SmoothingParameters(alpha=0.867, beta=0.003, gamma=0.0001, model=Triple(seasonal_period=6))
    a = evaluate_fit(fit(seasonal_18, params))
    b = evaluate_fit(fit(seasonal_18, params))
    assert a == b


def test_accuracy_report_as_dict_maps_nan_to_none() -> None:
    params = SmoothingParameters(alpha=0.5, model=Simple())
    y = np.full(5, 4.0)
    fitted = np.array([np.nan, 4.0, 4.0, 4.0, 4.0])
    d = accuracy_report(y, fitted, params).as_dict()
    assert d["rmse"] == 0.0
    assert d["r2"] is None  # SStot == 0
    assert d["aic"] is None  # SSE == 0
    assert d["n_eval"] == 4


def test_score_forecast_scorecard() -> None:
    card = score_forecast([1.0, 2.0, 3.0], [1.0, 2.0, 4.0])
    assert card.n == 3
    assert card.is_finite
    assert set(card.as_dict()) == {"rmse", "mae", "mape", "smape", "n"}
