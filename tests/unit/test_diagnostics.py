"""tests/unit/test_diagnostics.py"""

from __future__ import annotations

import math

import numpy as np
import pytest
from statsmodels.stats.diagnostic import acorr_ljungbox

from smoothcast.diagnostics.residuals import (
    acf,
    default_max_lag,
    diagnose,
    diagnose_residuals,
    ljung_box,
    normality_score,
    qq_points,
    significant_lags,
)
from smoothcast.modeling.params import Holt, SmoothingParameters, Triple
from smoothcast.modeling.smoothing import fit


@pytest.fixture
def white_noise() -> np.ndarray:
    return np.random.default_rng(0).normal(0.0, 1.0, size=200)


def test_default_max_lag() -> None:
    assert default_max_lag(3) == 1
    assert default_max_lag(40) == 10
    assert default_max_lag(500) == 20


def test_acf_lengths_and_bounds(white_noise: np.ndarray) -> None:
    rho = acf(white_noise, 10)
    assert rho.shape == (10,)
    assert np.all(np.abs(rho) <= 1.0)


def test_ljung_box_matches_statsmodels(white_noise: np.ndarray) -> None:
    lb = ljung_box(white_noise, 10)
    ref = acorr_ljungbox(white_noise, lags=[10], return_df=True)
    assert abs(lb.q - float(ref["lb_stat"].iloc[0])) < 1e-8
    assert abs(lb.p_value - float(ref["lb_pvalue"].iloc[0])) < 1e-8
    assert lb.dof == 10


def test_ljung_box_model_df_reduces_dof(white_noise: np.ndarray) -> None:
    lb = ljung_box(white_noise, 10, model_df=2)
    ref = acorr_ljungbox(white_noise, lags=[10], model_df=2, return_df=True)
    assert lb.dof == 8
    assert abs(lb.p_value - float(ref["lb_pvalue"].iloc[0])) < 1e-8
    # never below one degree of freedom
    assert ljung_box(white_noise, 3, model_df=10).dof == 1


def test_ljung_box_zero_for_uncorrelated_constant_residuals() -> None:
    lb = ljung_box(np.full(30, 2.5), 5)
    assert lb.q == 0.0
    assert lb.p_value == 1.0


def test_ljung_box_q_is_non_negative(white_noise: np.ndarray) -> None:
    for lags in (1, 5, 20):
        assert ljung_box(white_noise, lags).q >= 0.0


def test_ljung_box_too_few_residuals() -> None:
    lb = ljung_box([1.0], 5)
    assert math.isnan(lb.q)
    assert math.isnan(lb.p_value)


def test_normality_score_close_to_normal_iqr_ratio() -> None:
    x = np.random.default_rng(1).normal(0.0, 3.0, size=20_000)
    assert abs(normality_score(x) - 1.349) < 0.05


def test_normality_score_constant_is_nan() -> None:
    assert math.isnan(normality_score(np.ones(10)))


def test_qq_points() -> None:
    pts = qq_points([3.0, -1.0, 0.0, 2.0, 1.0])
    assert len(pts) == 5
    theoretical = [t for t, _ in pts]
    observed = [o for _, o in pts]
    assert observed == [-1.0, 0.0, 1.0, 2.0, 3.0]
    assert abs(theoretical[0] + theoretical[-1]) < 1e-12
    assert theoretical[2] == 0.0


def test_significant_lags_for_alternating_residuals() -> None:
    x = np.tile([1.0, -1.0], 20)
    rho = acf(x, 4)
    assert significant_lags(rho, x.size) == [1, 2, 3, 4]


def test_diagnose_residuals_report(white_noise: np.ndarray) -> None:
    report = diagnose_residuals(white_noise, max_lag=8)
    assert report.acf.shape == (8,)
    assert report.n_residuals == 200
    assert report.is_white_noise is not None
    d = report.as_dict()
    assert len(d["qqPoints"]) == 200
    assert d["ljungBoxDof"] == 8


def test_diagnose_fitted_state(noisy_trend: np.ndarray) -> None:
    state = fit(noisy_trend, SmoothingParameters(alpha=0.5, beta=0.1, model=Holt()))
    report = diagnose(state)
    # 39 post-warm-up residuals -> max(1, min(20, 39 // 4)) lags
    assert report.acf.shape == (9,)
    # alpha + beta estimated
    assert report.ljung_box_dof == 7
    assert abs(report.residual_mean - float(np.mean(state.residuals))) < 1e-12


def test_max_lag_is_clipped_to_the_residual_count(seasonal_18: np.ndarray) -> None:
    params = SmoothingParameters(alpha=0.867, beta=0.003, gamma=0.0001, model=Triple(seasonal_period=6))
    report = diagnose(fit(seasonal_18, params), max_lag=20)

    assert report.n_residuals == 12
    # lags 12..20 cannot be estimated from 12 residuals
    assert report.acf.shape == (11,)
    assert np.isfinite(report.acf).all()
    assert report.ljung_box_dof == 11 - 3
    d = report.as_dict()
    assert len(d["acf"]) == 11
    assert all(v is not None for v in d["acf"])


def test_acf_marks_lags_beyond_the_sample_as_nan() -> None:
    rho = acf([1.0, 3.0, 2.0, 5.0], 6)
    assert rho.shape == (6,)
    assert np.isfinite(rho[:3]).all()
    assert np.isnan(rho[3:]).all()
