"""tests/unit/test_forecaster.py"""

from __future__ import annotations

import math

import numpy as np
import pytest
from scipy.stats import norm

from smoothcast.common.errors import InvalidParametersError
from smoothcast.forecasting.forecaster import (
    Z_TABLE,
    forecast,
    interval_half_widths,
    naive_forecast,
    residual_variance,
    z_for,
)
from smoothcast.modeling.params import Holt, Simple, SmoothingParameters, Triple
from smoothcast.modeling.smoothing import fit
from smoothcast.validation.schemas import FORECAST_OUTPUT, assert_schema


def test_z_table_levels_are_exact() -> None:
    for level, z in Z_TABLE.items():
        assert z_for(level) == z
    assert z_for(0.95) == 1.96


def test_z_for_other_levels_uses_normal_quantile() -> None:
    assert abs(z_for(0.85) - float(norm.ppf(0.925))) < 1e-12


@pytest.mark.parametrize("confidence", [0.0, 1.0, 1.5, float("nan")])
def test_z_for_rejects_invalid_levels(confidence: float) -> None:
    with pytest.raises(InvalidParametersError):
        z_for(confidence)


def test_residual_variance_needs_two_points() -> None:
    assert math.isnan(residual_variance([1.0]))
    assert abs(residual_variance([1.0, 3.0]) - 2.0) < 1e-12  # ddof=1


def test_half_width_formula() -> None:
    var, z = 4.0, 1.96
    trended = interval_half_widths(var, 3, 0.95, trended=True)
    flat = interval_half_widths(var, 3, 0.95, trended=False)
    for i, h in enumerate([1.0, 2.0, 3.0]):
        assert abs(trended[i] - z * math.sqrt(var * (1 + 0.1 * h) * (1 + math.sqrt(h) / 10))) < 1e-12
        assert abs(flat[i] - z * math.sqrt(var * (1 + math.sqrt(h) / 10))) < 1e-12


def test_holt_linear_forecast(linear_12: np.ndarray) -> None:
    state = fit(linear_12, SmoothingParameters(alpha=0.3, beta=0.1, model=Holt()))
    res = forecast(state, 4, 0.95)
    assert np.allclose(res.point, [340.0, 360.0, 380.0, 400.0])
    assert res.horizon == 4
    # perfect in-sample fit: zero-width band
    assert np.allclose(res.lower, res.point)
    assert np.allclose(res.upper, res.point)


def test_intervals_widen_with_horizon(noisy_trend: np.ndarray) -> None:
    state = fit(noisy_trend, SmoothingParameters(alpha=0.5, beta=0.1, model=Holt()))
    res = forecast(state, 6, 0.9)
    width = res.upper - res.lower
    assert np.all(np.diff(width) > 0)
    assert np.all(res.lower < res.point) and np.all(res.point < res.upper)
    assert abs(res.residual_variance - float(np.var(state.residuals, ddof=1))) < 1e-9


def test_interval_uses_post_warmup_residuals(seasonal_18: np.ndarray) -> None:
    params = SmoothingParameters(alpha=0.5, beta=0.1, gamma=0.1, model=Triple(seasonal_period=6))
    state = fit(seasonal_18, params)
    res = forecast(state, 2, 0.95)
    var = float(np.var(seasonal_18[6:] - state.fitted[6:], ddof=1))
    expected = 1.96 * math.sqrt(var * 1.1 * 1.1)
    assert abs((res.upper[0] - res.point[0]) - expected) < 1e-9


def test_single_residual_gives_undefined_bounds() -> None:
    state = fit([3.0, 5.0], SmoothingParameters(alpha=0.5, model=Simple()))
    res = forecast(state, 3, 0.95)
    assert np.isfinite(res.point).all()
    assert np.isnan(res.lower).all() and np.isnan(res.upper).all()
    assert res.intervals()[0]["lower"] is None


def test_naive_forecast() -> None:
    res = naive_forecast([10.0, 12.0, 11.0, 13.0], 3, 0.8)
    assert np.array_equal(res.point, [13.0, 13.0, 13.0])
    assert res.params is None
    assert res.label == "naive_last_value"
    # diffs 2, -1, 2 -> sample variance 3
    assert abs(res.residual_variance - 3.0) < 1e-12
    assert abs((res.upper[0] - 13.0) - 1.282 * math.sqrt(3.0 * 1.1)) < 1e-9


def test_naive_forecast_single_point() -> None:
    res = naive_forecast([42.0], 2)
    assert np.array_equal(res.point, [42.0, 42.0])
    assert np.isnan(res.lower).all()


def test_intervals_and_frame(noisy_trend: np.ndarray) -> None:
    state = fit(noisy_trend, SmoothingParameters(alpha=0.5, beta=0.1, model=Holt()))
    res = forecast(state, 3, 0.95)
    rows = res.intervals()
    assert len(rows) == 3
    assert set(rows[0]) == {"lower", "upper", "point"}

    df = res.to_frame()
    assert_schema(df, FORECAST_OUTPUT)
    assert list(df["step"]) == [1, 2, 3]
    assert "forecast_lower_95" in df.columns
