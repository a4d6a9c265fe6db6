"""tests/conftest.py"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import yaml

from smoothcast.modeling.grid_search import GridSpec


# 18 points, period 6, mild upward drift between cycles
SEASONAL_18 = [100, 120, 140, 160, 180, 200, 110, 130, 150, 170, 190, 210, 105, 125, 145, 165, 185, 205]


@pytest.fixture
def seasonal_18() -> np.ndarray:
    return np.array(SEASONAL_18, dtype=float)


@pytest.fixture
def linear_12() -> np.ndarray:
    # 100, 120, ..., 320
    return 100.0 + 20.0 * np.arange(12, dtype=float)


@pytest.fixture
def spiky_48() -> np.ndarray:
    # period-4 spike on a flat base: lag 4 dominates the autocorrelation
    return np.tile([110.0, 100.0, 100.0, 100.0], 12)


@pytest.fixture
def noisy_trend() -> np.ndarray:
    rng = np.random.default_rng(42)
    t = np.arange(40, dtype=float)
    return 50.0 + 1.5 * t + rng.normal(0.0, 2.0, size=t.size)


@pytest.fixture
def small_grid() -> GridSpec:
    """Coarse grid that keeps searches fast."""
    return GridSpec(
        alphas=(0.1, 0.3, 0.5, 0.7, 0.9),
        betas=(0.01, 0.1, 0.3),
        gammas=(0.01, 0.1, 0.3),
        dampings=(0.9, 0.98),
        n_jobs=1,
        leaderboard_size=5,
    )


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    # Emulate repository root in temp dir
    (tmp_path / "configs").mkdir(parents=True, exist_ok=True)
    (tmp_path / "data").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def config_path(project_root: Path) -> Path:
    raw = {
        "logging": {"level": "WARNING", "rich": False, "file": "artifacts/logs/smoothcast.log"},
        "paths": {"output_dir": "artifacts/forecasts"},
        "forecast": {"horizon": 4, "confidence": 0.9, "holdout_fraction": 0.2},
        "grid": {
            "alphas": [0.1, 0.5, 0.9],
            "betas": [0.01, 0.1],
            "gammas": [0.01, 0.1],
            "dampings": [0.9],
            "n_jobs": 1,
            "leaderboard_size": 3,
        },
        "diagnostics": {"max_lag": 5},
    }
    path = project_root / "configs" / "config.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return path


@pytest.fixture
def series_csv(project_root: Path, noisy_trend: np.ndarray) -> Path:
    dates = pd.date_range("2020-01-01", periods=noisy_trend.size, freq="MS")
    df = pd.DataFrame({"month": dates.strftime("%Y-%m-%d"), "sales": noisy_trend})
    path = project_root / "data" / "sales.csv"
    df.to_csv(path, index=False)
    return path
