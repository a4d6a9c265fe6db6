"""src/smoothcast/common/config.py"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import yaml

from smoothcast.common.utils import float_tuple, safe_float, safe_int


def _as_path(p: str | Path) -> Path:
    return p if isinstance(p, Path) else Path(p)


@dataclass(frozen=True)
class AppConfig:
    """Config wrapper with project-root relative paths."""

    raw: Dict[str, Any]
    config_path: Path

    @property
    def project_root(self) -> Path:
        # configs/config.yaml -> project root is parent of "configs"
        return self.config_path.parent.parent.resolve()

    @property
    def paths(self) -> Dict[str, Path]:
        p = self.raw.get("paths", {}) or {}
        return {k: (self.project_root / Path(v)).resolve() for k, v in p.items()}

    @property
    def logging(self) -> Dict[str, Any]:
        return self.raw.get("logging", {}) or {}

    @property
    def forecast(self) -> Dict[str, Any]:
        return self.raw.get("forecast", {}) or {}

    @property
    def grid(self) -> Dict[str, Any]:
        return self.raw.get("grid", {}) or {}

    @property
    def diagnostics(self) -> Dict[str, Any]:
        return self.raw.get("diagnostics", {}) or {}

    @property
    def horizon(self) -> int:
        return safe_int(self.forecast.get("horizon"), 12)

    @property
    def confidence(self) -> float:
        return safe_float(self.forecast.get("confidence"), 0.95)

    @property
    def holdout_fraction(self) -> float:
        return safe_float(self.forecast.get("holdout_fraction"), 0.2)

    @property
    def max_lag(self) -> int | None:
        v = self.diagnostics.get("max_lag")
        return None if v is None else safe_int(v, 20)

    def grid_spec(self):
        """Build the GridSpec described by the `grid` section (defaults for missing keys)."""
        from smoothcast.modeling.grid_search import GridSpec

        g = self.grid
        base = GridSpec()
        return GridSpec(
            alphas=float_tuple(g.get("alphas"), base.alphas),
            betas=float_tuple(g.get("betas"), base.betas),
            gammas=float_tuple(g.get("gammas"), base.gammas),
            dampings=float_tuple(g.get("dampings"), base.dampings),
            n_jobs=safe_int(g.get("n_jobs"), base.n_jobs),
            leaderboard_size=safe_int(g.get("leaderboard_size"), base.leaderboard_size),
        )

    def ensure_directories(self) -> List[str]:
        created: List[str] = []
        for _, path in self.paths.items():
            if path.suffix:  # treat as file path
                path.parent.mkdir(parents=True, exist_ok=True)
                continue
            if not path.exists():
                path.mkdir(parents=True, exist_ok=True)
                created.append(str(path))
        return created


def default_config() -> AppConfig:
    """In-memory config used when no YAML file is given (library use, tests)."""
    return AppConfig(raw={}, config_path=(Path.cwd() / "configs" / "config.yaml").resolve())


def load_config(config_path: str | Path) -> AppConfig:
    config_path = _as_path(config_path).resolve()
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return AppConfig(raw=raw, config_path=config_path)
