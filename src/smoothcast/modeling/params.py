"""src/smoothcast/modeling/params.py"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal, Union

from smoothcast.common.errors import InvalidParametersError


SeasonalType = Literal["additive", "multiplicative"]
ModelKind = Literal["simple", "double", "holt", "triple"]


@dataclass(frozen=True)
class Simple:
    """Level only (simple exponential smoothing)."""

    kind: ModelKind = "simple"

    @property
    def damping(self) -> float | None:
        return None

    @property
    def label(self) -> str:
        return "SES"


@dataclass(frozen=True)
class Double:
    """
    Level + additive trend, initial state estimated by OLS over the first
    min(4, n//2) observations.
    """

    damping: float | None = None
    kind: ModelKind = "double"

    @property
    def label(self) -> str:
        return "Holt(add, damped)" if self.damping is not None else "Holt(add)"


@dataclass(frozen=True)
class Holt:
    """
    Level + additive trend seeded from the first two observations:
    level0 = x0, trend0 = x1 - x0.
    """

    damping: float | None = None
    kind: ModelKind = "holt"

    @property
    def label(self) -> str:
        return "Holt(add, damped)" if self.damping is not None else "Holt(add)"


@dataclass(frozen=True)
class Triple:
    """Holt-Winters: level + additive trend + seasonal component of period m."""

    seasonal_period: int
    seasonal_type: SeasonalType = "additive"
    damping: float | None = None
    kind: ModelKind = "triple"

    @property
    def label(self) -> str:
        short = "add" if self.seasonal_type == "additive" else "mul"
        damped = ", damped" if self.damping is not None else ""
        return f"Holt-Winters({short}{damped}, m={self.seasonal_period})"


ModelSpec = Union[Simple, Double, Holt, Triple]


def has_trend(model: ModelSpec) -> bool:
    return not isinstance(model, Simple)


def has_seasonal(model: ModelSpec) -> bool:
    return isinstance(model, Triple)


def warmup_length(model: ModelSpec) -> int:
    """Number of leading fitted values that are undefined (never scored)."""
    return model.seasonal_period if isinstance(model, Triple) else 1


def min_observations(model: ModelSpec) -> int:
    return 2 * model.seasonal_period if isinstance(model, Triple) else 2


def with_damping(model: ModelSpec, damping: float | None) -> ModelSpec:
    if isinstance(model, Simple):
        return model
    return replace(model, damping=damping)


def model_from_name(
    kind: str,
    *,
    seasonal_period: int | None = None,
    seasonal_type: str = "additive",
    damping: float | None = None,
) -> ModelSpec:
    """Build a ModelSpec from loose config values (CLI / YAML / request payloads)."""
    k = str(kind).strip().lower()
    if k == "simple":
        return Simple()
    if k == "double":
        return Double(damping=damping)
    if k == "holt":
        return Holt(damping=damping)
    if k == "triple":
        if seasonal_period is None:
            raise InvalidParametersError("triple model requires a seasonal_period")
        st = str(seasonal_type).strip().lower()
        if st not in {"additive", "multiplicative"}:
            raise InvalidParametersError(f"seasonal_type must be additive|multiplicative, got {seasonal_type!r}")
        return Triple(seasonal_period=int(seasonal_period), seasonal_type=st, damping=damping)  # type: ignore[arg-type]
    raise InvalidParametersError(f"Unknown model kind: {kind!r}")


def _check_open_unit(name: str, value: float | None) -> None:
    if value is None or not math.isfinite(value) or not (0.0 < value < 1.0):
        raise InvalidParametersError(f"{name} must be in (0, 1), got {value!r}")


@dataclass(frozen=True)
class SmoothingParameters:
    """
    Immutable parameter set consumed by `fit`.

    beta is required iff the model has a trend, gamma iff it is seasonal.
    Construction validates everything, so a SmoothingParameters instance is
    always usable.
    """

    alpha: float
    model: ModelSpec
    beta: float | None = None
    gamma: float | None = None

    def __post_init__(self) -> None:
        _check_open_unit("alpha", self.alpha)

        if has_trend(self.model):
            _check_open_unit("beta", self.beta)
        elif self.beta is not None:
            raise InvalidParametersError("beta given for a model without trend")

        if has_seasonal(self.model):
            _check_open_unit("gamma", self.gamma)
        elif self.gamma is not None:
            raise InvalidParametersError("gamma given for a model without seasonal component")

        damping = self.model.damping
        if damping is not None and (not math.isfinite(damping) or not (0.0 < damping <= 1.0)):
            raise InvalidParametersError(f"damping_factor must be in (0, 1], got {damping!r}")

        if isinstance(self.model, Triple):
            if int(self.model.seasonal_period) != self.model.seasonal_period or self.model.seasonal_period < 2:
                raise InvalidParametersError(
                    f"seasonal_period must be an integer >= 2, got {self.model.seasonal_period!r}"
                )
            if self.model.seasonal_type not in ("additive", "multiplicative"):
                raise InvalidParametersError(f"Unknown seasonal_type {self.model.seasonal_type!r}")

    @property
    def phi(self) -> float:
        """Damping factor applied to the trend (1.0 when undamped)."""
        d = self.model.damping
        return 1.0 if d is None else float(d)

    @property
    def warmup(self) -> int:
        return warmup_length(self.model)

    @property
    def n_smoothing_params(self) -> int:
        """alpha + beta + gamma + damping, counting only those present."""
        k = 1
        if has_trend(self.model):
            k += 1
        if has_seasonal(self.model):
            k += 1
        if self.model.damping is not None:
            k += 1
        return k

    def as_dict(self) -> dict:
        out = {
            "model": self.model.kind,
            "label": self.model.label,
            "alpha": float(self.alpha),
            "beta": None if self.beta is None else float(self.beta),
            "gamma": None if self.gamma is None else float(self.gamma),
            "damping": self.model.damping,
        }
        if isinstance(self.model, Triple):
            out["seasonal_period"] = int(self.model.seasonal_period)
            out["seasonal_type"] = self.model.seasonal_type
        return out
