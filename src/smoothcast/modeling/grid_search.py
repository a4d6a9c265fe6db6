"""src/smoothcast/modeling/grid_search.py"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Sequence

import numpy as np
from joblib import Parallel, delayed, effective_n_jobs

from smoothcast.common.errors import InvalidParametersError, SearchCancelledError, SmoothcastError
from smoothcast.modeling.evaluation import ScoreCard, score_forecast
from smoothcast.modeling.params import (
    ModelSpec,
    SmoothingParameters,
    has_seasonal,
    has_trend,
    min_observations,
    with_damping,
)
from smoothcast.modeling.smoothing import FittedState, fit, point_forecast
from smoothcast.modeling.stats import as_series


logger = logging.getLogger(__name__)

DEFAULT_ALPHAS: tuple[float, ...] = tuple(round(0.05 * i, 2) for i in range(1, 20))
# Dense at the low end: slowly evolving trends are the common case.
DEFAULT_BETAS: tuple[float, ...] = (
    0.001, 0.002, 0.003, 0.005, 0.0075, 0.01, 0.02, 0.03, 0.04, 0.05,
    0.1, 0.15, 0.2, 0.3, 0.4, 0.5,
)
DEFAULT_GAMMAS: tuple[float, ...] = (0.0001, 0.01, 0.05, 0.1, 0.2, 0.3, 0.5)
DEFAULT_DAMPINGS: tuple[float, ...] = (0.8, 0.85, 0.9, 0.95, 0.98)

MIN_SEARCH_LENGTH = 3


@dataclass(frozen=True)
class GridSpec:
    alphas: tuple[float, ...] = DEFAULT_ALPHAS
    betas: tuple[float, ...] = DEFAULT_BETAS
    gammas: tuple[float, ...] = DEFAULT_GAMMAS
    dampings: tuple[float, ...] = DEFAULT_DAMPINGS
    n_jobs: int = 1
    leaderboard_size: int = 10


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SearchCancelledError("grid search cancelled")


@dataclass(frozen=True)
class TraceEvent:
    name: str
    data: dict[str, Any] = field(default_factory=dict)


TraceCallback = Callable[[TraceEvent], None]


@dataclass(frozen=True)
class Candidate:
    index: int
    params: SmoothingParameters
    score: ScoreCard

    @property
    def sort_key(self) -> tuple[float, float, int]:
        return (self.score.rmse, self.score.mae, self.index)

    def as_dict(self) -> dict:
        return {"index": self.index, **self.params.as_dict(), **self.score.as_dict()}


@dataclass(frozen=True)
class InsufficientData:
    """Search not attempted: the series is too short. Callers use the naive forecast."""
    n_observations: int
    required: int

    @property
    def reason(self) -> str:
        return f"grid search needs at least {self.required} observations, got {self.n_observations}"


@dataclass(frozen=True)
class GridSearchResult:
    """
    params/score: the winning candidate and its holdout (or in-sample) score.
    state:        the winner refit on the entire series.
    leaderboard:  best candidates in (rmse, mae, grid index) order.
    """
    params: SmoothingParameters
    score: ScoreCard
    state: FittedState
    train_size: int
    test_size: int
    candidates_evaluated: int
    leaderboard: tuple[Candidate, ...] = ()

    @property
    def in_sample(self) -> bool:
        return self.test_size == 0


def default_holdout(n: int, model: ModelSpec, fraction: float = 0.2) -> int:
    """
    max(1, round(fraction * n)), reduced so the train split still holds the
    model's minimum number of observations. May return 0.
    """
    h = max(1, int(round(float(fraction) * int(n))))
    cap = int(n) - min_observations(model)
    return max(0, min(h, cap))


def generate_candidates(model: ModelSpec, grid: GridSpec, *, search_damping: bool = False) -> list[SmoothingParameters]:
    """Cartesian product of the grids relevant to `model`, in a fixed order."""
    betas: Sequence[float | None] = grid.betas if has_trend(model) else (None,)
    gammas: Sequence[float | None] = grid.gammas if has_seasonal(model) else (None,)
    if search_damping and has_trend(model):
        dampings: Sequence[float | None] = grid.dampings
    else:
        dampings = (model.damping,)

    out: list[SmoothingParameters] = []
    for damping, alpha, beta, gamma in itertools.product(dampings, grid.alphas, betas, gammas):
        out.append(
            SmoothingParameters(
                alpha=float(alpha),
                beta=None if beta is None else float(beta),
                gamma=None if gamma is None else float(gamma),
                model=with_damping(model, damping),
            )
        )
    return out


def score_candidate(train: np.ndarray, test: np.ndarray, params: SmoothingParameters) -> ScoreCard:
    """Fit on train, forecast len(test) steps; with an empty test score the one-step in-sample fit."""
    state = fit(train, params)
    if test.size == 0:
        return score_forecast(state.eval_actual, state.eval_fitted)
    return score_forecast(test, point_forecast(state, test.size))


def _score_chunk(
    train: np.ndarray,
    test: np.ndarray,
    chunk: Sequence[tuple[int, SmoothingParameters]],
) -> list[Candidate]:
    return [Candidate(index=i, params=p, score=score_candidate(train, test, p)) for i, p in chunk]


def _chunks(items: list, size: int) -> Iterator[list]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _evaluate_serial(
    train: np.ndarray,
    test: np.ndarray,
    indexed: list[tuple[int, SmoothingParameters]],
    token: CancellationToken | None,
) -> list[Candidate]:
    out: list[Candidate] = []
    for i, p in indexed:
        if token is not None:
            token.raise_if_cancelled()
        out.append(Candidate(index=i, params=p, score=score_candidate(train, test, p)))
    return out


def _evaluate_parallel(
    train: np.ndarray,
    test: np.ndarray,
    indexed: list[tuple[int, SmoothingParameters]],
    n_jobs: int,
    token: CancellationToken | None,
) -> list[Candidate]:
    out: list[Candidate] = []
    workers = max(1, effective_n_jobs(n_jobs))
    chunk_size = max(1, len(indexed) // (workers * 4))
    chunks = list(_chunks(indexed, chunk_size))
    with Parallel(n_jobs=n_jobs) as parallel:
        # one wave of `workers` chunks at a time; cancellation is checked between waves
        for wave in _chunks(chunks, workers):
            if token is not None:
                token.raise_if_cancelled()
            for scored in parallel(delayed(_score_chunk)(train, test, c) for c in wave):
                out.extend(scored)
    return out


def _emit(trace: TraceCallback | None, name: str, **data: Any) -> None:
    if trace is not None:
        trace(TraceEvent(name=name, data=data))


def search(
    series: Iterable[float],
    model: ModelSpec,
    *,
    grid: GridSpec | None = None,
    holdout: int | None = None,
    holdout_fraction: float = 0.2,
    search_damping: bool = False,
    token: CancellationToken | None = None,
    trace: TraceCallback | None = None,
) -> GridSearchResult | InsufficientData:
    """
    Exhaustive grid search over smoothing parameters for `model`.

    Each candidate is fit on the first n - holdout points and scored on the
    holdout forecast (RMSE, then MAE, then grid order). A holdout of 0 scores
    the in-sample one-step fit instead. The winner is refit on the whole
    series.

    Returns InsufficientData (no raise) when the series is too short to search.

    Raises:
        SearchCancelledError: the token was cancelled mid-search.
        InvalidParametersError: the holdout leaves too few training points.
        SmoothcastError: no candidate produced a finite score.
    """
    x = as_series(series)
    n = int(x.size)
    grid = grid or GridSpec()

    required = max(MIN_SEARCH_LENGTH, min_observations(model))
    if n < required:
        logger.info("Grid search skipped: %d observations, %d required", n, required)
        return InsufficientData(n_observations=n, required=required)

    test_size = default_holdout(n, model, holdout_fraction) if holdout is None else max(0, int(holdout))
    train_size = n - test_size
    if train_size < min_observations(model):
        raise InvalidParametersError(
            f"holdout of {test_size} leaves {train_size} training points; {model.label} needs {min_observations(model)}"
        )
    train, test = x[:train_size], x[train_size:]

    candidates = generate_candidates(model, grid, search_damping=search_damping)
    indexed = list(enumerate(candidates))

    _emit(
        trace,
        "search_started",
        model=model.label,
        candidates=len(indexed),
        train_size=train_size,
        test_size=test_size,
        n_jobs=grid.n_jobs,
    )
    logger.debug(
        "Grid search %s: %d candidates, train=%d holdout=%d", model.label, len(indexed), train_size, test_size
    )

    if grid.n_jobs == 1 or len(indexed) < 2:
        scored = _evaluate_serial(train, test, indexed, token)
    else:
        scored = _evaluate_parallel(train, test, indexed, grid.n_jobs, token)

    # reduce in grid order so ties and trace events are identical for any n_jobs
    scored.sort(key=lambda c: c.index)
    best: Candidate | None = None
    finite: list[Candidate] = []
    for cand in scored:
        if not cand.score.is_finite:
            continue
        finite.append(cand)
        if best is None or cand.sort_key < best.sort_key:
            best = cand
            _emit(trace, "new_best", index=cand.index, params=cand.params.as_dict(), **cand.score.as_dict())
            logger.debug("New best #%d %s rmse=%.6g mae=%.6g", cand.index, cand.params.as_dict(), cand.score.rmse, cand.score.mae)

    if best is None:
        raise SmoothcastError(f"no {model.label} candidate produced a finite score")

    state = fit(x, best.params)
    leaderboard = tuple(sorted(finite, key=lambda c: c.sort_key)[: max(0, int(grid.leaderboard_size))])

    _emit(
        trace,
        "search_finished",
        best_index=best.index,
        params=best.params.as_dict(),
        candidates_evaluated=len(scored),
        **best.score.as_dict(),
    )
    logger.info(
        "Grid search %s done: %d candidates, best alpha=%s beta=%s gamma=%s damping=%s rmse=%.6g",
        model.label,
        len(scored),
        best.params.alpha,
        best.params.beta,
        best.params.gamma,
        best.params.model.damping,
        best.score.rmse,
    )

    return GridSearchResult(
        params=best.params,
        score=best.score,
        state=state,
        train_size=train_size,
        test_size=test_size,
        candidates_evaluated=len(scored),
        leaderboard=leaderboard,
    )
