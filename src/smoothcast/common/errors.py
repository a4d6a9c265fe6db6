"""src/smoothcast/common/errors.py"""

from __future__ import annotations


class SmoothcastError(Exception):
    """Base class for every error raised by smoothcast."""


class InvalidInputError(SmoothcastError, ValueError):
    """
    Raised when the input series has the wrong shape or content:
    - timestamps and values differ in length
    - values contain NaN or infinity
    - horizon / confidence outside the accepted range
    """


class InsufficientDataError(InvalidInputError):
    """
    Raised when a series is too short for the requested model.

    Recoverable: callers fall back to a simpler model (triple -> double)
    or to the naive last-value forecast.
    """

    def __init__(self, message: str, *, n_observations: int, required: int) -> None:
        super().__init__(message)
        self.n_observations = int(n_observations)
        self.required = int(required)


class InvalidParametersError(SmoothcastError, ValueError):
    """Raised when alpha/beta/gamma/damping or the seasonal period are out of range."""


class SearchCancelledError(SmoothcastError):
    """Raised when a grid search is cancelled through its CancellationToken."""
