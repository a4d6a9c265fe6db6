"""src/smoothcast/common/__init__.py"""

from .config import AppConfig, default_config, load_config
from .errors import (
    InsufficientDataError,
    InvalidInputError,
    InvalidParametersError,
    SearchCancelledError,
    SmoothcastError,
)

__all__ = [
    "AppConfig",
    "default_config",
    "load_config",
    "SmoothcastError",
    "InvalidInputError",
    "InsufficientDataError",
    "InvalidParametersError",
    "SearchCancelledError",
]
