"""src/smoothcast/common/logging.py"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

from smoothcast.common.config import AppConfig

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# third-party loggers that flood the output below WARNING
QUIET_LOGGERS = ("joblib",)


def _level(value: object, default: int) -> int:
    if value is None:
        return default
    return getattr(logging, str(value).upper(), default)


def setup_logging(cfg: AppConfig) -> None:
    """
    Root handlers from the `logging` config section:

        level:       root / handler level (INFO)
        smoothcast:  level of the smoothcast package loggers (defaults to `level`);
                     DEBUG shows every new grid-search best
        file:        rotating log file, relative to the project root
        rich:        pretty console output via rich (true)
    """
    section = cfg.logging
    level = _level(section.get("level"), logging.INFO)
    package_level = _level(section.get("smoothcast"), level)

    handlers: list[logging.Handler] = []

    if section.get("rich", True):
        console: logging.Handler = RichHandler(show_path=False, rich_tracebacks=False)
        console.setFormatter(logging.Formatter("%(name)s | %(message)s"))
    else:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers.append(console)

    log_file = section.get("file")
    if log_file:
        lf = (cfg.project_root / Path(log_file)).resolve()
        lf.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(lf, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    # handlers pass everything; the logger levels decide
    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.getLogger("smoothcast").setLevel(package_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
