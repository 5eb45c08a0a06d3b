"""Application logging.

Everything logs through the "campus_events" logger (or a child of it via
``get_logger``), writing to stdout where the process manager collects it.
"""

import logging
import sys

from app.core.config import settings

LOGGER_NAME = "campus_events"

# Library loggers that are chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine.Engine", "passlib")


def _level():
    return logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper()


def setup_logging() -> logging.Logger:
    """Configure the application logger once and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level())

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    if settings.DEBUG:
        fmt = "\n%(levelname)s [%(asctime)s] %(name)s\n└── %(message)s"
    else:
        fmt = "%(levelname)s [%(asctime)s] %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False

    if not settings.SQL_ECHO:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger, e.g. get_logger("reports") -> campus_events.reports."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


logger = setup_logging()
