"""Application-wide logger writing to platformdirs user_log_dir.

Every module logs through ``logging.getLogger(__name__)``. Those loggers are
children of ``taskflow`` and end up in one rotating file, which
:func:`get_logger` attaches to the ``taskflow`` logger exactly once.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "taskflow"
_LOG_FILE = "taskflow.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3
_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    """Location of the current log file; the directory is created if missing."""
    log_dir = Path(user_log_dir(_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / _LOG_FILE


def _file_handler(logger: logging.Logger) -> logging.handlers.RotatingFileHandler | None:
    for handler in logger.handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return handler
    return None


def _build_file_handler(path: Path) -> logging.handlers.RotatingFileHandler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def get_logger(level: str | int | None = None) -> logging.Logger:
    """Return the singleton application logger, initialising it on first call.

    Handlers other tools attach to the ``taskflow`` logger (a test runner's
    capture handler, say) are left alone; only a missing rotating file
    handler is added.

    Args:
        level: Optional level name or number applied on every call
    """
    global _logger
    if _logger is None:
        logger = logging.getLogger(_APP_NAME)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        _logger = logger

    if _file_handler(_logger) is None:
        _logger.addHandler(_build_file_handler(log_file_path()))
    if level is not None:
        _logger.setLevel(level)
    return _logger
