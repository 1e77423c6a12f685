"""Logging setup for Seedbed.

Modules log through ``logging.getLogger(__name__)``; this module only wires
handlers onto the package logger. Libraries embedding Seedbed can skip
configure_logging() and attach their own handlers instead.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .filesystem import ensure_dir

PACKAGE_LOGGER = "seedbed"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_HANDLER_MARKER = "_seedbed_handler"


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(
    level: str | int = "info",
    log_file: str | Path | None = None,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Attach stream (and optional rotating file) handlers to the package logger.

    Calling this more than once only updates the level; handlers are attached
    on the first call.

    Args:
        level: Level name ('debug', 'info', ...) or logging constant
        log_file: Optional path for a rotating log file
        max_bytes: Rotation threshold for the log file
        backup_count: Number of rotated files to keep

    Returns:
        The configured 'seedbed' logger

    Raises:
        ValueError: If level is not a known logging level name
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(_parse_level(level))

    if any(getattr(h, _HANDLER_MARKER, False) for h in logger.handlers):
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    setattr(stream_handler, _HANDLER_MARKER, True)
    logger.addHandler(stream_handler)

    if log_file:
        path = Path(log_file)
        ensure_dir(path.parent)
        file_handler = RotatingFileHandler(
            str(path), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARKER, True)
        logger.addHandler(file_handler)

    return logger
