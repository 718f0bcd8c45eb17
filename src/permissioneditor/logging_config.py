"""
Logging Configuration
=====================
Console and optional file logging for the 'permissioneditor' namespace.

Level and log file default to the PERMISSIONEDITOR_DEBUG and
PERMISSIONEDITOR_LOG_FILE environment settings read by config.
"""
import logging
import sys
from typing import List, Optional

from permissioneditor.config import (
    FILE_ENCODING, LOG_DATE_FORMAT, LOG_FORMAT, LOGGER_NAME, debug_enabled, log_file_path,
)


def setup_logging(level: Optional[int] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the package logger and returns it.

    Args:
        level: Logging level. None picks DEBUG when debugging is enabled in
            the environment, INFO otherwise.
        log_file: File the log is appended to. None falls back to the
            environment setting.
    """
    if level is None:
        level = logging.DEBUG if debug_enabled() else logging.INFO
    if log_file is None:
        log_file = log_file_path()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Calling twice replaces handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding=FILE_ENCODING))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(
        f"Logging initialized at {logging.getLevelName(level)}"
        + (f", writing to {log_file}" if log_file else "")
    )
    return logger
