from __future__ import annotations

import logging
import sys

"""Labeled stdout logging for the calcsheet application.

Lines look like ``WARN section SOE skipped: ...``. Library modules only call
``logging.getLogger(__name__)``; their records reach stdout once the CLI (or
a test) has called ``setup_logging``, because every module logger is a child
of the ``calcsheet`` logger configured here.
"""

__all__ = [
    "SUMMARY_LEVEL",
    "APP_LOGGER_NAME",
    "LEVEL_LABELS",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

# between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

APP_LOGGER_NAME = "calcsheet"

LEVEL_LABELS: dict[int, str] = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_app_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        label = LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def _set_level(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach one stdout handler to the ``calcsheet`` logger and return it.

    Calling it again returns the same logger; ``debug=True`` on a later call
    still lowers the level to DEBUG.
    """
    global _app_logger

    level = logging.DEBUG if debug else logging.INFO
    if _app_logger is not None:
        if debug:
            _set_level(_app_logger, level)
        return _app_logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(APP_LOGGER_NAME)
    # handlers left by an earlier configuration would print every line twice
    for stale in list(logger.handlers):
        logger.removeHandler(stale)

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(LabeledFormatter())
    logger.addHandler(stream)
    _set_level(logger, level)
    logger.propagate = False

    _app_logger = logger
    return logger


def get_logger() -> logging.Logger:
    return _app_logger if _app_logger is not None else setup_logging()


def log_summary(message: str) -> None:
    """Emit ``message`` at the SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next ``setup_logging`` starts over (tests)."""
    global _app_logger
    _app_logger = None
