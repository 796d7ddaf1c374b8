from __future__ import annotations

import logging
from io import StringIO

from calcsheet.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == APP_LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert len(second.handlers) == 1


def test_debug_raises_level_on_existing_logger():
    setup_logging()
    logger = setup_logging(debug=True)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("calcsheet_test_labels")
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("info message")
    logger.warning("warning message")
    logger.error("error message")
    logger.log(SUMMARY_LEVEL, "summary message")

    lines = captured.getvalue().strip().split("\n")
    assert lines == [
        "INFO info message",
        "WARN warning message",
        "ERROR error message",
        "SUMMARY summary message",
    ]


def test_module_loggers_reach_the_app_handler(capsys):
    setup_logging()
    logging.getLogger("calcsheet.assembler.sections").warning("section X skipped: boom")
    assert "WARN section X skipped: boom" in capsys.readouterr().out


def test_log_summary_and_get_logger(capsys):
    logger = get_logger()
    assert logger is setup_logging()
    log_summary("files=1/1 success=1")
    assert "SUMMARY files=1/1 success=1" in capsys.readouterr().out
