from __future__ import annotations

import logging
from io import StringIO

from finsheet.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    reset_logging()
    logger = setup_logging()

    assert logger.name == LOGGER_NAME == "finsheet"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_logging_labeled_prefixes():
    """Log output carries INFO|WARN|ERROR|SUMMARY prefixes."""
    captured_output = StringIO()

    logger = logging.getLogger("test_finsheet_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(captured_output)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured_output.getvalue().strip().split('\n')
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_module_loggers_use_application_handler(capsys):
    reset_logging()
    setup_logging()

    logging.getLogger("finsheet.services.orchestrator").warning("sheet=Q1 required fields not found")

    out = capsys.readouterr().out
    assert "WARN sheet=Q1 required fields not found" in out


def test_log_summary_writes_summary_label(capsys):
    reset_logging()
    setup_logging()

    log_summary("files=1 success=1")

    assert "SUMMARY files=1 success=1" in capsys.readouterr().out


def test_get_logger_returns_configured_logger():
    reset_logging()
    setup_logger = setup_logging()

    assert get_logger() is setup_logger


def test_setup_logging_idempotent():
    reset_logging()
    logger1 = setup_logging()
    logger2 = setup_logging()

    assert logger1 is logger2
    assert len(logger1.handlers) == 1
