"""Tests for structured logging."""

import json
import logging

from fpe.utils import JSONFormatter, get_logger


def test_json_formatter_merges_extra() -> None:
    record = logging.LogRecord("fpe.test", logging.INFO, __file__, 1, "analysis done", None, None)
    record.extra = {"monthly": 0.213, "category": "excellent"}
    data = json.loads(JSONFormatter().format(record))
    assert data["message"] == "analysis done"
    assert data["level"] == "INFO"
    assert data["monthly"] == 0.213


def test_get_logger_attaches_one_handler() -> None:
    first = get_logger("fpe.test.handlers")
    second = get_logger("fpe.test.handlers")
    assert first is second
    assert len(second.handlers) == 1


def test_explicit_level_and_format_reconfigure() -> None:
    logger = get_logger("fpe.test.reconfigure", level="DEBUG", log_format="text")
    assert logger.level == logging.DEBUG
    assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    logger = get_logger("fpe.test.reconfigure", level="WARNING", log_format="json")
    assert logger.level == logging.WARNING
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)
    assert len(logger.handlers) == 1


def test_implicit_call_keeps_configuration() -> None:
    get_logger("fpe.test.implicit", level="ERROR")
    assert get_logger("fpe.test.implicit").level == logging.ERROR
