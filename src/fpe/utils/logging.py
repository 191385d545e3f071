"""Structured logging configuration."""

import logging
import json
import sys
from typing import Any, Dict, Optional

from ..config.settings import settings


class JSONFormatter(logging.Formatter):
    """Format logs as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra"):
            log_data.update(record.extra)  # type: ignore
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def get_logger(
    name: str,
    level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """Return a logger writing to stdout in the configured format.

    ``level`` and ``log_format`` default to ``settings.log_level`` and
    ``settings.log_format``.  The handler is attached once per logger
    name; passing either argument explicitly reconfigures an existing
    logger, so an engine built with its own ``Settings`` gets its own
    level and format.
    """
    logger = logging.getLogger(name)
    explicit = level is not None or log_format is not None
    if logger.handlers and not explicit:
        return logger

    if not logger.handlers:
        logger.addHandler(logging.StreamHandler(sys.stdout))
    for handler in logger.handlers:
        handler.setFormatter(_formatter(log_format or settings.log_format))
    logger.setLevel(getattr(logging, (level or settings.log_level).upper(), logging.INFO))
    return logger
