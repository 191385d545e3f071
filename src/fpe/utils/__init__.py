"""Shared utilities."""

from .logging import JSONFormatter, get_logger  # noqa: F401
