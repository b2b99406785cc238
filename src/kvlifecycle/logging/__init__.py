"""Logging infrastructure for kvlifecycle.

This module provides structured logging with JSON output and run context
tracking.
"""

from kvlifecycle.logging.filters import ContextFilter
from kvlifecycle.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
]
