"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
enabling correlation of all log lines written during one lifecycle run.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional

from kvlifecycle.__version__ import __version__

run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)
subscription_id_var: ContextVar[Optional[str]] = ContextVar("subscription_id", default=None)

_static_context: Dict[str, Any] = {}


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        # Explicit extra= values win over unset context variables
        setattr(record, "run_id", run_id_var.get() or getattr(record, "run_id", None))
        setattr(
            record,
            "subscription_id",
            subscription_id_var.get() or getattr(record, "subscription_id", None),
        )
        setattr(record, "sdk_name", "kvlifecycle")
        setattr(record, "sdk_version", __version__)

        for key, value in _static_context.items():
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


def set_logging_context(
    environment: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Replace the process-wide fields added to every record."""
    _static_context.clear()
    if environment is not None:
        _static_context["environment"] = environment
    if extra:
        _static_context.update(extra)


def set_run_context(
    run_id: Optional[str] = None,
    subscription_id: Optional[str] = None,
) -> None:
    """Set run context variables."""
    if run_id is not None:
        run_id_var.set(run_id)
    if subscription_id is not None:
        subscription_id_var.set(subscription_id)


def clear_run_context() -> None:
    """Clear all run context variables."""
    run_id_var.set(None)
    subscription_id_var.set(None)
