"""Observability helpers shared across the lifecycle run."""

from kvlifecycle.observability.context import LifecycleRunContext, lifecycle_run_scope

__all__ = [
    "LifecycleRunContext",
    "lifecycle_run_scope",
]
