"""Lifecycle orchestration: bootstrap, scoped resource group, step sequencing."""

from .context import LifecycleContext
from .orchestrator import LifecycleOrchestrator, TEARDOWN_PROMPT, broaden_permissions
from .report import LifecycleReport, StepRecord
from .scope import DELETE_GROUP_STEP, resource_group_scope

__all__ = [
    "LifecycleContext",
    "LifecycleOrchestrator",
    "LifecycleReport",
    "StepRecord",
    "TEARDOWN_PROMPT",
    "DELETE_GROUP_STEP",
    "broaden_permissions",
    "resource_group_scope",
]
