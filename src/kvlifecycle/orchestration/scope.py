"""Scoped acquisition of the run's resource group."""

from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from kvlifecycle.clients.protocols import ResourceGroupOperations
from kvlifecycle.constants import StepOutcome
from kvlifecycle.logging import get_logger
from kvlifecycle.types.resources import ResourceGroup
from .report import LifecycleReport

logger = get_logger(__name__)

DELETE_GROUP_STEP = "delete_resource_group"


@contextmanager
def resource_group_scope(
    groups: ResourceGroupOperations,
    name: str,
    location: str,
    tags: Optional[Dict[str, str]] = None,
    report: Optional[LifecycleReport] = None,
) -> Iterator[ResourceGroup]:
    """Create a resource group and delete it on every exit path.

    On normal exit the group is deleted and a failed delete raises. When
    the body raises, the delete is best-effort: its failure is logged and
    recorded on ``report`` while the body's exception propagates unchanged.

    Args:
        groups: Resource group client
        name: Group name
        location: Group location
        tags: Optional group tags
        report: Report receiving the deletion outcome

    Yields:
        The created resource group
    """
    group = groups.create_or_update(name, location, tags)
    logger.info(f"Resource group '{name}' acquired", extra={"location": location})

    try:
        yield group
    except BaseException:
        try:
            groups.delete(name)
        except Exception as cleanup_exc:
            logger.error(
                f"Best-effort deletion of resource group '{name}' failed",
                extra={"resource_group": name},
                exc_info=True,
            )
            if report is not None:
                report.cleanup_error = str(cleanup_exc)
                report.record(DELETE_GROUP_STEP, StepOutcome.FAILED, str(cleanup_exc))
        else:
            logger.info(f"Resource group '{name}' deleted after failure")
            if report is not None:
                report.record(DELETE_GROUP_STEP, StepOutcome.SUCCEEDED, "cleanup after failure")
        raise

    try:
        groups.delete(name)
    except Exception as exc:
        if report is not None:
            report.record(DELETE_GROUP_STEP, StepOutcome.FAILED, str(exc))
        raise
    logger.info(f"Resource group '{name}' released")
    if report is not None:
        report.record(DELETE_GROUP_STEP, StepOutcome.SUCCEEDED)
