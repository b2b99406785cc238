"""Text rendering of vaults, resource groups and listing entries."""

from .formatting import (
    NO_ACCESS_POLICIES,
    NO_TAGS,
    NOT_AVAILABLE,
    format_access_policy,
    format_resource_group,
    format_resource_summary,
    format_tags,
    format_vault,
)

__all__ = [
    "NO_ACCESS_POLICIES",
    "NO_TAGS",
    "NOT_AVAILABLE",
    "format_access_policy",
    "format_resource_group",
    "format_resource_summary",
    "format_tags",
    "format_vault",
]
