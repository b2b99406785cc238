"""Human-readable rendering of resource records.

Pure functions; callers decide where the text goes. Absent optional
fields are rendered as fixed placeholder strings, never as errors.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from kvlifecycle.types.resources import AccessPolicyEntry, ResourceGroup, ResourceSummary, Vault

NO_TAGS = "No tags yet"
NO_ACCESS_POLICIES = "No access policies defined"
NO_PERMISSIONS = "none"
NOT_AVAILABLE = "n/a"


def _text(value: Any) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _join(values: Optional[Iterable[Any]]) -> str:
    items = [_text(v) for v in (values or [])]
    return ", ".join(items) if items else NO_PERMISSIONS


def format_tags(tags: Optional[Dict[str, str]], indent: str = "\t\t") -> List[str]:
    """Render tags one per line, sorted by key."""
    if not tags:
        return [f"{indent}{NO_TAGS}"]
    return [f"{indent}{key} = {tags[key]}" for key in sorted(tags)]


def format_access_policy(policy: Optional[AccessPolicyEntry], indent: str = "\t\t") -> List[str]:
    if policy is None:
        return [f"{indent}{NO_ACCESS_POLICIES}"]
    return [
        f"{indent}Object ID: {_text(policy.object_id)}",
        f"{indent}Key permissions: {_join(policy.permissions.keys)}",
        f"{indent}Secret permissions: {_join(policy.permissions.secrets)}",
    ]


def format_vault(vault: Vault) -> str:
    """Render a vault's name, id, location, type, tags, SKU and first policy.

    Args:
        vault: Vault as returned by the client facade

    Returns:
        Multi-line text block, without a trailing newline
    """
    properties = vault.properties
    sku = NOT_AVAILABLE
    first_policy = None
    if properties is not None:
        if properties.sku is not None:
            sku = f"{_text(properties.sku.name)} - {_text(properties.sku.family)}"
        if properties.access_policies:
            first_policy = properties.access_policies[0]

    lines = [
        f"Key vault '{vault.name}'",
        f"\tID: {_text(vault.id)}",
        f"\tLocation: {_text(vault.location)}",
        f"\tType: {_text(vault.type)}",
        "\tTags:",
        *format_tags(vault.tags),
        f"\tSku: {sku}",
        "\tAccess Policies:",
        *format_access_policy(first_policy),
    ]
    if properties is not None and (
        properties.enabled_for_deployment or properties.enabled_for_template_deployment
    ):
        lines.append(
            f"\tDeployment: vm={bool(properties.enabled_for_deployment)} "
            f"template={bool(properties.enabled_for_template_deployment)}"
        )
    return "\n".join(lines)


def format_resource_summary(resource: ResourceSummary) -> str:
    """One-line rendering used for subscription listings."""
    return f"\t{resource.name} ({_text(resource.location)})"


def format_resource_group(group: ResourceGroup) -> str:
    lines = [
        f"Resource group '{group.name}'",
        f"\tID: {_text(group.id)}",
        f"\tLocation: {_text(group.location)}",
        f"\tProvisioning state: {_text(group.provisioning_state)}",
        "\tTags:",
        *format_tags(group.tags),
    ]
    return "\n".join(lines)
