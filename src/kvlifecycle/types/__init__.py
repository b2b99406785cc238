"""Typed records shared by the client facade, orchestrator and presenter."""

from kvlifecycle.types.base import KVBaseModel
from kvlifecycle.types.resources import (
    AccessPolicyEntry,
    Permissions,
    ResourceGroup,
    ResourceSummary,
    SessionToken,
    Sku,
    Vault,
    VaultCreateOrUpdateParameters,
    VaultProperties,
)

__all__ = [
    "KVBaseModel",
    "AccessPolicyEntry",
    "Permissions",
    "ResourceGroup",
    "ResourceSummary",
    "SessionToken",
    "Sku",
    "Vault",
    "VaultCreateOrUpdateParameters",
    "VaultProperties",
]
