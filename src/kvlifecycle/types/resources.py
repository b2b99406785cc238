"""Typed records for the managed resources.

These records are the package's own representation of what the management
API returns. The client backends convert SDK models to and from them so the
orchestrator and presenter never handle SDK objects directly.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, SecretStr, field_validator

from kvlifecycle.constants import SkuFamily, SkuName
from kvlifecycle.types.base import KVBaseModel


class ResourceGroup(KVBaseModel):
    """A named container scoping related resources to one location."""

    name: str
    location: str
    id: Optional[str] = None
    tags: Optional[Dict[str, str]] = None
    provisioning_state: Optional[str] = None


class Sku(KVBaseModel):
    family: str = SkuFamily.A.value
    name: SkuName = SkuName.STANDARD.value


class Permissions(KVBaseModel):
    """Operations granted to a principal on the vault's keys and secrets.

    Values are the API strings (see KeyPermission and SecretPermission).
    Plain strings are kept so that permissions added to the API after
    this release still round-trip.
    """

    keys: List[str] = Field(default_factory=list)
    secrets: List[str] = Field(default_factory=list)

    @field_validator("keys", "secrets", mode="before")
    @classmethod
    def enum_members_to_values(cls, v):
        if isinstance(v, (list, tuple)):
            return [item.value if isinstance(item, Enum) else item for item in v]
        return v


class AccessPolicyEntry(KVBaseModel):
    """Binds a principal (object id within a tenant) to a permission set."""

    tenant_id: str
    object_id: str
    permissions: Permissions = Field(default_factory=Permissions)
    application_id: Optional[str] = None


class VaultProperties(KVBaseModel):
    """The properties object of a vault.

    The management API replaces this object as a whole on every
    create-or-update call.
    """

    tenant_id: str
    sku: Sku = Field(default_factory=Sku)
    access_policies: List[AccessPolicyEntry] = Field(default_factory=list)
    enabled_for_deployment: Optional[bool] = None
    enabled_for_disk_encryption: Optional[bool] = None
    enabled_for_template_deployment: Optional[bool] = None
    enable_soft_delete: Optional[bool] = None
    vault_uri: Optional[str] = None


class VaultCreateOrUpdateParameters(KVBaseModel):
    """Complete request body for a vault create-or-update call."""

    location: str
    properties: VaultProperties
    tags: Dict[str, str] = Field(default_factory=dict)


class Vault(KVBaseModel):
    """A vault as returned by the management API."""

    name: str
    id: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None
    tags: Optional[Dict[str, str]] = None
    properties: Optional[VaultProperties] = None

    def to_parameters(self) -> VaultCreateOrUpdateParameters:
        """Build a full create-or-update request reproducing this vault's state.

        Server-assigned values (the vault URI) are left out. The returned
        object shares nothing with this vault, so callers may edit it freely.

        Raises:
            ValueError: If the vault was returned without location or properties
        """
        if not self.location or self.properties is None:
            raise ValueError(
                f"Vault '{self.name}' has no location or properties to resubmit"
            )
        properties = self.properties.model_copy(deep=True)
        properties.vault_uri = None
        return VaultCreateOrUpdateParameters(
            location=self.location,
            properties=properties,
            tags=dict(self.tags or {}),
        )


class ResourceSummary(KVBaseModel):
    """Generic resource entry returned by subscription-wide listings."""

    name: str
    id: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None
    tags: Optional[Dict[str, str]] = None


class SessionToken(KVBaseModel):
    """Bearer token issued by the identity authority.

    Attributes:
        token: The bearer credential
        expires_on: Expiry as seconds since the epoch
    """

    token: SecretStr
    expires_on: int

    def is_expired(self, now: Optional[float] = None, leeway: int = 0) -> bool:
        current = time.time() if now is None else now
        return current + leeway >= self.expires_on
