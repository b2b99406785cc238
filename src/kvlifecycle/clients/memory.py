"""In-memory client backend for tests and dry runs.

Implements the client facade protocols against a process-local store with
the same semantics the management API exposes to this package: upserts
keyed by group and name (case-insensitive), full-replace updates,
ARM-style resource ids, cascading group deletes, and not-found errors.
"""

import re
from typing import Dict, List, Optional, Tuple

from kvlifecycle.common.exceptions import RemoteOperationFailedError, resource_not_found_error
from kvlifecycle.constants import ResourceKind, VAULT_RESOURCE_TYPE, VAULT_SUBSCRIPTION_FILTER
from kvlifecycle.logging import get_logger
from kvlifecycle.types.resources import (
    ResourceGroup,
    ResourceSummary,
    Vault,
    VaultCreateOrUpdateParameters,
)

logger = get_logger(__name__)

_RESOURCE_TYPE_FILTER = re.compile(r"^\s*resourceType\s+eq\s+'([^']+)'\s*$", re.IGNORECASE)
_TAG_FILTER = re.compile(
    r"^\s*tagName\s+eq\s+'([^']+)'(?:\s+and\s+tagValue\s+eq\s+'([^']*)')?\s*$",
    re.IGNORECASE,
)


class InMemoryStore:
    """Shared state behind the in-memory clients of one subscription.

    Attributes:
        subscription_id: Subscription embedded in generated resource ids
        groups: Resource groups keyed by lower-cased name
        vaults: Vaults keyed by (lower-cased group, lower-cased name)
    """

    def __init__(self, subscription_id: str = "00000000-0000-0000-0000-000000000000"):
        self.subscription_id = subscription_id
        self.groups: Dict[str, ResourceGroup] = {}
        self.vaults: Dict[Tuple[str, str], Vault] = {}
        self._failures: Dict[Tuple[str, str], Exception] = {}

    def inject_failure(
        self,
        resource_kind: ResourceKind,
        operation: str,
        error: Optional[Exception] = None,
    ) -> None:
        """Make the next call of ``operation`` on ``resource_kind`` fail.

        The failure is consumed by the call it fails.

        Args:
            resource_kind: Kind whose client should fail
            operation: Client verb (create_or_update, get, delete, ...)
            error: Underlying cause; defaults to a generic RuntimeError
        """
        self._failures[(resource_kind.value, operation)] = error or RuntimeError(
            f"injected {operation} failure"
        )

    def check_failure(self, resource_kind: ResourceKind, operation: str, name: Optional[str] = None) -> None:
        error = self._failures.pop((resource_kind.value, operation), None)
        if error is not None:
            raise RemoteOperationFailedError(
                resource_kind=resource_kind.value,
                operation=operation,
                cause=error,
                resource_name=name,
            )

    def group_id(self, name: str) -> str:
        return f"/subscriptions/{self.subscription_id}/resourceGroups/{name}"

    def vault_id(self, group: str, name: str) -> str:
        return f"{self.group_id(group)}/providers/{VAULT_RESOURCE_TYPE}/{name}"


class InMemoryResourceGroupsClient:
    """Resource group operations against an InMemoryStore."""

    kind = ResourceKind.RESOURCE_GROUP

    def __init__(self, store: InMemoryStore):
        self._store = store

    def create_or_update(
        self,
        name: str,
        location: str,
        tags: Optional[Dict[str, str]] = None,
    ) -> ResourceGroup:
        self._store.check_failure(self.kind, "create_or_update", name)

        existing = self._store.groups.get(name.lower())
        if existing is not None and existing.location.lower() != location.lower():
            raise RemoteOperationFailedError(
                resource_kind=self.kind.value,
                operation="create_or_update",
                cause=ValueError(
                    f"Invalid resource group location '{location}'. The resource group "
                    f"already exists in location '{existing.location}'."
                ),
                resource_name=name,
            )

        group = ResourceGroup(
            name=existing.name if existing else name,
            location=location,
            id=self._store.group_id(existing.name if existing else name),
            tags=dict(tags) if tags else None,
            provisioning_state="Succeeded",
        )
        self._store.groups[name.lower()] = group
        return group.model_copy(deep=True)

    def get(self, name: str) -> ResourceGroup:
        self._store.check_failure(self.kind, "get", name)
        group = self._store.groups.get(name.lower())
        if group is None:
            raise resource_not_found_error(self.kind.value, "get", name)
        return group.model_copy(deep=True)

    def list(self, filter: Optional[str] = None) -> List[ResourceGroup]:
        self._store.check_failure(self.kind, "list")
        groups = list(self._store.groups.values())
        if filter:
            match = _TAG_FILTER.match(filter)
            if not match:
                raise RemoteOperationFailedError(
                    resource_kind=self.kind.value,
                    operation="list",
                    cause=ValueError(f"Unsupported filter: {filter}"),
                )
            tag_name, tag_value = match.groups()
            groups = [
                g for g in groups
                if g.tags and tag_name in g.tags
                and (tag_value is None or g.tags[tag_name] == tag_value)
            ]
        return [g.model_copy(deep=True) for g in groups]

    def delete(self, name: str) -> None:
        self._store.check_failure(self.kind, "delete", name)
        if self._store.groups.pop(name.lower(), None) is None:
            raise resource_not_found_error(self.kind.value, "delete", name)
        for key in [key for key in self._store.vaults if key[0] == name.lower()]:
            del self._store.vaults[key]


class InMemoryVaultsClient:
    """Vault operations against an InMemoryStore."""

    kind = ResourceKind.VAULT

    def __init__(self, store: InMemoryStore):
        self._store = store

    def _require_group(self, resource_group: str, operation: str) -> ResourceGroup:
        group = self._store.groups.get(resource_group.lower())
        if group is None:
            raise resource_not_found_error(
                ResourceKind.RESOURCE_GROUP.value, operation, resource_group
            )
        return group

    def create_or_update(
        self,
        resource_group: str,
        name: str,
        parameters: VaultCreateOrUpdateParameters,
    ) -> Vault:
        self._store.check_failure(self.kind, "create_or_update", name)
        group = self._require_group(resource_group, "create_or_update")

        key = (resource_group.lower(), name.lower())
        existing = self._store.vaults.get(key)
        if existing is not None and (existing.location or "").lower() != parameters.location.lower():
            raise RemoteOperationFailedError(
                resource_kind=self.kind.value,
                operation="create_or_update",
                cause=ValueError(
                    f"The location of vault '{name}' cannot be changed from "
                    f"'{existing.location}' to '{parameters.location}'."
                ),
                resource_name=name,
            )

        vault_name = existing.name if existing else name
        properties = parameters.properties.model_copy(deep=True)
        properties.vault_uri = f"https://{vault_name.lower()}.vault.azure.net/"
        vault = Vault(
            name=vault_name,
            id=self._store.vault_id(group.name, vault_name),
            type=VAULT_RESOURCE_TYPE,
            location=parameters.location,
            tags=dict(parameters.tags) if parameters.tags else None,
            properties=properties,
        )
        self._store.vaults[key] = vault
        logger.debug(f"In-memory vault '{vault_name}' stored in '{group.name}'")
        return vault.model_copy(deep=True)

    def get(self, resource_group: str, name: str) -> Vault:
        self._store.check_failure(self.kind, "get", name)
        vault = self._store.vaults.get((resource_group.lower(), name.lower()))
        if vault is None:
            raise resource_not_found_error(self.kind.value, "get", name)
        return vault.model_copy(deep=True)

    def list_by_resource_group(self, resource_group: str) -> List[Vault]:
        self._store.check_failure(self.kind, "list_by_resource_group")
        self._require_group(resource_group, "list_by_resource_group")
        return [
            vault.model_copy(deep=True)
            for (group, _), vault in self._store.vaults.items()
            if group == resource_group.lower()
        ]

    def list_by_subscription(
        self,
        filter: Optional[str] = VAULT_SUBSCRIPTION_FILTER,
    ) -> List[ResourceSummary]:
        self._store.check_failure(self.kind, "list_by_subscription")
        if filter:
            match = _RESOURCE_TYPE_FILTER.match(filter)
            if not match:
                raise RemoteOperationFailedError(
                    resource_kind=self.kind.value,
                    operation="list_by_subscription",
                    cause=ValueError(f"Unsupported filter: {filter}"),
                )
            if match.group(1).lower() != VAULT_RESOURCE_TYPE.lower():
                return []

        return [
            ResourceSummary(
                name=vault.name,
                id=vault.id,
                type=vault.type,
                location=vault.location,
                tags=dict(vault.tags) if vault.tags else None,
            )
            for vault in self._store.vaults.values()
        ]

    def delete(self, resource_group: str, name: str) -> None:
        self._store.check_failure(self.kind, "delete", name)
        if self._store.vaults.pop((resource_group.lower(), name.lower()), None) is None:
            raise resource_not_found_error(self.kind.value, "delete", name)
