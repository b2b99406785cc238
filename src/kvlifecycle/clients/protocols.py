"""Client facade protocol definitions.

One protocol per managed resource kind. Both the Azure-backed clients and
the in-memory clients implement them, so the orchestrator depends only on
these interfaces.
"""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from kvlifecycle.constants import VAULT_SUBSCRIPTION_FILTER
from kvlifecycle.types.resources import (
    ResourceGroup,
    ResourceSummary,
    Vault,
    VaultCreateOrUpdateParameters,
)


@runtime_checkable
class ResourceGroupOperations(Protocol):
    """Operations on resource groups within one subscription.

    Every method is a blocking remote call and raises
    RemoteOperationFailedError on failure.
    """

    def create_or_update(
        self,
        name: str,
        location: str,
        tags: Optional[Dict[str, str]] = None,
    ) -> ResourceGroup:
        """Create the group, or update it in place if it already exists."""
        ...

    def get(self, name: str) -> ResourceGroup:
        ...

    def list(self, filter: Optional[str] = None) -> List[ResourceGroup]:
        """List groups in the subscription, optionally narrowed by an OData filter."""
        ...

    def delete(self, name: str) -> None:
        """Delete the group and everything in it, waiting for completion."""
        ...


@runtime_checkable
class VaultOperations(Protocol):
    """Operations on vaults within one subscription.

    Every method is a blocking remote call and raises
    RemoteOperationFailedError on failure.
    """

    def create_or_update(
        self,
        resource_group: str,
        name: str,
        parameters: VaultCreateOrUpdateParameters,
    ) -> Vault:
        """Upsert keyed by group and name.

        The request replaces the vault's properties as a whole. Fields left
        out of ``parameters`` are not preserved from the existing vault.
        """
        ...

    def get(self, resource_group: str, name: str) -> Vault:
        ...

    def list_by_resource_group(self, resource_group: str) -> List[Vault]:
        ...

    def list_by_subscription(
        self,
        filter: Optional[str] = VAULT_SUBSCRIPTION_FILTER,
    ) -> List[ResourceSummary]:
        """List resources across the subscription matching an OData filter."""
        ...

    def delete(self, resource_group: str, name: str) -> None:
        ...
