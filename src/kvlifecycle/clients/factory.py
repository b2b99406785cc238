"""Factory for the resource client facade.

Builds one client per managed resource kind on top of a single token
credential, choosing the Azure or in-memory backend from configuration.
"""

from dataclasses import dataclass
from typing import Any, Optional

from kvlifecycle.__version__ import __version__
from kvlifecycle.constants import ClientBackend
from kvlifecycle.logging import get_logger
from kvlifecycle.settings.cloud import CloudSettings
from .memory import InMemoryResourceGroupsClient, InMemoryStore, InMemoryVaultsClient
from .protocols import ResourceGroupOperations, VaultOperations

logger = get_logger(__name__)


@dataclass(frozen=True)
class ManagementClients:
    """The clients used by one lifecycle run."""

    resource_groups: ResourceGroupOperations
    vaults: VaultOperations
    backend: ClientBackend


def _user_agent(extra: str = "") -> str:
    agent = f"kvlifecycle/{__version__}"
    return f"{agent} {extra}".strip()


def create_azure_clients(
    subscription_id: str,
    credential: Any,
    cloud: Optional[CloudSettings] = None,
    user_agent: str = "",
) -> ManagementClients:
    """Create clients backed by Azure Resource Manager.

    Args:
        subscription_id: Target subscription
        credential: azure-core TokenCredential shared by all clients
        cloud: Management endpoint configuration
        user_agent: Extra token appended to the ``kvlifecycle/<version>`` agent

    Returns:
        ManagementClients for the Azure backend
    """
    from azure.mgmt.keyvault import KeyVaultManagementClient
    from azure.mgmt.resource import ResourceManagementClient

    from .azure import AzureResourceGroupsClient, AzureVaultsClient

    cloud = cloud or CloudSettings()
    client_kwargs = {
        "base_url": cloud.resource_manager_endpoint,
        "credential_scopes": [cloud.management_scope],
        "user_agent": _user_agent(user_agent),
    }

    resource_client = ResourceManagementClient(credential, subscription_id, **client_kwargs)
    keyvault_client = KeyVaultManagementClient(credential, subscription_id, **client_kwargs)

    logger.debug(
        "Created Azure management clients",
        extra={"subscription_id": subscription_id, "endpoint": cloud.resource_manager_endpoint},
    )
    return ManagementClients(
        resource_groups=AzureResourceGroupsClient(resource_client),
        vaults=AzureVaultsClient(keyvault_client, resource_client),
        backend=ClientBackend.AZURE,
    )


def create_memory_clients(store: Optional[InMemoryStore] = None, subscription_id: Optional[str] = None) -> ManagementClients:
    """Create clients sharing an in-memory store.

    Args:
        store: Existing store to share; a new one is created when omitted
        subscription_id: Subscription used in generated ids of a new store

    Returns:
        ManagementClients for the memory backend
    """
    if store is None:
        store = InMemoryStore(subscription_id) if subscription_id else InMemoryStore()
    return ManagementClients(
        resource_groups=InMemoryResourceGroupsClient(store),
        vaults=InMemoryVaultsClient(store),
        backend=ClientBackend.MEMORY,
    )


def create_management_clients(
    subscription_id: str,
    credential: Any,
    backend: ClientBackend = ClientBackend.AZURE,
    cloud: Optional[CloudSettings] = None,
    user_agent: str = "",
    store: Optional[InMemoryStore] = None,
) -> ManagementClients:
    """Create the client facade for the configured backend.

    Args:
        subscription_id: Target subscription
        credential: TokenCredential used by the Azure backend
        backend: Which implementation to build
        cloud: Management endpoint configuration (Azure backend)
        user_agent: Extra user agent token (Azure backend)
        store: Store to share (memory backend)

    Returns:
        ManagementClients instance
    """
    if ClientBackend(backend) == ClientBackend.MEMORY:
        logger.info("Using in-memory management clients")
        return create_memory_clients(store, subscription_id)
    return create_azure_clients(subscription_id, credential, cloud, user_agent)
