"""Resource client facade.

One logical client per managed resource kind (resource groups, vaults),
each exposing create-or-update, get, list and delete. Two implementations
exist behind the same protocols: Azure Resource Manager through the
management SDKs, and an in-memory store for tests and dry runs.
"""

from .factory import (
    ManagementClients,
    create_azure_clients,
    create_management_clients,
    create_memory_clients,
)
from .memory import InMemoryResourceGroupsClient, InMemoryStore, InMemoryVaultsClient
from .protocols import ResourceGroupOperations, VaultOperations

__all__ = [
    "ManagementClients",
    "create_azure_clients",
    "create_management_clients",
    "create_memory_clients",
    "InMemoryResourceGroupsClient",
    "InMemoryStore",
    "InMemoryVaultsClient",
    "ResourceGroupOperations",
    "VaultOperations",
]
