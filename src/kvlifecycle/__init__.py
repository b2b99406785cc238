"""kvlifecycle: Azure Key Vault lifecycle sample.

Creates a resource group, provisions vaults with access policies, updates
them in place, lists them and deletes everything again, through the Azure
management APIs.
"""

from kvlifecycle.__version__ import __version__

from kvlifecycle.auth import TokenProvider, load_credentials
from kvlifecycle.clients import ManagementClients, create_management_clients
from kvlifecycle.common.exceptions import (
    AuthenticationFailedError,
    ErrorCode,
    LifecycleError,
    MalformedIdentifierError,
    MissingCredentialsError,
    RemoteOperationFailedError,
)
from kvlifecycle.orchestration import (
    LifecycleContext,
    LifecycleOrchestrator,
    LifecycleReport,
    resource_group_scope,
)
from kvlifecycle.presenter import format_vault
from kvlifecycle.settings import AzureCredentials, CloudSettings, LifecycleSettings, get_settings

__all__ = [
    "__version__",

    "TokenProvider",
    "load_credentials",

    "ManagementClients",
    "create_management_clients",

    "LifecycleContext",
    "LifecycleOrchestrator",
    "LifecycleReport",
    "resource_group_scope",

    "format_vault",

    "AzureCredentials",
    "CloudSettings",
    "LifecycleSettings",
    "get_settings",

    # Exceptions (public API)
    "AuthenticationFailedError",
    "ErrorCode",
    "LifecycleError",
    "MalformedIdentifierError",
    "MissingCredentialsError",
    "RemoteOperationFailedError",
]
