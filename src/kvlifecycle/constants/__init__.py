"""Constants module for kvlifecycle.

This module contains the constant values and enumerations used throughout
the package. As the bottom layer it has no dependencies on other kvlifecycle
modules.

Organization:
    - keyvault: Vault permission, SKU and resource type constants
    - lifecycle: Orchestrator states, teardown modes and client backends
"""

from kvlifecycle.constants.keyvault import (
    KeyPermission,
    SecretPermission,
    SkuFamily,
    SkuName,
    VAULT_RESOURCE_TYPE,
    VAULT_SUBSCRIPTION_FILTER,
)
from kvlifecycle.constants.lifecycle import (
    ClientBackend,
    LifecycleState,
    LogFormat,
    ResourceKind,
    StepOutcome,
    TeardownMode,
)

__all__ = [
    "KeyPermission",
    "SecretPermission",
    "SkuFamily",
    "SkuName",
    "VAULT_RESOURCE_TYPE",
    "VAULT_SUBSCRIPTION_FILTER",
    "ClientBackend",
    "LifecycleState",
    "LogFormat",
    "ResourceKind",
    "StepOutcome",
    "TeardownMode",
]
