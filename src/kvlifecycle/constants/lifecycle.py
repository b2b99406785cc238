"""Lifecycle constants and enumerations."""

from enum import Enum


class LifecycleState(str, Enum):
    """States of a lifecycle run, in the order they are reached.

    Values:
        UNSTARTED: Nothing has been created yet
        GROUP_CREATED: The resource group exists
        VAULT_CREATED: The primary vault exists with its initial policies
        VAULT_CONFIGURED: The primary vault has been updated in place
        SECOND_VAULT_CREATED: The optional second vault exists
        LISTED: Vaults have been enumerated at subscription and group scope
        TORN_DOWN: All vaults and the resource group have been deleted
    """

    UNSTARTED = "unstarted"
    GROUP_CREATED = "group_created"
    VAULT_CREATED = "vault_created"
    VAULT_CONFIGURED = "vault_configured"
    SECOND_VAULT_CREATED = "second_vault_created"
    LISTED = "listed"
    TORN_DOWN = "torn_down"


class TeardownMode(str, Enum):
    """How the orchestrator proceeds to the destructive teardown step.

    Values:
        PROMPT: Pause and wait for the operator to press enter
        AUTO: Proceed immediately (unattended runs)
    """

    PROMPT = "prompt"
    AUTO = "auto"


class ClientBackend(str, Enum):
    """Implementation behind the resource client facade.

    Values:
        AZURE: Azure Resource Manager through the management SDKs
        MEMORY: In-process store for tests and dry runs
    """

    AZURE = "azure"
    MEMORY = "memory"


class ResourceKind(str, Enum):
    """Managed resource kinds exposed by the client facade."""

    RESOURCE_GROUP = "resource_group"
    VAULT = "vault"


class StepOutcome(str, Enum):
    """Outcome recorded for each lifecycle step."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class LogFormat(str, Enum):
    """Console log format."""

    JSON = "json"
    TEXT = "text"
