"""Lifecycle run configuration."""

from typing import Dict

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from kvlifecycle.constants import ClientBackend, LogFormat, TeardownMode
from .base import KVBaseSettings


class LifecycleSettings(KVBaseSettings):
    """Configuration for one lifecycle run.

    The two variants of the sample are expressed through ``teardown_mode``
    and ``create_second_vault``:

    - interactive: ``teardown_mode=prompt``, ``create_second_vault=true``
    - unattended: ``teardown_mode=auto``, ``create_second_vault=false``
    """

    model_config = SettingsConfigDict(
        env_prefix="KVLIFECYCLE_",
    )

    group_name: str = Field(
        default="kvlifecycle-sample-group",
        min_length=1,
        description="Resource group created for the run and deleted at the end"
    )
    location: str = Field(
        default="westus",
        min_length=1,
        description="Location of the resource group and the primary vault"
    )
    vault_name: str = Field(
        default="kvlifecyclevault",
        min_length=1,
        description="Name of the primary vault"
    )
    second_vault_name: str = Field(
        default="kvlifecyclevault2",
        min_length=1,
        description="Name of the optional second vault"
    )
    second_location: str = Field(
        default="eastus",
        min_length=1,
        description="Location of the optional second vault"
    )
    create_second_vault: bool = Field(
        default=True,
        description="Whether to create a second vault in second_location"
    )
    teardown_mode: TeardownMode = Field(
        default=TeardownMode.PROMPT,
        description="prompt: wait for enter before deleting; auto: delete immediately"
    )
    backend: ClientBackend = Field(
        default=ClientBackend.AZURE,
        description="azure for the real management API, memory for an in-process store"
    )
    tags: Dict[str, str] = Field(
        default_factory=dict,
        description="Tags applied to created vaults (JSON object in the environment)"
    )
    principal_object_id: str = Field(
        default="",
        description="Object id granted access on the vaults; defaults to the client id"
    )
    user_agent: str = Field(
        default="",
        description="Extra user agent token appended to management API requests"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_format: LogFormat = Field(
        default=LogFormat.JSON,
        description="json or text"
    )

    @model_validator(mode="after")
    def validate_vault_names(self) -> "LifecycleSettings":
        if self.create_second_vault and self.second_vault_name == self.vault_name:
            raise ValueError(
                f"second_vault_name must differ from vault_name ('{self.vault_name}')"
            )
        return self

    @property
    def prompts_before_teardown(self) -> bool:
        return TeardownMode(self.teardown_mode) == TeardownMode.PROMPT
