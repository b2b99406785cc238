from azure.identity import AzureAuthorityHosts
from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import KVBaseSettings


class CloudSettings(KVBaseSettings):
    """Endpoints of the Azure cloud the lifecycle runs against.

    Defaults target the public cloud. Sovereign clouds override both values,
    e.g. ``AZURE_CLOUD_AUTHORITY_HOST=login.microsoftonline.us`` and
    ``AZURE_CLOUD_RESOURCE_MANAGER_ENDPOINT=https://management.usgovcloudapi.net``.
    """

    model_config = SettingsConfigDict(
        env_prefix="AZURE_CLOUD_",
    )

    authority_host: str = Field(
        default=AzureAuthorityHosts.AZURE_PUBLIC_CLOUD,
        description="Identity authority host used to resolve the tenant's token endpoint"
    )
    resource_manager_endpoint: str = Field(
        default="https://management.azure.com",
        description="Azure Resource Manager endpoint the token is scoped to"
    )

    @field_validator("resource_manager_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def authority(self) -> str:
        host = self.authority_host
        if not host.startswith("https://"):
            host = f"https://{host}"
        return host.rstrip("/")

    @property
    def management_scope(self) -> str:
        """OAuth scope for tokens accepted by the management endpoint."""
        return f"{self.resource_manager_endpoint}/.default"
