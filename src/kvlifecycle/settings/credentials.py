"""Azure service principal credentials.

This module contains only the data the Credential Loader produces. Loading
and validation live in ``kvlifecycle.auth.credentials``.
"""

from typing import ClassVar, Dict, List

from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

from .base import KVBaseSettings


class AzureCredentials(KVBaseSettings):
    """Identity parameters for the service principal running the lifecycle.

    Every field defaults to empty so that absent values can be reported
    together instead of failing on the first one. Instances are frozen.
    """

    model_config = SettingsConfigDict(
        env_prefix="AZURE_",
        frozen=True,
    )

    # field name -> environment variable, in reporting order
    ENV_VARS: ClassVar[Dict[str, str]] = {
        "tenant_id": "AZURE_TENANT_ID",
        "client_id": "AZURE_CLIENT_ID",
        "client_secret": "AZURE_CLIENT_SECRET",
        "subscription_id": "AZURE_SUBSCRIPTION_ID",
    }

    tenant_id: str = Field(
        default="",
        description="Azure AD tenant ID or domain"
    )
    client_id: str = Field(
        default="",
        description="Application (client) ID of the service principal"
    )
    client_secret: SecretStr = Field(
        default=SecretStr(""),
        description="Client secret of the service principal"
    )
    subscription_id: str = Field(
        default="",
        description="Subscription the resources are created in"
    )

    def missing_keys(self) -> List[str]:
        """Return the environment variable names whose values are empty."""
        values = {
            "tenant_id": self.tenant_id,
            "client_id": self.client_id,
            "client_secret": self.client_secret.get_secret_value().strip(),
            "subscription_id": self.subscription_id,
        }
        return [self.ENV_VARS[field] for field, value in values.items() if not value]
