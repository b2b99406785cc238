"""Token acquisition against the Azure identity authority."""

from typing import Any, Callable, Optional

from azure.core.credentials import AccessToken
from azure.core.exceptions import AzureError, ClientAuthenticationError
from azure.identity import ClientSecretCredential
from pydantic import SecretStr

from kvlifecycle.common.exceptions import AuthenticationFailedError
from kvlifecycle.logging import get_logger
from kvlifecycle.settings.cloud import CloudSettings
from kvlifecycle.settings.credentials import AzureCredentials
from kvlifecycle.types.resources import SessionToken
from kvlifecycle.utils.decorators import traced

logger = get_logger(__name__)


class TokenProvider:
    """Exchanges service principal credentials for a management API token.

    The provider does not cache or refresh. Each ``acquire()`` call performs
    one exchange with the identity authority; a long-running process calls it
    again once the token nears expiry.

    Attributes:
        credentials: Service principal credentials
        cloud: Authority and management endpoints
    """

    def __init__(
        self,
        credentials: AzureCredentials,
        cloud: Optional[CloudSettings] = None,
        credential_factory: Callable[..., Any] = ClientSecretCredential,
    ):
        """Initialize the provider.

        Args:
            credentials: Loaded service principal credentials
            cloud: Cloud endpoints, defaults to the public cloud
            credential_factory: Builds the azure-identity credential; takes
                tenant_id, client_id, client_secret and authority keywords
        """
        self.credentials = credentials
        self.cloud = cloud or CloudSettings()
        self._credential_factory = credential_factory

    @traced(
        span_name="kvlifecycle.auth.acquire_token",
        attribute_getter=lambda self: {
            "auth.tenant_id": self.credentials.tenant_id,
            "auth.authority": self.cloud.authority,
        },
    )
    def acquire(self) -> SessionToken:
        """Resolve the tenant's token endpoint and exchange the client secret.

        Returns:
            SessionToken scoped to the configured management endpoint

        Raises:
            AuthenticationFailedError: If tenant resolution or the token
                exchange fails
        """
        tenant_id = self.credentials.tenant_id
        authority = self.cloud.authority

        try:
            credential = self._credential_factory(
                tenant_id=tenant_id,
                client_id=self.credentials.client_id,
                client_secret=self.credentials.client_secret.get_secret_value(),
                authority=authority,
            )
        except ValueError as e:
            raise AuthenticationFailedError(
                f"Invalid tenant '{tenant_id}' for authority {authority}: {e}",
                tenant_id=tenant_id,
                authority=authority,
                cause=e,
            ) from e

        try:
            access_token = credential.get_token(self.cloud.management_scope)
        except ClientAuthenticationError as e:
            raise AuthenticationFailedError(
                f"Token exchange failed for tenant '{tenant_id}': {e.message}",
                tenant_id=tenant_id,
                authority=authority,
                cause=e,
            ) from e
        except AzureError as e:
            raise AuthenticationFailedError(
                f"Could not reach identity authority {authority}: {e.message}",
                tenant_id=tenant_id,
                authority=authority,
                cause=e,
            ) from e
        finally:
            close = getattr(credential, "close", None)
            if close is not None:
                close()

        logger.info(
            "Acquired management token",
            extra={"tenant_id": tenant_id, "expires_on": access_token.expires_on},
        )
        return SessionToken(
            token=SecretStr(access_token.token),
            expires_on=int(access_token.expires_on),
        )


class StaticTokenCredential:
    """azure-core ``TokenCredential`` serving one pre-acquired token.

    Management clients built on this credential share the run's single
    token. It never contacts the identity authority; once the token expires
    the management API rejects requests and the run fails.
    """

    def __init__(self, token: SessionToken):
        self._token = token
        self._warned = False

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        if self._token.is_expired() and not self._warned:
            logger.warning("Session token has expired; it is not refreshed within a run")
            self._warned = True
        return AccessToken(self._token.token.get_secret_value(), self._token.expires_on)

    def close(self) -> None:
        pass

    def __enter__(self) -> "StaticTokenCredential":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
