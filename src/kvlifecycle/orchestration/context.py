"""Run bootstrap: credentials, token and clients gathered in one struct."""

from dataclasses import dataclass
from typing import Optional

from kvlifecycle.auth.credentials import require_guid
from kvlifecycle.auth.token_provider import StaticTokenCredential, TokenProvider
from kvlifecycle.clients.factory import ManagementClients, create_management_clients
from kvlifecycle.clients.memory import InMemoryStore
from kvlifecycle.constants import ClientBackend
from kvlifecycle.logging import get_logger
from kvlifecycle.settings.cloud import CloudSettings
from kvlifecycle.settings.credentials import AzureCredentials
from kvlifecycle.settings.lifecycle import LifecycleSettings
from kvlifecycle.types.resources import SessionToken

logger = get_logger(__name__)


@dataclass(frozen=True)
class LifecycleContext:
    """Everything a lifecycle run needs, built once at startup.

    Attributes:
        credentials: Loaded service principal credentials
        settings: Run configuration
        clients: Client facade for each resource kind
        token: Session token shared by the clients; None when the memory
            backend runs without a token provider
    """

    credentials: AzureCredentials
    settings: LifecycleSettings
    clients: ManagementClients
    token: Optional[SessionToken] = None

    @classmethod
    def bootstrap(
        cls,
        credentials: AzureCredentials,
        settings: LifecycleSettings,
        cloud: Optional[CloudSettings] = None,
        token_provider: Optional[TokenProvider] = None,
        store: Optional[InMemoryStore] = None,
    ) -> "LifecycleContext":
        """Acquire the session token once and build the clients.

        The Azure backend always acquires a token, building a TokenProvider
        when none is given. The memory backend only does so when a provider
        is passed in.

        Args:
            credentials: Loaded service principal credentials
            settings: Run configuration
            cloud: Authority and management endpoints
            token_provider: Provider to use instead of the default one
            store: In-memory store to share (memory backend)

        Returns:
            LifecycleContext ready to hand to the orchestrator

        Raises:
            AuthenticationFailedError: If the token cannot be acquired
            MalformedIdentifierError: If the Azure backend is selected and the
                tenant id is not a GUID
        """
        cloud = cloud or CloudSettings()
        backend = ClientBackend(settings.backend)
        if backend == ClientBackend.AZURE:
            require_guid(AzureCredentials.ENV_VARS["tenant_id"], credentials.tenant_id)

        if token_provider is None and backend == ClientBackend.AZURE:
            token_provider = TokenProvider(credentials, cloud)

        token = None
        credential = None
        if token_provider is not None:
            token = token_provider.acquire()
            credential = StaticTokenCredential(token)

        clients = create_management_clients(
            credentials.subscription_id,
            credential,
            backend=backend,
            cloud=cloud,
            user_agent=settings.user_agent,
            store=store,
        )
        logger.info(
            "Lifecycle context ready",
            extra={"backend": backend.value, "subscription_id": credentials.subscription_id},
        )
        return cls(credentials=credentials, settings=settings, clients=clients, token=token)
