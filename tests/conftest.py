"""Shared fixtures for kvlifecycle tests."""

import pytest

from kvlifecycle.clients import InMemoryStore, create_memory_clients
from kvlifecycle.constants import ClientBackend, TeardownMode
from kvlifecycle.orchestration import LifecycleContext
from kvlifecycle.settings import AzureCredentials, LifecycleSettings

AZURE_ENV_VARS = (
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_ID",
    "AZURE_CLIENT_SECRET",
    "AZURE_SUBSCRIPTION_ID",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove credential and run settings variables from the environment."""
    for name in AZURE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in ("GROUP_NAME", "LOCATION", "VAULT_NAME", "SECOND_VAULT_NAME",
                 "TEARDOWN_MODE", "BACKEND", "CREATE_SECOND_VAULT", "TAGS"):
        monkeypatch.delenv(f"KVLIFECYCLE_{name}", raising=False)
    return monkeypatch


@pytest.fixture
def credentials():
    return AzureCredentials(
        _env_file=None,
        tenant_id="t1",
        client_id="c1",
        client_secret="s1",
        subscription_id="sub1",
    )


@pytest.fixture
def settings():
    return LifecycleSettings(
        _env_file=None,
        group_name="g1",
        location="westus",
        vault_name="v1",
        second_vault_name="v2",
        second_location="eastus",
        create_second_vault=True,
        teardown_mode=TeardownMode.AUTO,
        backend=ClientBackend.MEMORY,
    )


@pytest.fixture
def store():
    return InMemoryStore("sub1")


@pytest.fixture
def context(credentials, settings, store):
    return LifecycleContext(
        credentials=credentials,
        settings=settings,
        clients=create_memory_clients(store),
    )
