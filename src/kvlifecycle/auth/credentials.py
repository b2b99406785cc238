"""Credential loading and identifier validation."""

import re
import uuid
from typing import Any, Optional

from kvlifecycle.common.exceptions import MalformedIdentifierError, MissingCredentialsError
from kvlifecycle.logging import get_logger
from kvlifecycle.settings.credentials import AzureCredentials

logger = get_logger(__name__)

# GUIDs and tenant domains (contoso.onmicrosoft.com) both match
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.-]*$")


def validate_identifier(field: str, value: str) -> str:
    """Check that ``value`` can be used as a tenant, client or subscription id.

    Args:
        field: Environment variable name, used in the error
        value: Value to check

    Returns:
        The value unchanged

    Raises:
        MalformedIdentifierError: If the value contains characters that are
            not letters, digits, ``-`` or ``.``
    """
    if not _IDENTIFIER_PATTERN.match(value):
        raise MalformedIdentifierError(field, value)
    return value


def require_guid(field: str, value: str) -> str:
    """Check that ``value`` is a GUID.

    Vault properties and access policies carry the tenant as a GUID, so the
    Azure backend cannot use a tenant domain there.

    Raises:
        MalformedIdentifierError: If the value does not parse as a GUID
    """
    try:
        uuid.UUID(value)
    except ValueError as e:
        raise MalformedIdentifierError(field, value, reason="not a GUID") from e
    return value


def load_credentials(env_file: Optional[str] = ".env", **overrides: Any) -> AzureCredentials:
    """Read and validate the service principal credentials.

    Args:
        env_file: ``.env`` file consulted after the environment, or None to
            read the environment only
        **overrides: Explicit field values (tenant_id, client_id, ...) that
            take precedence over the environment

    Returns:
        Frozen AzureCredentials with every required value present

    Raises:
        MissingCredentialsError: Naming every required variable that is unset
            or empty
        MalformedIdentifierError: If the tenant, client or subscription id is
            not a well-formed identifier
    """
    credentials = AzureCredentials(_env_file=env_file, **overrides)

    missing = credentials.missing_keys()
    if missing:
        raise MissingCredentialsError(missing)

    validate_identifier(AzureCredentials.ENV_VARS["tenant_id"], credentials.tenant_id)
    validate_identifier(AzureCredentials.ENV_VARS["client_id"], credentials.client_id)
    validate_identifier(AzureCredentials.ENV_VARS["subscription_id"], credentials.subscription_id)

    logger.debug(
        "Loaded service principal credentials",
        extra={"tenant_id": credentials.tenant_id, "client_id": credentials.client_id},
    )
    return credentials
