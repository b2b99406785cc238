"""Credential loading and token acquisition."""

from kvlifecycle.auth.credentials import load_credentials, require_guid, validate_identifier
from kvlifecycle.auth.token_provider import StaticTokenCredential, TokenProvider

__all__ = [
    "load_credentials",
    "require_guid",
    "validate_identifier",
    "StaticTokenCredential",
    "TokenProvider",
]
