"""Common exceptions for kvlifecycle.

Exception Design:
    All exceptions inherit from LifecycleError and carry an ErrorCode,
    a details mapping and the underlying cause. Subclasses exist for the
    four failures a run can end with (missing credentials, authentication,
    remote operation, malformed identifier) plus out-of-order steps.
"""

from kvlifecycle.common.exceptions import (
    AuthenticationFailedError,
    ErrorCode,
    LifecycleError,
    LifecycleStateError,
    MalformedIdentifierError,
    MissingCredentialsError,
    RemoteOperationFailedError,
    resource_not_found_error,
)

__all__ = [
    "AuthenticationFailedError",
    "ErrorCode",
    "LifecycleError",
    "LifecycleStateError",
    "MalformedIdentifierError",
    "MissingCredentialsError",
    "RemoteOperationFailedError",
    "resource_not_found_error",
]
