from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ErrorCode(Enum):
    """Standard error codes for kvlifecycle operations.

    Each category has its own number range for easy identification.

    Attributes:
        CONFIG_*: Configuration and credential errors (1xxx)
        VALIDATION_*: Input validation errors (2xxx)
        CONNECTION_*: Identity authority and transport errors (3xxx)
        REMOTE_*: Management API operation errors (4xxx)
        LIFECYCLE_*: Orchestration errors (5xxx)
    """
    # Configuration errors (1xxx)
    CONFIG_MISSING = "CONFIG_002"
    CONFIG_INVALID = "CONFIG_003"

    # Validation errors (2xxx)
    INVALID_IDENTIFIER = "VALIDATION_002"

    # Connection errors (3xxx)
    AUTH_ERROR = "CONNECTION_002"

    # Remote operation errors (4xxx)
    REMOTE_OPERATION_ERROR = "REMOTE_001"
    RESOURCE_NOT_FOUND = "REMOTE_002"

    # Lifecycle errors (5xxx)
    LIFECYCLE_ERROR = "LIFECYCLE_001"
    INVALID_STATE = "LIFECYCLE_002"


class LifecycleError(Exception):
    """Base exception for all kvlifecycle errors.

    Errors are categorized with error codes. Subclasses exist only for the
    failures callers need to tell apart.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.LIFECYCLE_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        """Initialize the error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from kvlifecycle.logging import get_logger
        logger = get_logger(__name__)
        logger.debug(
            message,
            extra={
                "error_code": error_code.value,
                "error_details": self.details,
            },
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {self.cause})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        message: str,
        **kwargs
    ) -> "LifecycleError":
        """Create an exception from an error code.

        Args:
            error_code: Error code
            message: Error message
            **kwargs: Additional arguments for LifecycleError

        Returns:
            LifecycleError instance
        """
        return LifecycleError(message=message, error_code=error_code, **kwargs)


class MissingCredentialsError(LifecycleError):
    """One or more required credential parameters are unset or empty."""

    def __init__(self, missing_keys: Iterable[str]):
        self.missing_keys: List[str] = sorted(missing_keys)
        super().__init__(
            message=f"Missing environment variables {self.missing_keys}",
            error_code=ErrorCode.CONFIG_MISSING,
            details={"missing_keys": self.missing_keys},
        )


class AuthenticationFailedError(LifecycleError):
    """The identity authority rejected the tenant or the client credentials."""

    def __init__(
        self,
        message: str,
        tenant_id: Optional[str] = None,
        authority: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        details: Dict[str, Any] = {}
        if tenant_id:
            details["tenant_id"] = tenant_id
        if authority:
            details["authority"] = authority
        super().__init__(
            message=message,
            error_code=ErrorCode.AUTH_ERROR,
            details=details,
            cause=cause,
        )


class RemoteOperationFailedError(LifecycleError):
    """A management API call failed.

    Attributes:
        resource_kind: Kind of resource the call targeted
        operation: Client verb that failed (create_or_update, get, ...)
        resource_name: Name of the targeted resource, when there is one
    """

    def __init__(
        self,
        resource_kind: str,
        operation: str,
        cause: BaseException,
        resource_name: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.REMOTE_OPERATION_ERROR,
    ):
        self.resource_kind = resource_kind
        self.operation = operation
        self.resource_name = resource_name

        target = f"{resource_kind} '{resource_name}'" if resource_name else resource_kind
        details: Dict[str, Any] = {
            "resource_kind": resource_kind,
            "operation": operation,
        }
        if resource_name:
            details["resource_name"] = resource_name

        super().__init__(
            message=f"{operation} on {target} failed: {cause}",
            error_code=error_code,
            details=details,
            cause=cause,
        )


class MalformedIdentifierError(LifecycleError):
    """A tenant, client or subscription value is not a well-formed identifier."""

    def __init__(self, field: str, value: Any, reason: str = "not a well-formed identifier"):
        self.field = field
        super().__init__(
            message=f"{field} is {reason}: {value!r}",
            error_code=ErrorCode.INVALID_IDENTIFIER,
            details={"field": field, "value": str(value)},
        )


class LifecycleStateError(LifecycleError):
    """A lifecycle step was attempted out of order."""

    def __init__(self, current: str, expected: Iterable[str], target: str):
        expected_list = list(expected)
        super().__init__(
            message=(
                f"Cannot move to '{target}' from '{current}'; "
                f"expected one of {expected_list}"
            ),
            error_code=ErrorCode.INVALID_STATE,
            details={"current": current, "expected": expected_list, "target": target},
        )


def resource_not_found_error(
    resource_kind: str,
    operation: str,
    resource_name: str,
) -> RemoteOperationFailedError:
    """Create the error raised when a named resource does not exist.

    Args:
        resource_kind: Kind of resource that was looked up
        operation: Client verb that looked it up
        resource_name: Name of the missing resource

    Returns:
        RemoteOperationFailedError with RESOURCE_NOT_FOUND code
    """
    return RemoteOperationFailedError(
        resource_kind=resource_kind,
        operation=operation,
        cause=LookupError(f"{resource_kind} '{resource_name}' was not found"),
        resource_name=resource_name,
        error_code=ErrorCode.RESOURCE_NOT_FOUND,
    )
