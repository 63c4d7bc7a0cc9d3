"""Domain-specific exceptions for the roles API.

These exceptions provide a clean separation between service-layer errors
and HTTP responses, avoiding string matching in routers.
"""

from typing import Any


class RoleAPIError(Exception):
    """Base exception for all roles API errors."""

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Input Errors (400)
# =============================================================================


class ValidationError(RoleAPIError):
    """Base class for input validation errors."""

    pass


class MissingRoleNameError(ValidationError):
    """Raised when a role operation is requested without a role name."""

    def __init__(self) -> None:
        super().__init__("Role name not supplied")


class InvalidPermissionTargetError(ValidationError):
    """Raised when a permission target declaration is malformed or violates policy."""

    def __init__(self, reason: str, index: int | None = None) -> None:
        self.reason = reason
        details: dict[str, Any] = {"reason": reason}
        if index is not None:
            details["index"] = index
        super().__init__(f"Invalid permission target: {reason}", details)


class InvalidTTLError(ValidationError):
    """Raised when the effective token TTL exceeds the maximum TTL."""

    def __init__(self, token_ttl: int, max_ttl: int) -> None:
        super().__init__(
            f"Token TTL {token_ttl} exceeds maximum TTL {max_ttl}",
            {"token_ttl": token_ttl, "max_ttl": max_ttl},
        )


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(RoleAPIError):
    """Base class for resource not found errors."""

    pass


class RoleNotFoundError(NotFoundError):
    """Raised when a role cannot be found."""

    def __init__(self, role_name: str | None = None) -> None:
        details = {"role_name": role_name} if role_name else {}
        super().__init__("Role not found", details)


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(RoleAPIError):
    """Base class for resource conflict errors."""

    pass


class RoleReconciliationPendingError(ConflictError):
    """Raised when a role is used while its last reconciliation is incomplete."""

    def __init__(self, role_name: str) -> None:
        super().__init__("Role reconciliation pending, retry the update", {"role_name": role_name})


# =============================================================================
# Remote Errors (502)
# =============================================================================


class RemoteOperationError(RoleAPIError):
    """Base class for failures of the remote authorization system."""

    def __init__(self, message: str, name: str, cause: Exception) -> None:
        self.name = name
        self.cause = cause
        super().__init__(message, {"name": name, "cause": str(cause)})


class RemoteGroupOperationError(RemoteOperationError):
    """Raised when creating, replacing or deleting a remote group fails."""

    def __init__(self, group_name: str, cause: Exception) -> None:
        super().__init__(f"Group operation failed for {group_name}", group_name, cause)


class RemotePermissionTargetOperationError(RemoteOperationError):
    """Raised when a remote permission target operation fails."""

    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__(f"Permission target operation failed for {name}", name, cause)


# =============================================================================
# Persistence Errors (500)
# =============================================================================


class RecordPersistError(RoleAPIError):
    """Raised when a role record cannot be written to or removed from the store."""

    def __init__(self, role_name: str, cause: Exception) -> None:
        self.cause = cause
        super().__init__(
            f"Unable to persist role {role_name}",
            {"role_name": role_name, "cause": type(cause).__name__},
        )


# =============================================================================
# Client Errors (raised by providers)
# =============================================================================


class ArtifactoryError(Exception):
    """Raised by providers when the Artifactory API rejects a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
