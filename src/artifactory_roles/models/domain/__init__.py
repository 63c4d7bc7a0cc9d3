"""Domain models package."""

from artifactory_roles.models.domain.role import (
    PermissionScope,
    PermissionTargetSpec,
    RoleRecord,
    RoleState,
)

__all__ = [
    "PermissionScope",
    "PermissionTargetSpec",
    "RoleRecord",
    "RoleState",
]
