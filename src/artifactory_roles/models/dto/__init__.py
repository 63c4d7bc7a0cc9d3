"""Data Transfer Objects package."""

from artifactory_roles.models.dto.role import (
    RoleBindingResponse,
    RoleListResponse,
    RoleRepairResponse,
    RoleResponse,
    RoleWriteRequest,
    RoleWriteResponse,
)

__all__ = [
    "RoleBindingResponse",
    "RoleListResponse",
    "RoleRepairResponse",
    "RoleResponse",
    "RoleWriteRequest",
    "RoleWriteResponse",
]
