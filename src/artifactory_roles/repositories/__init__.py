"""Repositories package."""

from artifactory_roles.repositories.role_repository import RoleRepository

__all__ = [
    "RoleRepository",
]
