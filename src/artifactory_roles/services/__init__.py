"""Services package."""

from artifactory_roles.services.naming import NamingStrategy
from artifactory_roles.services.role_service import RoleService

__all__ = [
    "NamingStrategy",
    "RoleService",
]
