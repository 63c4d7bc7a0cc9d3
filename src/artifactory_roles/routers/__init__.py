"""API routers package."""

from artifactory_roles.routers import roles

__all__ = [
    "roles",
]
