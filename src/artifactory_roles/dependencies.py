"""Dependency injection factories for FastAPI."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from artifactory_roles.config import get_settings
from artifactory_roles.database import get_db
from artifactory_roles.providers import create_provider
from artifactory_roles.providers.base import AuthorizationProvider
from artifactory_roles.services.role_service import RoleService


def get_authorization_provider() -> AuthorizationProvider:
    """Get the configured authorization provider."""
    return create_provider(get_settings())


def get_role_service(
    db: AsyncSession = Depends(get_db),
    provider: AuthorizationProvider = Depends(get_authorization_provider),
) -> RoleService:
    """Get RoleService instance."""
    return RoleService(db, provider=provider)
