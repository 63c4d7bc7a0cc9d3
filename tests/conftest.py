"""Shared fixtures for the roles API tests."""

import os
from collections.abc import AsyncGenerator

import pytest

# Keep imports of the application from touching real services
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("REPAIR_ON_STARTUP", "false")
os.environ.setdefault("ARTIFACTORY_URL", "http://artifactory.test/artifactory")

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from artifactory_roles.config import Settings  # noqa: E402
from artifactory_roles.database import init_db  # noqa: E402
from artifactory_roles.exceptions import ArtifactoryError  # noqa: E402
from artifactory_roles.models.domain.role import PermissionTargetSpec  # noqa: E402
from artifactory_roles.providers.base import AuthorizationProvider  # noqa: E402
from artifactory_roles.services.naming import NamingStrategy  # noqa: E402
from artifactory_roles.services.role_service import RoleService  # noqa: E402


class FakeAuthorizationProvider(AuthorizationProvider):
    """In-memory stand-in for Artifactory with failure injection.

    ``fail(operation)`` makes every call of that operation raise, and
    ``fail(operation, name)`` only calls for one object name.
    """

    def __init__(self) -> None:
        self.groups: dict[str, str] = {}
        self.permission_targets: dict[str, tuple[str, PermissionTargetSpec]] = {}
        self.calls: list[tuple[str, str]] = []
        self._failures: set[tuple[str, str | None]] = set()

    def fail(self, operation: str, name: str | None = None) -> None:
        self._failures.add((operation, name))

    def recover(self) -> None:
        self._failures.clear()

    def _record(self, operation: str, name: str) -> None:
        self.calls.append((operation, name))
        if (operation, None) in self._failures or (operation, name) in self._failures:
            raise ArtifactoryError(f"{operation} {name} failed", status_code=500)

    def mutations(self) -> list[tuple[str, str]]:
        """Calls that changed remote state."""
        return [call for call in self.calls if call[0] != "permission_target_exists"]

    async def test_connection(self) -> bool:
        return True

    async def create_or_replace_group(self, name: str, description: str) -> None:
        self._record("create_or_replace_group", name)
        self.groups[name] = description

    async def delete_group(self, name: str) -> None:
        self._record("delete_group", name)
        self.groups.pop(name, None)

    async def permission_target_exists(self, name: str) -> bool:
        self._record("permission_target_exists", name)
        return name in self.permission_targets

    async def create_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        self._record("create_permission_target", name)
        self.permission_targets[name] = (group_name, spec)

    async def update_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        self._record("update_permission_target", name)
        self.permission_targets[name] = (group_name, spec)

    async def delete_permission_target(self, name: str) -> None:
        self._record("delete_permission_target", name)
        self.permission_targets.pop(name, None)


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the environment and any .env file."""
    return Settings(_env_file=None, artifactory_api_version="v2")


@pytest.fixture
def naming() -> NamingStrategy:
    return NamingStrategy("vault")


@pytest.fixture
def provider() -> FakeAuthorizationProvider:
    return FakeAuthorizationProvider()


@pytest.fixture
async def session_maker(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory bound to a fresh SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'roles.db'}")
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
def service(
    session: AsyncSession,
    provider: FakeAuthorizationProvider,
    settings: Settings,
    naming: NamingStrategy,
) -> RoleService:
    return RoleService(session, provider=provider, settings=settings, naming=naming)
