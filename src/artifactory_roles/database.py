"""Database connection and session management."""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from artifactory_roles.config import get_settings
from artifactory_roles.models.orm import Base

settings = get_settings()


def _engine_options(url: str) -> dict[str, Any]:
    """Build engine options for the configured backend."""
    if url.startswith("sqlite"):
        # aiosqlite uses a non-queue pool, pool sizing does not apply
        return {"echo": False}
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        # Validate connections before checkout to detect stale connections
        "pool_pre_ping": True,
        # Recycle connections after 1 hour (important for cloud proxies)
        "pool_recycle": 3600,
        # Security: Never echo SQL statements as they may contain sensitive data
        "echo": False,
    }


engine = create_async_engine(
    settings.async_database_url,
    **_engine_options(settings.async_database_url),
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def ensure_sqlite_directory(url: URL) -> None:
    """Create the parent directory of a file-based SQLite database."""
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create tables that do not exist yet.

    Used for SQLite deployments and tests; PostgreSQL deployments run the
    migrations under alembic/versions instead.
    """
    bind = bind or engine
    ensure_sqlite_directory(bind.url)
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise
