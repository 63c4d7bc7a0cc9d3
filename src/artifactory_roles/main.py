"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from artifactory_roles import __version__
from artifactory_roles.config import get_settings
from artifactory_roles.exceptions import RoleAPIError
from artifactory_roles.middleware.error_handler import (
    generic_exception_handler,
    http_exception_handler,
    role_api_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)
from artifactory_roles.routers import roles
from artifactory_roles.security.rate_limit import limiter
from artifactory_roles.tasks.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _repair_pending_roles() -> None:
    """Repair roles left pending by a previous process."""
    from artifactory_roles.tasks.scheduler import repair_pending_roles_job

    try:
        await repair_pending_roles_job()
    except Exception as e:
        logger.warning(f"Startup repair of pending roles failed: {e}")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, max-age=0"
        if not get_settings().debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()

    # Startup
    if settings.async_database_url.startswith("sqlite"):
        from artifactory_roles.database import init_db

        await init_db()

    if settings.repair_on_startup:
        await _repair_pending_roles()

    await start_scheduler()
    yield
    # Shutdown
    await stop_scheduler()

    # Close shared HTTP client to release connections
    from artifactory_roles.providers.artifactory import ArtifactoryProvider

    await ArtifactoryProvider.close_client()


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Rate limit handler returning RFC 7807 Problem Details.

    Includes Retry-After header per RFC 6585 Section 4.
    """
    return JSONResponse(
        status_code=429,
        content={
            "type": "https://datatracker.ietf.org/doc/html/rfc6585#section-4",
            "title": "Too many requests",
            "status": 429,
            "detail": "Rate limit exceeded",
            "instance": request.url.path,
        },
        headers={
            "Content-Type": "application/problem+json",
            "Retry-After": "60",
        },
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_settings()
    configure_logging()

    app = FastAPI(
        title=config.app_name,
        version=__version__,
        description="Artifactory role reconciliation API",
        lifespan=lifespan,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Error handlers
    app.add_exception_handler(RoleAPIError, role_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(roles.router, prefix="/api/v1/roles", tags=["Roles"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
