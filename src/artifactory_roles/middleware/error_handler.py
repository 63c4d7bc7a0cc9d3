"""Global error handling to prevent information disclosure."""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from artifactory_roles.config import get_settings
from artifactory_roles.exceptions import (
    ConflictError,
    NotFoundError,
    RecordPersistError,
    RemoteOperationError,
    RoleAPIError,
    ValidationError,
)
from artifactory_roles.utils.secure_logging import log_error, sanitize_exception_message

logger = logging.getLogger(__name__)

# Safe error messages that can be shown to users
SAFE_ERROR_MESSAGES = {
    400: "Invalid request",
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    405: "Method not allowed",
    409: "Conflict with existing resource",
    422: "Invalid input data",
    429: "Too many requests",
    500: "Internal server error",
    502: "Artifactory request failed",
    503: "Service temporarily unavailable",
}

# Error messages that are safe to pass through
ALLOWED_ERROR_PATTERNS = [
    "Authentication required",
    "Resource not found",
    "Role not found",
    "Role name not supplied",
]

# Domain error classes and their HTTP status codes, most specific first
ROLE_ERROR_STATUS: tuple[tuple[type[RoleAPIError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (RemoteOperationError, status.HTTP_502_BAD_GATEWAY),
    (RecordPersistError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def is_safe_error_message(message: str) -> bool:
    """Check if an error message is safe to expose to users."""
    message_lower = message.lower()
    return any(pattern.lower() in message_lower for pattern in ALLOWED_ERROR_PATTERNS)


def sanitize_error_detail(detail: Any, status_code: int) -> str:
    """Sanitize error detail to prevent information disclosure.

    Args:
        detail: Original error detail
        status_code: HTTP status code

    Returns:
        Safe error message
    """
    if isinstance(detail, str):
        if is_safe_error_message(detail):
            return detail
    elif isinstance(detail, list):
        # Validation errors: only field names and messages
        safe_errors = []
        for error in detail:
            if isinstance(error, dict):
                loc = error.get("loc", [])
                msg = error.get("msg", "Invalid value")
                field = loc[-1] if loc else "field"
                if isinstance(field, str) and not field.startswith("_"):
                    safe_errors.append(f"{field}: {msg}")
        if safe_errors:
            return "; ".join(safe_errors[:3])

    return SAFE_ERROR_MESSAGES.get(status_code, "Request failed")


def status_code_for(exc: RoleAPIError) -> int:
    """Get the HTTP status code of a domain error."""
    for error_class, status_code in ROLE_ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def role_api_exception_handler(request: Request, exc: RoleAPIError) -> JSONResponse:
    """Handle domain errors raised by the role service.

    Input, not-found and conflict errors carry caller-facing messages. Remote
    errors name the group or permission target that failed, with a redacted
    cause. Persistence errors are logged in full and reported generically
    unless debug mode is on.

    Args:
        request: FastAPI request
        exc: Domain error

    Returns:
        JSONResponse with the mapped status code
    """
    status_code = status_code_for(exc)

    if isinstance(exc, RemoteOperationError):
        log_error(logger, f"Role operation failed for {request.url.path}", exc.cause)
        return JSONResponse(
            status_code=status_code,
            content={
                "detail": exc.message,
                "errors": {"name": exc.name, "cause": sanitize_exception_message(exc.cause)},
            },
        )

    if status_code < 500 or get_settings().debug:
        content: dict[str, Any] = {"detail": exc.message}
        if exc.details:
            content["errors"] = exc.details
        return JSONResponse(status_code=status_code, content=content)

    log_error(logger, f"Role operation failed for {request.url.path}", exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": SAFE_ERROR_MESSAGES.get(status_code, "Request failed")},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with sanitized messages."""
    if get_settings().debug:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": sanitize_error_detail(exc.detail, exc.status_code)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation exceptions with sanitized messages."""
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")

    if get_settings().debug:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors()},
        )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": sanitize_error_detail(exc.errors(), status.HTTP_422_UNPROCESSABLE_ENTITY)},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy exceptions without leaking database details."""
    logger.error(f"Database error for {request.url.path}: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error occurred"},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking information."""
    logger.error(f"Unhandled exception for {request.url.path}: {exc}", exc_info=True)

    if get_settings().debug:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "type": type(exc).__name__},
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": SAFE_ERROR_MESSAGES[500]},
    )
