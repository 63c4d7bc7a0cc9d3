"""Secure logging helpers for Artifactory failures.

Provider errors can echo request URLs and response bodies; in production
those are reduced to a sanitized message so credentials never reach the logs.
"""

import logging
import re
from functools import lru_cache

from artifactory_roles.config import get_settings

_REDACTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    # Authorization headers echoed back in error bodies
    (re.compile(r"(?i)bearer\s+[A-Za-z0-9._~+/=-]+"), "Bearer [TOKEN]"),
    (re.compile(r"(?i)x-jfrog-art-api[\"':\s]+[A-Za-z0-9]+"), "X-JFrog-Art-Api [TOKEN]"),
    (re.compile(r"(https?)://[^\s]+"), "[URL]"),
    # Access tokens are JWTs or long opaque strings
    (re.compile(r"[A-Za-z0-9_\-]{40,}"), "[TOKEN]"),
)

MAX_LOGGED_MESSAGE_LENGTH = 300


@lru_cache(maxsize=1)
def is_debug_mode() -> bool:
    """Check if application is running in debug mode."""
    return get_settings().debug


def sanitize_exception_message(error: BaseException) -> str:
    """Sanitize an exception message for production logs.

    Args:
        error: The exception to sanitize

    Returns:
        Message with tokens and URLs removed, truncated
    """
    message = f"{type(error).__name__}: {error}"
    for pattern, replacement in _REDACTIONS:
        message = pattern.sub(replacement, message)
    if len(message) > MAX_LOGGED_MESSAGE_LENGTH:
        message = message[: MAX_LOGGED_MESSAGE_LENGTH - 3] + "..."
    return message


def log_error(logger: logging.Logger, message: str, error: BaseException | None = None) -> None:
    """Log an error, with the full traceback only in debug mode.

    Args:
        logger: The logger instance to use
        message: Generic log message without sensitive data
        error: Optional exception to include
    """
    if error is None:
        logger.error(message)
    elif is_debug_mode():
        logger.error(f"{message}: {error}", exc_info=error)
    else:
        logger.error(f"{message}: {sanitize_exception_message(error)}")


def log_warning(logger: logging.Logger, message: str, error: BaseException | None = None) -> None:
    """Log a warning with a sanitized exception message outside debug mode.

    Args:
        logger: The logger instance to use
        message: Generic log message without sensitive data
        error: Optional exception to include
    """
    if error is None:
        logger.warning(message)
    elif is_debug_mode():
        logger.warning(f"{message}: {error}")
    else:
        logger.warning(f"{message}: {sanitize_exception_message(error)}")
