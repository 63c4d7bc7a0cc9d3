"""Rate limiting configuration for role endpoints."""

import hashlib
import hmac

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from artifactory_roles.config import get_settings


def get_rate_limit_key(request: Request) -> str:
    """Get the rate limit bucket of a request.

    Callers presenting the configured API token share one bucket per token,
    keyed on a digest so the token never lands in limiter storage. Everything
    else, including requests with a wrong token, is keyed on the client address.

    Args:
        request: The incoming request object.

    Returns:
        Rate limit key.
    """
    expected = get_settings().api_token
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if expected and scheme.lower() == "bearer" and hmac.compare_digest(token.encode(), expected.encode()):
        return "token:" + hashlib.sha256(token.encode()).hexdigest()[:16]
    return get_remote_address(request)


def _get_rate_limit_settings() -> dict[str, str]:
    """Get rate limit strings from configuration."""
    settings = get_settings()
    return {
        "default": f"{settings.rate_limit_default}/minute",
        "role_write": f"{settings.rate_limit_role_write}/minute",
        "role_delete": f"{settings.rate_limit_role_delete}/minute",
    }


_rate_limits = _get_rate_limit_settings()

# In-memory storage, limits apply per process
limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[_rate_limits["default"]],
)

API_DEFAULT_LIMIT = _rate_limits["default"]
ROLE_WRITE_LIMIT = _rate_limits["role_write"]
ROLE_DELETE_LIMIT = _rate_limits["role_delete"]
