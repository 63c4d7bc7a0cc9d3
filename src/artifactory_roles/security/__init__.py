"""Security package."""

from artifactory_roles.security.auth import require_api_token
from artifactory_roles.security.rate_limit import limiter

__all__ = [
    "limiter",
    "require_api_token",
]
