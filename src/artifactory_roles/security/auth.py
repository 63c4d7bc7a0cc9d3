"""Static bearer token authentication for the roles API."""

import hmac
import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from artifactory_roles.config import get_settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def require_api_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> None:
    """Require the configured API token as bearer credentials.

    Authentication is disabled when no API token is configured, which the
    settings only allow outside production.

    Raises:
        HTTPException: If the token is missing or does not match
    """
    expected = get_settings().api_token
    if not expected:
        return

    if credentials is None or not hmac.compare_digest(
        credentials.credentials.encode(), expected.encode()
    ):
        logger.warning("Rejected request with missing or invalid API token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
