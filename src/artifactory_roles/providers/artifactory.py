"""Artifactory provider integration.

Groups are managed the same way by every Artifactory version; permission
targets differ between the legacy v1 and the v2 security API, so the payload
and endpoint details live in the variant subclasses.
"""

import asyncio
import logging
import math
from abc import abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, ClassVar
from urllib.parse import quote

import httpx

from artifactory_roles.config import Settings
from artifactory_roles.exceptions import ArtifactoryError
from artifactory_roles.models.domain.role import PermissionTargetSpec
from artifactory_roles.providers.base import AuthorizationProvider

logger = logging.getLogger(__name__)

# Artifactory API constants
ARTIFACTORY_TIMEOUT = 30.0
ARTIFACTORY_CONNECT_TIMEOUT = 10.0
ARTIFACTORY_MAX_RETRIES = 3
ARTIFACTORY_RETRY_DELAY = 1.0

# User-Agent per RFC 7231
USER_AGENT = "ArtifactoryRolesAPI/1.0"

# Status codes worth retrying: rate limiting and transient server failures
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# Upper bound for a server-requested Retry-After wait
MAX_RETRY_AFTER_SECONDS = 60.0


def retry_after_delay(value: str | None, default: float) -> float:
    """Get the wait requested by a Retry-After header.

    Args:
        value: Header value, either delay seconds or an HTTP date
        default: Delay used when the header is missing or unparseable

    Returns:
        Seconds to wait, between 0 and MAX_RETRY_AFTER_SECONDS
    """
    if not value:
        return default
    try:
        delay = float(value)
    except ValueError:
        try:
            retry_at = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return default
        if retry_at.tzinfo is None:
            retry_at = retry_at.replace(tzinfo=timezone.utc)
        delay = (retry_at - datetime.now(timezone.utc)).total_seconds()
    if not math.isfinite(delay):
        return default
    return min(max(delay, 0.0), MAX_RETRY_AFTER_SECONDS)


class ArtifactoryProvider(AuthorizationProvider):
    """Artifactory group and permission target integration."""

    # Shared HTTP client for connection reuse
    _http_client: ClassVar[httpx.AsyncClient | None] = None

    def __init__(
        self,
        base_url: str,
        bearer_token: str = "",
        api_key: str = "",
        timeout: float = ARTIFACTORY_TIMEOUT,
        connect_timeout: float = ARTIFACTORY_CONNECT_TIMEOUT,
        max_retries: int = ARTIFACTORY_MAX_RETRIES,
        retry_delay: float = ARTIFACTORY_RETRY_DELAY,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Artifactory provider.

        Args:
            base_url: Artifactory base URL, e.g. https://example.jfrog.io/artifactory
            bearer_token: Access token (preferred)
            api_key: Legacy API key, used when no bearer token is given
            timeout: Request timeout in seconds
            connect_timeout: Connect timeout in seconds
            max_retries: Attempts per request for retryable failures
            retry_delay: Initial backoff delay in seconds
            client: Optional HTTP client, the shared client is used otherwise
        """
        self.base_url = base_url.rstrip("/")
        self.bearer_token = bearer_token
        self.api_key = api_key
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ArtifactoryProvider":
        """Create a provider from application settings."""
        return cls(
            base_url=settings.artifactory_base_url,
            bearer_token=settings.artifactory_bearer_token,
            api_key=settings.artifactory_api_key,
            timeout=settings.artifactory_timeout_seconds,
            connect_timeout=settings.artifactory_connect_timeout_seconds,
            max_retries=settings.artifactory_max_retries,
            retry_delay=settings.artifactory_retry_delay_seconds,
        )

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get the injected client, or create the shared HTTP client with connection pooling."""
        if self._client is not None:
            return self._client
        cls = ArtifactoryProvider
        if cls._http_client is None or cls._http_client.is_closed:
            cls._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                headers={
                    "User-Agent": USER_AGENT,
                    "Content-Type": "application/json",
                },
            )
        return cls._http_client

    @classmethod
    async def close_client(cls) -> None:
        """Close the shared HTTP client."""
        if cls._http_client and not cls._http_client.is_closed:
            await cls._http_client.aclose()
            cls._http_client = None

    def _get_headers(self) -> dict[str, str]:
        """Get API request headers with authentication."""
        if self.bearer_token:
            return {"Authorization": f"Bearer {self.bearer_token}"}
        if self.api_key:
            return {"X-JFrog-Art-Api": self.api_key}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        json_data: dict[str, Any] | None = None,
        ok_statuses: frozenset[int] = frozenset({200, 201, 204}),
        tolerated_statuses: frozenset[int] = frozenset(),
    ) -> httpx.Response:
        """Make an Artifactory API call with retry and rate limit handling.

        Args:
            method: HTTP method
            path: API path below the base URL, starting with a slash
            json_data: Optional JSON payload
            ok_statuses: Status codes treated as success
            tolerated_statuses: Additional status codes returned without raising

        Returns:
            The HTTP response

        Raises:
            ArtifactoryError: On non-retryable API errors or after retries
        """
        client = self._get_http_client()
        url = f"{self.base_url}{path}"
        headers = self._get_headers()

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                response = await client.request(method, url, headers=headers, json=json_data)
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if last_attempt:
                    raise ArtifactoryError(f"{method} {path} failed: {type(e).__name__}") from e
                delay = self.retry_delay * (2**attempt)
                logger.warning(f"Artifactory {type(e).__name__} on {method} {path}, retrying in {delay}s")
                await asyncio.sleep(delay)
                continue

            if response.status_code in ok_statuses or response.status_code in tolerated_statuses:
                return response

            if response.status_code in RETRYABLE_STATUS_CODES and not last_attempt:
                if response.status_code == 429:
                    delay = retry_after_delay(response.headers.get("Retry-After"), self.retry_delay)
                else:
                    delay = self.retry_delay * (2**attempt)
                logger.warning(
                    f"Artifactory returned {response.status_code} on {method} {path}, retrying in {delay}s"
                )
                await asyncio.sleep(delay)
                continue

            raise ArtifactoryError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        raise ArtifactoryError(f"{method} {path} failed after {self.max_retries} attempts")

    @staticmethod
    def _quote(name: str) -> str:
        return quote(name, safe="")

    async def test_connection(self) -> bool:
        """Test Artifactory API connection.

        Returns:
            True if connection is successful
        """
        try:
            response = await self._request("GET", "/api/system/ping")
            return response.text.strip() == "OK"
        except ArtifactoryError as e:
            logger.warning("Artifactory connection test failed: %s", e)
            return False

    async def create_or_replace_group(self, name: str, description: str) -> None:
        """Create or replace an internal Artifactory group."""
        await self._request(
            "PUT",
            f"/api/security/groups/{self._quote(name)}",
            json_data={"name": name, "description": description, "autoJoin": False},
        )
        logger.info(f"Created or replaced Artifactory group {name}")

    async def delete_group(self, name: str) -> None:
        """Delete an Artifactory group, ignoring groups that do not exist."""
        response = await self._request(
            "DELETE",
            f"/api/security/groups/{self._quote(name)}",
            tolerated_statuses=frozenset({404}),
        )
        if response.status_code == 404:
            logger.debug(f"Artifactory group {name} already absent")
        else:
            logger.info(f"Deleted Artifactory group {name}")

    async def delete_permission_target(self, name: str) -> None:
        """Delete a permission target, ignoring targets that do not exist."""
        response = await self._request(
            "DELETE",
            self._permission_target_path(name),
            tolerated_statuses=frozenset({404}),
        )
        if response.status_code == 404:
            logger.debug(f"Artifactory permission target {name} already absent")
        else:
            logger.info(f"Deleted Artifactory permission target {name}")

    @abstractmethod
    def _permission_target_path(self, name: str) -> str:
        """Get the API path of a permission target."""
        pass

    @abstractmethod
    def build_permission_target_payload(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> dict[str, Any]:
        """Build the JSON body describing a permission target."""
        pass
