"""Roles HTTP API tests."""

import json
from collections.abc import AsyncGenerator

import httpx
import pytest

from artifactory_roles.config import Settings
from artifactory_roles.dependencies import get_role_service
from artifactory_roles.main import app
from artifactory_roles.services.role_service import RoleService

ROLE_BODY = {
    "token_ttl": 120,
    "permission_targets": json.dumps([{"repo": {"repositories": ["libs"], "operations": ["read"]}}]),
}


@pytest.fixture
async def client(session, provider, settings, naming) -> AsyncGenerator[httpx.AsyncClient, None]:
    """API client wired to the test database and the fake provider."""

    def override_role_service() -> RoleService:
        return RoleService(session, provider=provider, settings=settings, naming=naming)

    app.dependency_overrides[get_role_service] = override_role_service
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as api_client:
        yield api_client
    app.dependency_overrides.clear()


class TestRolesAPI:
    """Role endpoints."""

    async def test_role_lifecycle(self, client: httpx.AsyncClient, provider) -> None:
        response = await client.put("/api/v1/roles/test_role1", json=ROLE_BODY)
        assert response.status_code == 200
        written = response.json()
        assert written["role_name"] == "test_role1"
        assert len(written["created"]) == 1

        response = await client.get("/api/v1/roles/test_role1")
        assert response.status_code == 200
        assert response.json() == {
            "name": "test_role1",
            "id": written["role_id"],
            "token_ttl": 120,
            "max_ttl": 3600,
            "permission_targets": ROLE_BODY["permission_targets"],
        }

        response = await client.get("/api/v1/roles")
        assert response.json() == {"keys": ["test_role1"]}

        response = await client.delete("/api/v1/roles/test_role1")
        assert response.status_code == 204
        assert provider.groups == {}

        response = await client.get("/api/v1/roles")
        assert response.json() == {"keys": []}

    async def test_post_creates_role(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/api/v1/roles/deployers", json={})

        assert response.status_code == 200
        assert response.json()["created"] == []

    async def test_read_absent_role(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/roles/ghost")

        assert response.status_code == 204
        assert response.content == b""

    async def test_delete_absent_role(self, client: httpx.AsyncClient) -> None:
        response = await client.delete("/api/v1/roles/ghost")

        assert response.status_code == 204

    async def test_invalid_permission_targets(self, client: httpx.AsyncClient) -> None:
        response = await client.put("/api/v1/roles/bad", json={"permission_targets": "[{}]"})

        assert response.status_code == 400
        body = response.json()
        assert body["detail"].startswith("Invalid permission target")
        assert body["errors"]["index"] == 0

    async def test_deeply_nested_permission_targets(self, client: httpx.AsyncClient, provider) -> None:
        raw = "[" * 40_000 + "]" * 40_000

        response = await client.put("/api/v1/roles/deep", json={"permission_targets": raw})

        assert response.status_code == 400
        assert "nested too deeply" in response.json()["detail"]
        assert provider.mutations() == []

    async def test_token_ttl_above_max_ttl(self, client: httpx.AsyncClient, provider) -> None:
        response = await client.put("/api/v1/roles/long", json={"token_ttl": 7200, "max_ttl": 3600})
        assert response.status_code == 422

        response = await client.put("/api/v1/roles/long", json={"token_ttl": 7200})
        assert response.status_code == 400
        assert response.json()["errors"] == {"token_ttl": 7200, "max_ttl": 3600}
        assert provider.mutations() == []

    async def test_invalid_role_name(self, client: httpx.AsyncClient) -> None:
        response = await client.put("/api/v1/roles/bad name!", json={})

        assert response.status_code == 422

    async def test_remote_failure_names_group(self, client: httpx.AsyncClient, provider) -> None:
        provider.fail("create_or_replace_group")

        response = await client.put("/api/v1/roles/broken", json=ROLE_BODY)

        assert response.status_code == 502
        body = response.json()
        group_name = body["errors"]["name"]
        assert group_name.startswith("vault-")
        assert body["detail"] == f"Group operation failed for {group_name}"
        assert body["errors"]["cause"].startswith("ArtifactoryError")

    async def test_binding_and_repair(self, client: httpx.AsyncClient, provider) -> None:
        await client.put("/api/v1/roles/flaky", json={})
        role_id = (await client.get("/api/v1/roles/flaky")).json()["id"]
        provider.fail("create_permission_target")
        response = await client.put("/api/v1/roles/flaky", json=ROLE_BODY)
        assert response.status_code == 502
        assert response.json()["errors"]["name"] == f"vault-{role_id}-0"
        assert response.json()["detail"] == f"Permission target operation failed for vault-{role_id}-0"

        response = await client.get("/api/v1/roles/flaky/binding")
        assert response.status_code == 409

        provider.recover()
        response = await client.post("/api/v1/roles/flaky/repair")
        assert response.json() == {"role_name": "flaky", "repaired": True}

        response = await client.get("/api/v1/roles/flaky/binding")
        assert response.status_code == 200
        assert response.json()["token_ttl"] == 120

    async def test_binding_of_unknown_role(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/roles/ghost/binding")

        assert response.status_code == 404
        assert response.json()["detail"] == "Role not found"

    async def test_health(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/health")

        assert response.json() == {"status": "healthy"}


class TestAuthentication:
    """Static API token."""

    async def test_token_required_when_configured(self, client: httpx.AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(
            "artifactory_roles.security.auth.get_settings",
            lambda: Settings(_env_file=None, api_token="s3cret"),
        )

        response = await client.get("/api/v1/roles")
        assert response.status_code == 401

        response = await client.get("/api/v1/roles", headers={"Authorization": "Bearer wrong"})
        assert response.status_code == 401

        response = await client.get("/api/v1/roles", headers={"Authorization": "Bearer s3cret"})
        assert response.status_code == 200
