"""Injection prevention tests.

Role names and permission target names end up in SQL statements and in
Artifactory URL paths. SQLAlchemy parameterizes every query; name patterns and
URL quoting keep hostile names away from Artifactory.
"""

import json
import os
import re

import pytest

# SQL injection and path traversal payloads
INJECTION_PAYLOADS = [
    "'; DROP TABLE role_records; --",
    "1' OR '1'='1",
    "' UNION SELECT * FROM role_records --",
    "1'; SELECT pg_sleep(5) --",
    "%27%20OR%201%3D1%20--",
    "ʼ OR 1=1 --",
    "1'/**/OR/**/1=1--",
    "../../api/security/users/admin",
    "role\x00name",
]


class TestRoleNameValidation:
    """Role names accepted by the HTTP surface."""

    @pytest.mark.parametrize("payload", INJECTION_PAYLOADS)
    def test_role_name_pattern_rejects_payload(self, payload: str) -> None:
        """Hostile role names never match the accepted role name shape."""
        from artifactory_roles.constants.validation import ROLE_NAME_PATTERN

        assert re.match(ROLE_NAME_PATTERN, payload) is None

    @pytest.mark.parametrize("name", ["test_role1", "ci.deploy", "team-a", "x"])
    def test_role_name_pattern_accepts_normal_names(self, name: str) -> None:
        from artifactory_roles.constants.validation import ROLE_NAME_PATTERN

        assert re.match(ROLE_NAME_PATTERN, name) is not None


class TestPermissionTargetNameValidation:
    """Logical permission target names become part of Artifactory object names."""

    @pytest.mark.parametrize("payload", INJECTION_PAYLOADS)
    def test_hostile_name_rejected(self, payload: str) -> None:
        from artifactory_roles.exceptions import InvalidPermissionTargetError
        from artifactory_roles.services.permission_target_validator import parse_permission_targets

        raw = json.dumps([{"name": payload, "repo": {"repositories": ["a"], "operations": ["read"]}}])

        with pytest.raises(InvalidPermissionTargetError):
            parse_permission_targets(raw)

    def test_provider_quotes_object_names(self) -> None:
        """Names are URL-quoted, so they can never address another endpoint."""
        from artifactory_roles.providers.artifactory_v2 import ArtifactoryV2Provider

        provider = ArtifactoryV2Provider("https://artifactory.example.com/artifactory")

        path = provider._permission_target_path("../../api/security/users/admin")

        assert path == "/api/v2/security/permissions/..%2F..%2Fapi%2Fsecurity%2Fusers%2Fadmin"


class TestRepositoryParameterization:
    """Store queries with hostile role names."""

    @pytest.mark.parametrize("payload", INJECTION_PAYLOADS[:4])
    async def test_hostile_name_round_trips(self, session, payload: str) -> None:
        """A hostile name is stored and looked up as data, not SQL."""
        from uuid import uuid4

        from artifactory_roles.models.domain.role import RoleRecord
        from artifactory_roles.repositories.role_repository import RoleRepository

        repo = RoleRepository(session)
        await repo.set(RoleRecord(name=payload, role_id=uuid4().hex, token_ttl=600, max_ttl=3600))

        assert (await repo.get(payload)).name == payload
        assert await repo.list_names() == [payload]
        assert await repo.delete(payload) is True
        assert await repo.list_names() == []


class TestNoRawSQL:
    """Verify no raw SQL usage in the repositories."""

    def test_no_text_calls_in_repositories(self) -> None:
        """Ensure repositories don't use sqlalchemy.text() for raw SQL."""
        repo_dir = os.path.join(
            os.path.dirname(__file__),
            "..",
            "src",
            "artifactory_roles",
            "repositories",
        )

        if not os.path.exists(repo_dir):
            pytest.skip("Repository directory not found")

        for filename in os.listdir(repo_dir):
            if not filename.endswith(".py"):
                continue

            with open(os.path.join(repo_dir, filename), "r") as f:
                for i, line in enumerate(f, 1):
                    if line.strip().startswith("#"):
                        continue
                    if ".execute(text(" in line or "= text(" in line:
                        pytest.fail(f"Potential raw SQL in {filename}:{i}: {line.strip()}")
