"""Naming strategy tests."""

from uuid import uuid4

import pytest

from artifactory_roles.services.naming import NamingStrategy


class TestNamingStrategy:
    """Deterministic remote object names."""

    def test_names_are_deterministic(self) -> None:
        role_id = uuid4().hex
        naming = NamingStrategy("vault")

        assert naming.group_name(role_id) == f"vault-{role_id}"
        assert naming.permission_target_name(role_id, 0) == f"vault-{role_id}-0"
        assert naming.permission_target_name(role_id, "0") == naming.permission_target_name(role_id, 0)
        assert NamingStrategy("vault").permission_target_name(role_id, "deploy") == f"vault-{role_id}-deploy"

    def test_distinct_roles_never_collide(self) -> None:
        naming = NamingStrategy("vault")
        first, second = uuid4().hex, uuid4().hex

        names = {
            naming.group_name(first),
            naming.group_name(second),
            naming.permission_target_name(first, 0),
            naming.permission_target_name(second, 0),
        }
        assert len(names) == 4

    def test_prefix(self) -> None:
        role_id = uuid4().hex

        assert NamingStrategy("jfrog").group_name(role_id).startswith("jfrog-")

    @pytest.mark.parametrize("role_id", ["", "abc", uuid4().hex.upper(), str(uuid4())])
    def test_malformed_role_id(self, role_id: str) -> None:
        with pytest.raises(ValueError):
            NamingStrategy("vault").group_name(role_id)

    @pytest.mark.parametrize("identity", ["", "-x", "a b", "a/b"])
    def test_malformed_identity(self, identity: str) -> None:
        with pytest.raises(ValueError):
            NamingStrategy("vault").permission_target_name(uuid4().hex, identity)
