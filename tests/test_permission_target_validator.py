"""Permission target validation tests."""

import json

import pytest

from artifactory_roles.exceptions import InvalidPermissionTargetError
from artifactory_roles.models.domain.role import PermissionScope, PermissionTargetSpec
from artifactory_roles.services.permission_target_validator import (
    parse_permission_targets,
    validate_permission_target,
)


def dumps(*entries: dict) -> str:
    return json.dumps(list(entries))


class TestParsePermissionTargets:
    """Parsing of serialized permission target lists."""

    def test_defaults_applied(self) -> None:
        specs = parse_permission_targets(dumps({"repo": {"repositories": ["libs"], "operations": ["read"]}}))

        assert len(specs) == 1
        assert specs[0].repo.include_patterns == ["**"]
        assert specs[0].repo.exclude_patterns == [""]
        assert specs[0].build is None

    def test_identity_is_name_or_position(self) -> None:
        specs = parse_permission_targets(
            dumps(
                {"repo": {"repositories": ["a"], "operations": ["read"]}},
                {"name": "deploy", "repo": {"repositories": ["b"], "operations": ["write"]}},
                {"build": {"repositories": ["artifactory-build-info"], "operations": ["read"]}},
            )
        )

        assert [spec.identity for spec in specs] == ["0", "deploy", "2"]

    def test_actions_alias(self) -> None:
        specs = parse_permission_targets(dumps({"repo": {"repositories": ["a"], "actions": ["read", "annotate"]}}))

        assert specs[0].repo.operations == ["read", "annotate"]

    def test_duplicates_removed(self) -> None:
        specs = parse_permission_targets(
            dumps({"repo": {"repositories": ["a", "a", "b"], "operations": ["read", "read"]}})
        )

        assert specs[0].repo.repositories == ["a", "b"]
        assert specs[0].repo.operations == ["read"]

    def test_empty_input(self) -> None:
        assert parse_permission_targets("") == []
        assert parse_permission_targets("[]") == []

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            '{"repo": {}}',
            "[1, 2]",
        ],
    )
    def test_malformed_input(self, raw: str) -> None:
        with pytest.raises(InvalidPermissionTargetError):
            parse_permission_targets(raw)

    def test_deeply_nested_input(self) -> None:
        raw = "[" * 50_000 + "]" * 50_000

        with pytest.raises(InvalidPermissionTargetError, match="nested too deeply"):
            parse_permission_targets(raw)

    @pytest.mark.parametrize(
        "entry",
        [
            {},
            {"repo": {"repositories": [], "operations": ["read"]}},
            {"repo": {"repositories": ["a"], "operations": []}},
            {"repo": {"repositories": ["a"], "operations": ["fly"]}},
            {"repo": {"repositories": ["a"], "operations": ["read"], "actions": ["read"]}},
            {"repo": {"repositories": ["a"], "operations": ["read"], "owner": "me"}},
            {"name": "0abc", "repo": {"repositories": ["a"], "operations": ["read"]}},
            {"identity": "x", "repo": {"repositories": ["a"], "operations": ["read"]}},
        ],
    )
    def test_invalid_entry_reports_index(self, entry: dict) -> None:
        valid = {"repo": {"repositories": ["a"], "operations": ["read"]}}

        with pytest.raises(InvalidPermissionTargetError) as exc_info:
            parse_permission_targets(dumps(valid, entry))

        assert exc_info.value.details["index"] == 1

    def test_duplicate_names_rejected(self) -> None:
        entry = {"name": "deploy", "repo": {"repositories": ["a"], "operations": ["read"]}}

        with pytest.raises(InvalidPermissionTargetError, match="duplicate"):
            parse_permission_targets(dumps(entry, entry))

    def test_too_many_entries(self) -> None:
        entry = {"repo": {"repositories": ["a"], "operations": ["read"]}}

        with pytest.raises(InvalidPermissionTargetError, match="too many"):
            parse_permission_targets(json.dumps([entry] * 101))


class TestApiVersions:
    """Differences between the v1 and v2 permission APIs."""

    def test_v1_rejects_build_scope(self) -> None:
        spec = PermissionTargetSpec(build=PermissionScope(repositories=["artifactory-build-info"], operations=["read"]))

        with pytest.raises(InvalidPermissionTargetError, match="v2"):
            validate_permission_target(spec, api_version="v1")

    def test_v1_rejects_v2_only_operations(self) -> None:
        spec = PermissionTargetSpec(repo=PermissionScope(repositories=["a"], operations=["distribute"]))

        with pytest.raises(InvalidPermissionTargetError, match="unsupported"):
            validate_permission_target(spec, api_version="v1")

    def test_v2_accepts_build_scope(self) -> None:
        spec = PermissionTargetSpec(build=PermissionScope(repositories=["artifactory-build-info"], operations=["manage"]))

        assert validate_permission_target(spec, api_version="v2").build.operations == ["manage"]


class TestSameGrant:
    """Structural comparison of declarations."""

    def test_name_does_not_matter(self) -> None:
        scope = PermissionScope(repositories=["a"], operations=["read"])

        assert PermissionTargetSpec(name="x", repo=scope).same_grant(PermissionTargetSpec(repo=scope))

    def test_operations_matter(self) -> None:
        first = PermissionTargetSpec(repo=PermissionScope(repositories=["a"], operations=["read"]))
        second = PermissionTargetSpec(repo=PermissionScope(repositories=["a"], operations=["write"]))

        assert not first.same_grant(second)
