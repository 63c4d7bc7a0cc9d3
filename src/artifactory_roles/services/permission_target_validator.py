"""Validation of permission target declarations.

All checks are pure: nothing here touches the store or Artifactory, so a
declaration list can be rejected as a whole before any remote change happens.
"""

import json
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from artifactory_roles.constants.validation import (
    ALLOWED_OPERATIONS,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    MAX_PATTERNS_PER_SCOPE,
    MAX_PERMISSION_TARGETS_PER_ROLE,
    MAX_REPOSITORIES_PER_SCOPE,
    PERMISSION_TARGET_NAME_PATTERN,
    V1_OPERATION_LETTERS,
)
from artifactory_roles.exceptions import InvalidPermissionTargetError
from artifactory_roles.models.domain.role import PermissionScope, PermissionTargetSpec


def _dedupe(values: list[str]) -> list[str]:
    """Remove duplicates while keeping the first occurrence order."""
    return list(dict.fromkeys(values))


def _validate_scope(scope: PermissionScope, section: str, api_version: str) -> PermissionScope:
    """Validate and normalize one repo or build scope.

    Args:
        scope: Scope to validate
        section: "repo" or "build", used in error messages
        api_version: Artifactory API variant in use

    Returns:
        Normalized scope

    Raises:
        InvalidPermissionTargetError: If the scope is invalid
    """
    repositories = _dedupe([r.strip() for r in scope.repositories])
    if not repositories or any(not r for r in repositories):
        raise InvalidPermissionTargetError(f"{section}: repositories must be a non-empty list of names")
    if len(repositories) > MAX_REPOSITORIES_PER_SCOPE:
        raise InvalidPermissionTargetError(
            f"{section}: too many repositories (max {MAX_REPOSITORIES_PER_SCOPE})"
        )

    operations = _dedupe(scope.operations)
    if not operations:
        raise InvalidPermissionTargetError(f"{section}: operations must be a non-empty list")
    vocabulary = V1_OPERATION_LETTERS.keys() if api_version == "v1" else ALLOWED_OPERATIONS
    unknown = [op for op in operations if op not in vocabulary]
    if unknown:
        raise InvalidPermissionTargetError(
            f"{section}: unsupported operations {', '.join(unknown)} "
            f"(allowed: {', '.join(sorted(vocabulary))})"
        )

    include_patterns = scope.include_patterns or list(DEFAULT_INCLUDE_PATTERNS)
    exclude_patterns = scope.exclude_patterns or list(DEFAULT_EXCLUDE_PATTERNS)
    if len(include_patterns) > MAX_PATTERNS_PER_SCOPE or len(exclude_patterns) > MAX_PATTERNS_PER_SCOPE:
        raise InvalidPermissionTargetError(
            f"{section}: too many patterns (max {MAX_PATTERNS_PER_SCOPE})"
        )

    return PermissionScope(
        include_patterns=include_patterns,
        exclude_patterns=exclude_patterns,
        repositories=repositories,
        operations=operations,
    )


def validate_permission_target(
    spec: PermissionTargetSpec, api_version: str = "v2"
) -> PermissionTargetSpec:
    """Validate a single permission target declaration.

    Args:
        spec: Declaration to validate
        api_version: Artifactory API variant ("v1" or "v2")

    Returns:
        Normalized declaration (duplicates removed, pattern defaults applied)

    Raises:
        InvalidPermissionTargetError: If the declaration is invalid
    """
    if spec.name is not None and not PERMISSION_TARGET_NAME_PATTERN.match(spec.name):
        raise InvalidPermissionTargetError(
            "name must start with a letter and contain at most 32 letters, digits, '_', '.' or '-'"
        )
    if spec.repo is None and spec.build is None:
        raise InvalidPermissionTargetError("at least one of repo or build must be given")
    if spec.build is not None and api_version == "v1":
        raise InvalidPermissionTargetError("build permissions require the v2 permissions API")

    return PermissionTargetSpec(
        name=spec.name,
        repo=_validate_scope(spec.repo, "repo", api_version) if spec.repo else None,
        build=_validate_scope(spec.build, "build", api_version) if spec.build else None,
        identity=spec.identity,
    )


def _format_pydantic_error(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "entry"
    return f"{location}: {first.get('msg', 'invalid value')}"


def parse_permission_targets(raw: str, api_version: str = "v2") -> list[PermissionTargetSpec]:
    """Parse and validate a serialized permission target list.

    Every entry is validated before anything is returned, and each entry gets
    its identity: the logical name when given, otherwise its list position.

    Args:
        raw: JSON text holding a list of permission target objects
        api_version: Artifactory API variant ("v1" or "v2")

    Returns:
        Validated declarations in input order

    Raises:
        InvalidPermissionTargetError: On malformed JSON or the first invalid entry
    """
    try:
        data: Any = json.loads(raw) if raw.strip() else []
    except json.JSONDecodeError as e:
        raise InvalidPermissionTargetError(
            f"expecting a JSON list of permission targets ({e.msg} at position {e.pos})"
        ) from e
    except RecursionError as e:
        raise InvalidPermissionTargetError("permission target list is nested too deeply") from e

    if not isinstance(data, list):
        raise InvalidPermissionTargetError("expecting a JSON list of permission targets")
    if len(data) > MAX_PERMISSION_TARGETS_PER_ROLE:
        raise InvalidPermissionTargetError(
            f"too many permission targets (max {MAX_PERMISSION_TARGETS_PER_ROLE})"
        )

    specs: list[PermissionTargetSpec] = []
    seen: set[str] = set()
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise InvalidPermissionTargetError("entry must be a JSON object", index=index)
        if "identity" in entry:
            raise InvalidPermissionTargetError("identity is assigned by the server", index=index)
        try:
            spec = PermissionTargetSpec.model_validate(entry)
        except PydanticValidationError as e:
            raise InvalidPermissionTargetError(_format_pydantic_error(e), index=index) from e
        try:
            spec = validate_permission_target(spec, api_version)
        except InvalidPermissionTargetError as e:
            raise InvalidPermissionTargetError(e.reason, index=index) from e

        identity = spec.name if spec.name is not None else str(index)
        if identity in seen:
            raise InvalidPermissionTargetError(f"duplicate permission target name {identity}", index=index)
        seen.add(identity)
        specs.append(spec.model_copy(update={"identity": identity}))

    return specs
