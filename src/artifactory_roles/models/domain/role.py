"""Role domain model."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from artifactory_roles.constants.validation import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_INCLUDE_PATTERNS


class RoleState(StrEnum):
    """Reconciliation state of a persisted role record."""

    PENDING = "pending"  # Desired state recorded, remote calls not yet confirmed
    COMMITTED = "committed"  # Remote state matches the recorded permission targets


class PermissionScope(BaseModel):
    """Repository or build scope of a permission target."""

    include_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS))
    exclude_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    repositories: list[str] = []
    operations: list[str] = []

    class Config:
        """Pydantic config."""

        extra = "forbid"

    @model_validator(mode="before")
    @classmethod
    def accept_actions_alias(cls, data: Any) -> Any:
        """Accept ``actions`` as an alias of ``operations``."""
        if isinstance(data, dict) and "actions" in data:
            data = dict(data)
            actions = data.pop("actions")
            if "operations" in data:
                raise ValueError("use either operations or actions, not both")
            data["operations"] = actions
        return data


class PermissionTargetSpec(BaseModel):
    """A single permission target declaration of a role."""

    name: str | None = None
    repo: PermissionScope | None = None
    build: PermissionScope | None = None
    # Resolved identity: the logical name, or the list position for anonymous specs
    identity: str | None = None

    class Config:
        """Pydantic config."""

        extra = "forbid"

    def same_grant(self, other: "PermissionTargetSpec") -> bool:
        """Check whether two specs grant exactly the same scopes."""
        return self.repo == other.repo and self.build == other.build


class RoleRecord(BaseModel):
    """Role record domain model."""

    name: str
    role_id: str
    token_ttl: int
    max_ttl: int
    permission_targets: list[PermissionTargetSpec] = []
    raw_permission_targets: str = ""
    state: RoleState = RoleState.COMMITTED
    previous_permission_targets: list[PermissionTargetSpec] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        """Pydantic config."""

        from_attributes = True

    @property
    def is_pending(self) -> bool:
        """Whether the last reconciliation did not complete."""
        return self.state == RoleState.PENDING
