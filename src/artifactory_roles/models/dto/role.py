"""Role DTOs."""

from pydantic import BaseModel, Field, model_validator


class RoleWriteRequest(BaseModel):
    """Role create-or-update request."""

    token_ttl: int | None = Field(default=None, ge=0, le=31_536_000)  # Max one year
    max_ttl: int | None = Field(default=None, ge=0, le=31_536_000)
    # JSON list of permission target declarations, kept verbatim for read-back
    permission_targets: str | None = Field(default=None, max_length=100_000)

    @model_validator(mode="after")
    def validate_ttls(self) -> "RoleWriteRequest":
        """Reject a default TTL above the maximum TTL when both are given."""
        if self.token_ttl is not None and self.max_ttl is not None and self.token_ttl > self.max_ttl:
            raise ValueError("token_ttl must not exceed max_ttl")
        return self


class RoleWriteResponse(BaseModel):
    """Summary of a create-or-update reconciliation."""

    role_id: str
    role_name: str
    permission_targets: str
    created: list[str] = []
    updated: list[str] = []
    deleted: list[str] = []


class RoleResponse(BaseModel):
    """Role read response."""

    name: str
    id: str
    token_ttl: int
    max_ttl: int
    permission_targets: str


class RoleListResponse(BaseModel):
    """Role list response."""

    keys: list[str]


class RoleBindingResponse(BaseModel):
    """Group identity and TTLs used when issuing credentials for a role."""

    role_name: str
    role_id: str
    group_name: str
    token_ttl: int
    max_ttl: int


class RoleRepairResponse(BaseModel):
    """Result of repairing a role record."""

    role_name: str
    repaired: bool
