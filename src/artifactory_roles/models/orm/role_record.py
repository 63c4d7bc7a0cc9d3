"""Role record ORM model."""

from typing import Any

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from artifactory_roles.models.orm.base import Base, JSONType, TimestampMixin


class RoleRecordORM(Base, TimestampMixin):
    """Role record database model."""

    __tablename__ = "role_records"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    role_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    token_ttl: Mapped[int] = mapped_column(Integer, nullable=False)
    max_ttl: Mapped[int] = mapped_column(Integer, nullable=False)
    permission_targets: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    raw_permission_targets: Mapped[str] = mapped_column(Text, nullable=False, default="")
    state: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    # Baseline that may still exist remotely while a reconciliation is pending
    previous_permission_targets: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONType, nullable=True
    )
