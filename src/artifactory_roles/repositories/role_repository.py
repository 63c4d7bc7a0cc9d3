"""Role record repository."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from artifactory_roles.models.domain.role import PermissionTargetSpec, RoleRecord, RoleState
from artifactory_roles.models.orm.role_record import RoleRecordORM


def _dump_specs(specs: list[PermissionTargetSpec] | None) -> list[dict[str, Any]] | None:
    if specs is None:
        return None
    return [spec.model_dump(mode="json") for spec in specs]


class RoleRepository:
    """Repository for role records, keyed by role name."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    async def _get_orm(self, name: str) -> RoleRecordORM | None:
        result = await self.session.execute(
            select(RoleRecordORM).where(RoleRecordORM.name == name)
        )
        return result.scalar_one_or_none()

    async def get(self, name: str) -> RoleRecord | None:
        """Get a role record by name.

        Args:
            name: Role name

        Returns:
            RoleRecord or None if not found
        """
        record = await self._get_orm(name)
        return RoleRecord.model_validate(record) if record else None

    async def set(self, role: RoleRecord) -> RoleRecord:
        """Create or replace a role record.

        Args:
            role: Role record to store

        Returns:
            Stored RoleRecord
        """
        values = {
            "role_id": role.role_id,
            "token_ttl": role.token_ttl,
            "max_ttl": role.max_ttl,
            "permission_targets": _dump_specs(role.permission_targets),
            "raw_permission_targets": role.raw_permission_targets,
            "state": role.state.value,
            "previous_permission_targets": _dump_specs(role.previous_permission_targets),
        }

        existing = await self._get_orm(role.name)
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            await self.session.flush()
            await self.session.refresh(existing)
            return RoleRecord.model_validate(existing)

        record = RoleRecordORM(name=role.name, **values)
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)
        return RoleRecord.model_validate(record)

    async def delete(self, name: str) -> bool:
        """Delete a role record by name.

        Args:
            name: Role name

        Returns:
            True if deleted, False if not found
        """
        record = await self._get_orm(name)
        if record is None:
            return False

        await self.session.delete(record)
        await self.session.flush()
        return True

    async def list_names(self) -> list[str]:
        """List all role names in ascending order.

        Returns:
            List of role names
        """
        result = await self.session.execute(
            select(RoleRecordORM.name).order_by(RoleRecordORM.name)
        )
        return list(result.scalars().all())

    async def list_pending(self) -> list[str]:
        """List names of roles whose last reconciliation did not complete.

        Returns:
            List of role names
        """
        result = await self.session.execute(
            select(RoleRecordORM.name)
            .where(RoleRecordORM.state == RoleState.PENDING.value)
            .order_by(RoleRecordORM.name)
        )
        return list(result.scalars().all())
