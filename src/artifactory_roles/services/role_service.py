"""Role service: reconciles role records with Artifactory.

A write first records the desired state as *pending*, then converges the
remote group and permission targets, and finally marks the record
*committed*. A record left pending by a failure is repaired on the next
write, by an explicit repair, or by the scheduled repair job.
"""

import logging
from dataclasses import dataclass, field
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from artifactory_roles.config import Settings, get_settings
from artifactory_roles.exceptions import (
    ArtifactoryError,
    InvalidTTLError,
    MissingRoleNameError,
    RecordPersistError,
    RemoteGroupOperationError,
    RemoteOperationError,
    RemotePermissionTargetOperationError,
    RoleAPIError,
    RoleNotFoundError,
    RoleReconciliationPendingError,
)
from artifactory_roles.models.domain.role import PermissionTargetSpec, RoleRecord, RoleState
from artifactory_roles.models.dto.role import (
    RoleBindingResponse,
    RoleResponse,
    RoleWriteRequest,
    RoleWriteResponse,
)
from artifactory_roles.providers import create_provider
from artifactory_roles.providers.base import AuthorizationProvider
from artifactory_roles.repositories.role_repository import RoleRepository
from artifactory_roles.services.naming import NamingStrategy
from artifactory_roles.services.permission_target_validator import parse_permission_targets
from artifactory_roles.utils.secure_logging import log_error, log_warning

logger = logging.getLogger(__name__)


@dataclass
class ConvergeResult:
    """Remote permission targets touched by one reconciliation."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)


def merge_by_identity(*spec_lists: list[PermissionTargetSpec]) -> list[PermissionTargetSpec]:
    """Union of spec lists by identity, first occurrence wins.

    Args:
        *spec_lists: Lists of permission target specs

    Returns:
        Specs with distinct identities, in first-seen order
    """
    merged: dict[str, PermissionTargetSpec] = {}
    for specs in spec_lists:
        for index, spec in enumerate(specs):
            identity = spec.identity or str(index)
            merged.setdefault(identity, spec.model_copy(update={"identity": identity}))
    return list(merged.values())


class RoleService:
    """Service for role reconciliation."""

    def __init__(
        self,
        session: AsyncSession,
        provider: AuthorizationProvider | None = None,
        settings: Settings | None = None,
        naming: NamingStrategy | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session: Database session
            provider: Authorization provider, created from settings when omitted
            settings: Application settings, the cached settings when omitted
            naming: Naming strategy, built from the configured prefix when omitted
        """
        self.session = session
        self.settings = settings or get_settings()
        self.role_repo = RoleRepository(session)
        self.provider = provider or create_provider(self.settings)
        self.naming = naming or NamingStrategy(self.settings.artifactory_name_prefix)
        self.api_version = self.settings.artifactory_api_version

    # =========================================================================
    # Read operations
    # =========================================================================

    async def list_roles(self) -> list[str]:
        """List all role names."""
        return await self.role_repo.list_names()

    async def read_role(self, name: str) -> RoleResponse | None:
        """Read a role.

        Args:
            name: Role name

        Returns:
            RoleResponse, or None if the role does not exist
        """
        if not name:
            raise MissingRoleNameError()
        role = await self.role_repo.get(name)
        if role is None:
            return None
        return RoleResponse(
            name=role.name,
            id=role.role_id,
            token_ttl=role.token_ttl,
            max_ttl=role.max_ttl,
            permission_targets=role.raw_permission_targets,
        )

    async def get_role_binding(self, name: str) -> RoleBindingResponse:
        """Resolve the group identity and TTLs credentials of a role are bound to.

        Args:
            name: Role name

        Returns:
            RoleBindingResponse

        Raises:
            RoleNotFoundError: If the role does not exist
            RoleReconciliationPendingError: If the role is not fully applied
        """
        if not name:
            raise MissingRoleNameError()
        role = await self.role_repo.get(name)
        if role is None:
            raise RoleNotFoundError(name)
        if role.is_pending:
            raise RoleReconciliationPendingError(name)
        return RoleBindingResponse(
            role_name=role.name,
            role_id=role.role_id,
            group_name=self.naming.group_name(role.role_id),
            token_ttl=role.token_ttl,
            max_ttl=role.max_ttl,
        )

    # =========================================================================
    # Write operations
    # =========================================================================

    async def create_or_update_role(self, name: str, request: RoleWriteRequest) -> RoleWriteResponse:
        """Create or update a role and converge Artifactory to it.

        Args:
            name: Role name
            request: Desired TTLs and permission target list

        Returns:
            RoleWriteResponse summarizing the remote changes

        Raises:
            MissingRoleNameError: If no name is given
            InvalidPermissionTargetError: If any declaration is invalid
            InvalidTTLError: If the token TTL exceeds the maximum TTL
            RemoteGroupOperationError: If the group cannot be created
            RemotePermissionTargetOperationError: If a permission target operation fails
            RecordPersistError: If the record cannot be stored
        """
        if not name:
            raise MissingRoleNameError()

        previous = await self.role_repo.get(name)

        # Validate the whole list before anything changes locally or remotely
        desired: list[PermissionTargetSpec] | None = None
        if request.permission_targets is not None:
            desired = parse_permission_targets(request.permission_targets, self.api_version)

        token_ttl = request.token_ttl if request.token_ttl is not None else self.settings.default_token_ttl
        max_ttl = request.max_ttl if request.max_ttl is not None else self.settings.default_max_ttl
        if token_ttl > max_ttl:
            raise InvalidTTLError(token_ttl, max_ttl)

        if previous is None:
            role = RoleRecord(
                name=name,
                role_id=uuid4().hex,
                token_ttl=token_ttl,
                max_ttl=max_ttl,
                permission_targets=desired or [],
                raw_permission_targets=request.permission_targets or "",
                state=RoleState.PENDING,
                previous_permission_targets=[],
            )
            baseline: list[PermissionTargetSpec] = []
            applied: dict[str, PermissionTargetSpec] = {}
        else:
            baseline = merge_by_identity(
                previous.permission_targets, previous.previous_permission_targets or []
            )
            # Content of a pending record was never confirmed remotely
            applied = (
                {}
                if previous.is_pending
                else {spec.identity: spec for spec in previous.permission_targets if spec.identity}
            )
            update: dict = {
                "token_ttl": token_ttl,
                "max_ttl": max_ttl,
                "state": RoleState.PENDING,
                "previous_permission_targets": baseline,
            }
            if desired is not None:
                update["permission_targets"] = desired
                update["raw_permission_targets"] = request.permission_targets
            role = previous.model_copy(update=update)

        await self._persist(role)

        if previous is None or previous.is_pending:
            await self._ensure_group(role, discard_on_failure=previous is None)

        result = await self._converge(role, baseline, applied)

        await self._persist(
            role.model_copy(update={"state": RoleState.COMMITTED, "previous_permission_targets": None})
        )
        logger.info(
            f"Role {name} reconciled: {len(result.created)} created, "
            f"{len(result.updated)} updated, {len(result.deleted)} deleted"
        )

        return RoleWriteResponse(
            role_id=role.role_id,
            role_name=role.name,
            permission_targets=role.raw_permission_targets,
            created=result.created,
            updated=result.updated,
            deleted=result.deleted,
        )

    async def delete_role(self, name: str) -> bool:
        """Delete a role, its permission targets and its group.

        Every remote deletion is attempted even if an earlier one fails. The
        record is only removed once all of them succeeded, so a retry can
        finish the cleanup.

        Args:
            name: Role name

        Returns:
            True if deleted, False if the role did not exist

        Raises:
            MissingRoleNameError: If no name is given
            RemoteOperationError: First remote failure, the record is kept
            RecordPersistError: If the record cannot be removed
        """
        if not name:
            raise MissingRoleNameError()

        role = await self.role_repo.get(name)
        if role is None:
            return False

        failures: list[RemoteOperationError] = []
        specs = merge_by_identity(role.permission_targets, role.previous_permission_targets or [])
        for spec in specs:
            pt_name = self.naming.permission_target_name(role.role_id, spec.identity)
            try:
                await self.provider.delete_permission_target(pt_name)
            except ArtifactoryError as e:
                log_error(logger, f"Failed to delete permission target {pt_name}", e)
                failures.append(RemotePermissionTargetOperationError(pt_name, e))

        group_name = self.naming.group_name(role.role_id)
        try:
            await self.provider.delete_group(group_name)
        except ArtifactoryError as e:
            log_error(logger, f"Failed to delete group {group_name}", e)
            failures.append(RemoteGroupOperationError(group_name, e))

        if failures:
            raise failures[0]

        try:
            await self.role_repo.delete(name)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            log_error(logger, f"Failed to delete role record {name}", e)
            raise RecordPersistError(name, e) from e

        logger.info(f"Role {name} deleted with {len(specs)} permission targets")
        return True

    # =========================================================================
    # Repair
    # =========================================================================

    async def repair_role(self, name: str) -> bool:
        """Finish an interrupted reconciliation of a role.

        Args:
            name: Role name

        Returns:
            True if the role was pending and is now committed, False if it
            was already committed

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        if not name:
            raise MissingRoleNameError()
        role = await self.role_repo.get(name)
        if role is None:
            raise RoleNotFoundError(name)
        if not role.is_pending:
            return False

        baseline = merge_by_identity(role.previous_permission_targets or [])
        await self._ensure_group(role, discard_on_failure=False)
        await self._converge(role, baseline, applied={})
        await self._persist(
            role.model_copy(update={"state": RoleState.COMMITTED, "previous_permission_targets": None})
        )
        logger.info(f"Role {name} repaired")
        return True

    async def repair_pending_roles(self) -> dict[str, str]:
        """Repair every role left pending.

        Returns:
            Dict mapping role name to "repaired" or "failed"
        """
        results: dict[str, str] = {}
        for name in await self.role_repo.list_pending():
            try:
                await self.repair_role(name)
                results[name] = "repaired"
            except RoleAPIError as e:
                log_warning(logger, f"Repair of role {name} failed", e)
                results[name] = "failed"
        return results

    # =========================================================================
    # Internals
    # =========================================================================

    async def _persist(self, role: RoleRecord) -> RoleRecord:
        """Store a role record and commit it."""
        try:
            stored = await self.role_repo.set(role)
            await self.session.commit()
            return stored
        except SQLAlchemyError as e:
            await self.session.rollback()
            log_error(logger, f"Failed to persist role {role.name}", e)
            raise RecordPersistError(role.name, e) from e

    async def _ensure_group(self, role: RoleRecord, discard_on_failure: bool) -> None:
        """Create or replace the role's group.

        Args:
            role: Role record
            discard_on_failure: Remove the pending record if the group cannot be
                created, used for roles that never existed before
        """
        group_name = self.naming.group_name(role.role_id)
        try:
            await self.provider.create_or_replace_group(
                group_name, f"Group for role {role.name}, managed by artifactory-roles"
            )
        except ArtifactoryError as e:
            log_error(logger, f"Failed to create group {group_name}", e)
            if discard_on_failure:
                await self._discard(role.name)
            raise RemoteGroupOperationError(group_name, e) from e

    async def _discard(self, name: str) -> None:
        """Remove a pending record of a role that was never created remotely."""
        try:
            await self.role_repo.delete(name)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            # The record stays pending and is repaired later
            log_error(logger, f"Failed to discard pending role {name}", e)

    async def _converge(
        self,
        role: RoleRecord,
        baseline: list[PermissionTargetSpec],
        applied: dict[str, PermissionTargetSpec],
    ) -> ConvergeResult:
        """Push desired permission targets, then delete stale ones.

        Args:
            role: Role record holding the desired permission targets
            baseline: Specs that may exist remotely from earlier reconciliations
            applied: Specs confirmed applied by the last committed reconciliation

        Returns:
            ConvergeResult with the remote names touched
        """
        result = ConvergeResult()
        group_name = self.naming.group_name(role.role_id)

        for spec in role.permission_targets:
            pt_name = self.naming.permission_target_name(role.role_id, spec.identity)
            try:
                exists = await self.provider.permission_target_exists(pt_name)
                applied_spec = applied.get(spec.identity)
                if exists and applied_spec is not None and applied_spec.same_grant(spec):
                    continue
                if exists:
                    await self.provider.update_permission_target(pt_name, group_name, spec)
                    result.updated.append(pt_name)
                else:
                    await self.provider.create_permission_target(pt_name, group_name, spec)
                    result.created.append(pt_name)
            except ArtifactoryError as e:
                log_error(logger, f"Failed to apply permission target {pt_name}", e)
                raise RemotePermissionTargetOperationError(pt_name, e) from e

        desired_identities = {spec.identity for spec in role.permission_targets}
        for spec in baseline:
            if spec.identity in desired_identities:
                continue
            pt_name = self.naming.permission_target_name(role.role_id, spec.identity)
            try:
                if await self.provider.permission_target_exists(pt_name):
                    logger.info(f"Deleting stale permission target {pt_name}")
                    await self.provider.delete_permission_target(pt_name)
                    result.deleted.append(pt_name)
            except ArtifactoryError as e:
                log_error(logger, f"Failed to delete permission target {pt_name}", e)
                raise RemotePermissionTargetOperationError(pt_name, e) from e

        return result
