"""Artifactory v2 permissions API integration."""

import logging
from typing import Any

from artifactory_roles.models.domain.role import PermissionScope, PermissionTargetSpec
from artifactory_roles.providers.artifactory import ArtifactoryProvider

logger = logging.getLogger(__name__)


class ArtifactoryV2Provider(ArtifactoryProvider):
    """Permission targets through /api/v2/security/permissions.

    The v2 API has separate repo and build sections, each granting named
    actions to users and groups.
    """

    def _permission_target_path(self, name: str) -> str:
        return f"/api/v2/security/permissions/{self._quote(name)}"

    @staticmethod
    def _scope_payload(scope: PermissionScope, group_name: str) -> dict[str, Any]:
        return {
            "include-patterns": scope.include_patterns,
            "exclude-patterns": scope.exclude_patterns,
            "repositories": scope.repositories,
            "actions": {"groups": {group_name: scope.operations}},
        }

    def build_permission_target_payload(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> dict[str, Any]:
        """Build a v2 permission target body.

        Args:
            name: Permission target name
            group_name: Group receiving the operations
            spec: Validated permission target declaration

        Returns:
            JSON body
        """
        payload: dict[str, Any] = {"name": name}
        if spec.repo is not None:
            payload["repo"] = self._scope_payload(spec.repo, group_name)
        if spec.build is not None:
            payload["build"] = self._scope_payload(spec.build, group_name)
        return payload

    async def permission_target_exists(self, name: str) -> bool:
        """Check permission target existence with a HEAD request."""
        response = await self._request(
            "HEAD",
            self._permission_target_path(name),
            ok_statuses=frozenset({200}),
            tolerated_statuses=frozenset({404}),
        )
        return response.status_code == 200

    async def create_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        """Create a v2 permission target."""
        await self._request(
            "POST",
            self._permission_target_path(name),
            json_data=self.build_permission_target_payload(name, group_name, spec),
        )
        logger.info(f"Created Artifactory permission target {name}")

    async def update_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        """Replace a v2 permission target."""
        await self._request(
            "PUT",
            self._permission_target_path(name),
            json_data=self.build_permission_target_payload(name, group_name, spec),
        )
        logger.info(f"Updated Artifactory permission target {name}")
