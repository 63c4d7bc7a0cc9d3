"""Artifactory legacy v1 permissions API integration."""

import logging
from typing import Any

from artifactory_roles.constants.validation import V1_OPERATION_LETTERS
from artifactory_roles.models.domain.role import PermissionTargetSpec
from artifactory_roles.providers.artifactory import ArtifactoryProvider

logger = logging.getLogger(__name__)


class ArtifactoryV1Provider(ArtifactoryProvider):
    """Permission targets through /api/security/permissions.

    The v1 API only knows repository scopes, comma-separated patterns and
    single-letter privileges; a PUT creates or replaces the target.
    """

    def _permission_target_path(self, name: str) -> str:
        return f"/api/security/permissions/{self._quote(name)}"

    def build_permission_target_payload(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> dict[str, Any]:
        """Build a v1 permission target body.

        Args:
            name: Permission target name
            group_name: Group receiving the privileges
            spec: Validated permission target declaration (repo scope only)

        Returns:
            JSON body

        Raises:
            ValueError: If the declaration has no repo scope
        """
        if spec.repo is None:
            raise ValueError("v1 permission targets need a repo scope")
        scope = spec.repo
        return {
            "name": name,
            "includesPattern": ",".join(scope.include_patterns),
            "excludesPattern": ",".join(scope.exclude_patterns),
            "repositories": scope.repositories,
            "principals": {
                "groups": {group_name: [V1_OPERATION_LETTERS[op] for op in scope.operations]},
            },
        }

    async def permission_target_exists(self, name: str) -> bool:
        """Check permission target existence with a GET request."""
        response = await self._request(
            "GET",
            self._permission_target_path(name),
            ok_statuses=frozenset({200}),
            tolerated_statuses=frozenset({404}),
        )
        return response.status_code == 200

    async def _put_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        await self._request(
            "PUT",
            self._permission_target_path(name),
            json_data=self.build_permission_target_payload(name, group_name, spec),
        )

    async def create_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        """Create a v1 permission target."""
        await self._put_permission_target(name, group_name, spec)
        logger.info(f"Created Artifactory permission target {name}")

    async def update_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        """Replace a v1 permission target."""
        await self._put_permission_target(name, group_name, spec)
        logger.info(f"Updated Artifactory permission target {name}")
