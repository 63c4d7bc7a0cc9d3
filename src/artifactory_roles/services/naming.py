"""Deterministic names for the remote objects of a role.

Names derive only from the immutable role id, so a role always resolves to the
same group and permission targets, across updates and process restarts.
"""

import re

from artifactory_roles.config import get_settings

_ROLE_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")
_IDENTITY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class NamingStrategy:
    """Derives group and permission target names from a role id."""

    def __init__(self, prefix: str | None = None) -> None:
        """Initialize strategy.

        Args:
            prefix: Name prefix, defaults to the configured Artifactory name prefix
        """
        self.prefix = prefix or get_settings().artifactory_name_prefix

    @staticmethod
    def _check_role_id(role_id: str) -> None:
        if not role_id or not _ROLE_ID_PATTERN.match(role_id):
            raise ValueError(f"Malformed role id: {role_id!r}")

    def group_name(self, role_id: str) -> str:
        """Get the remote group name of a role.

        Args:
            role_id: 32-character hex role id

        Returns:
            Group name

        Raises:
            ValueError: If the role id is malformed
        """
        self._check_role_id(role_id)
        return f"{self.prefix}-{role_id}"

    def permission_target_name(self, role_id: str, identity: str | int) -> str:
        """Get the remote permission target name for one spec of a role.

        Args:
            role_id: 32-character hex role id
            identity: Logical name of the spec, or its position in the list

        Returns:
            Permission target name

        Raises:
            ValueError: If the role id or identity is malformed
        """
        self._check_role_id(role_id)
        identity = str(identity)
        if not _IDENTITY_PATTERN.match(identity):
            raise ValueError(f"Malformed permission target identity: {identity!r}")
        # The role id has a fixed length, so the identity can never shift into it
        return f"{self.prefix}-{role_id}-{identity}"
