"""Base authorization provider interface."""

from abc import ABC, abstractmethod

from artifactory_roles.models.domain.role import PermissionTargetSpec


class AuthorizationProvider(ABC):
    """Abstract base class for the remote authorization system.

    Every operation is idempotent at the remote object level: groups are
    created or replaced, deletions of missing objects succeed, so an
    interrupted reconciliation can simply be run again.
    """

    @abstractmethod
    async def test_connection(self) -> bool:
        """Test the provider connection.

        Returns:
            True if connection is successful
        """
        pass

    @abstractmethod
    async def create_or_replace_group(self, name: str, description: str) -> None:
        """Create a group, replacing it if it already exists.

        Args:
            name: Group name
            description: Human readable description
        """
        pass

    @abstractmethod
    async def delete_group(self, name: str) -> None:
        """Delete a group. Deleting a missing group is not an error.

        Args:
            name: Group name
        """
        pass

    @abstractmethod
    async def permission_target_exists(self, name: str) -> bool:
        """Check whether a permission target exists.

        Args:
            name: Permission target name

        Returns:
            True if it exists
        """
        pass

    @abstractmethod
    async def create_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        """Create a permission target granting the spec's operations to a group.

        Args:
            name: Permission target name
            group_name: Group receiving the operations
            spec: Validated permission target declaration
        """
        pass

    @abstractmethod
    async def update_permission_target(
        self, name: str, group_name: str, spec: PermissionTargetSpec
    ) -> None:
        """Replace the content of an existing permission target.

        Args:
            name: Permission target name
            group_name: Group receiving the operations
            spec: Validated permission target declaration
        """
        pass

    @abstractmethod
    async def delete_permission_target(self, name: str) -> None:
        """Delete a permission target. Deleting a missing target is not an error.

        Args:
            name: Permission target name
        """
        pass
