"""
Directory ports.

Define the provider-neutral user and group directory interfaces the
surrounding application consumes. KeycloakUserDirectory and
KeycloakGroupDirectory are the implementations shipped here.
"""

from typing import Optional, Protocol, runtime_checkable

from keycloak_directory.domain.value_objects import (
    GroupRecord,
    IdentityRecord,
    MembershipReport,
)


# ═══════════════════════════════════════════════════════════════
# USER DIRECTORY PORT
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class UserDirectoryPort(Protocol):
    """
    Port for user management against an identity directory.

    Lookups return None for users that do not exist; every other
    failure raises a DirectoryError.
    """

    async def list_users(
        self, filter: str = "", attrs: Optional[list[str]] = None
    ) -> list[IdentityRecord]:
        """List every user in the directory."""
        ...

    async def get_user(self, user_id: str) -> Optional[IdentityRecord]:
        """
        Get user by ID.

        Returns:
            IdentityRecord if found, None otherwise
        """
        ...

    async def get_user_by_email(self, email: str) -> Optional[IdentityRecord]:
        """
        Get the first user matching an email address.

        Returns:
            IdentityRecord if found, None otherwise
        """
        ...

    async def create_user(self, user: IdentityRecord) -> IdentityRecord:
        """
        Create a user.

        The directory-issued id is written into ``user``, which is
        also returned.
        """
        ...

    async def update_user(self, user: IdentityRecord) -> None:
        """Replace the user's fields with ``user``'s."""
        ...

    async def enable_user(self, user_id: str) -> None:
        ...

    async def disable_user(self, user_id: str) -> None:
        ...

    async def delete_user(self, user_id: str) -> None:
        ...

    async def force_user_name(self, name: str) -> tuple[str, bool]:
        """
        Check a proposed username.

        Returns:
            The name (unchanged) and whether a user already has it
        """
        ...


# ═══════════════════════════════════════════════════════════════
# GROUP DIRECTORY PORT
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class GroupDirectoryPort(Protocol):
    """Port for group and membership management."""

    async def list_groups(
        self, filter: str = "", attrs: Optional[list[str]] = None
    ) -> list[GroupRecord]:
        ...

    async def get_group(self, group_id: str) -> Optional[GroupRecord]:
        ...

    async def get_group_id(self, name: str) -> Optional[str]:
        """ID of the group with exactly this name, or None."""
        ...

    async def create_group(self, group: GroupRecord) -> GroupRecord:
        ...

    async def update_group(self, group: GroupRecord) -> bool:
        ...

    async def delete_group(self, group_id: str) -> None:
        ...

    async def get_group_members(self, group_id: str) -> list[IdentityRecord]:
        ...

    async def get_user_groups(self, user_id: str) -> list[GroupRecord]:
        ...

    async def add_members(
        self, group_id: str, user_ids: list[str], raise_on_failure: bool = True
    ) -> MembershipReport:
        """
        Add users to a group, one call per user.

        Not atomic: memberships that succeeded stay in place when
        others fail.

        Raises:
            AggregateError: If any user failed and ``raise_on_failure``
        """
        ...

    async def remove_members(
        self, group_id: str, user_ids: list[str], raise_on_failure: bool = True
    ) -> MembershipReport:
        ...
