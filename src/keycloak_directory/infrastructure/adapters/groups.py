"""
Keycloak Group Directory.

Implements GroupDirectoryPort, including membership management.
Bulk membership changes are sequential, one call per user, and are
not atomic: a report of per-user outcomes tells callers what stuck.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from keycloak.exceptions import KeycloakError

from keycloak_directory.domain.errors import AggregateError
from keycloak_directory.domain.value_objects import (
    GroupRecord,
    IdentityRecord,
    MembershipOutcome,
    MembershipReport,
)
from keycloak_directory.infrastructure.adapters.remote import is_not_found, remote_error
from keycloak_directory.infrastructure.adapters.session import DirectorySession
from keycloak_directory.infrastructure.adapters.translation import (
    group_from_keycloak,
    group_to_keycloak,
    user_from_keycloak,
)
from keycloak_directory.infrastructure.ports.directory import GroupDirectoryPort

logger = logging.getLogger(__name__)


class KeycloakGroupDirectory(GroupDirectoryPort):
    """
    Keycloak implementation of GroupDirectoryPort.

    Shares its DirectorySession with KeycloakUserDirectory when built
    through ``create_directory()``.

    Example usage:
        groups = KeycloakGroupDirectory(session)
        team = await groups.create_group(GroupRecord(name="Team A"))
        report = await groups.add_members(team.id, [alice_id, bob_id])
    """

    def __init__(self, session: DirectorySession):
        self.session = session

    # ═══════════════════════════════════════════════════════════════
    # GROUP CRUD
    # ═══════════════════════════════════════════════════════════════

    async def list_groups(
        self, filter: str = "", attrs: Optional[list[str]] = None
    ) -> list[GroupRecord]:
        """List top-level groups. ``filter`` and ``attrs`` are ignored."""
        admin = await self.session.ensure_connected()
        try:
            found = await admin.a_get_groups()
        except KeycloakError as e:
            raise remote_error(e, "GROUP_LIST_FAILED") from e
        return [group_from_keycloak(g) for g in found or []]

    async def get_group(self, group_id: str) -> Optional[GroupRecord]:
        """
        Get group by ID.

        Returns:
            GroupRecord if found, None otherwise
        """
        admin = await self.session.ensure_connected()
        try:
            found = await admin.a_get_group(group_id)
        except KeycloakError as e:
            if is_not_found(e):
                return None
            raise remote_error(e, "GROUP_GET_FAILED") from e
        if not found:
            return None
        return group_from_keycloak(found)

    async def get_group_id(self, name: str) -> Optional[str]:
        """ID of the group named exactly ``name``, or None."""
        admin = await self.session.ensure_connected()
        try:
            found = await admin.a_get_groups({"search": name, "exact": True})
        except KeycloakError as e:
            raise remote_error(e, "GROUP_SEARCH_FAILED") from e
        # The search also returns parents of matching subgroups
        for group in found or []:
            if group.get("name") == name:
                return group.get("id")
        return None

    async def create_group(self, group: GroupRecord) -> GroupRecord:
        """
        Create a group; its new id is written into ``group``.

        Raises:
            RemoteCallError: If creation fails
        """
        admin = await self.session.ensure_connected()
        payload = group_to_keycloak(group)
        payload.pop("id", None)
        try:
            group_id = await admin.a_create_group(payload)
        except KeycloakError as e:
            raise remote_error(e, "GROUP_CREATE_FAILED") from e
        if group_id:
            group.id = group_id
        logger.debug(f"Created group {group.name} ({group.id})")
        return group

    async def update_group(self, group: GroupRecord) -> bool:
        """Update a group (in practice, its name)."""
        if not group.id:
            raise ValueError("Cannot update a group without an id")
        admin = await self.session.ensure_connected()
        try:
            await admin.a_update_group(group.id, group_to_keycloak(group))
        except KeycloakError as e:
            raise remote_error(e, "GROUP_UPDATE_FAILED") from e
        return True

    async def delete_group(self, group_id: str) -> None:
        admin = await self.session.ensure_connected()
        try:
            await admin.a_delete_group(group_id)
        except KeycloakError as e:
            raise remote_error(e, "GROUP_DELETE_FAILED") from e
        logger.debug(f"Deleted group {group_id}")

    # ═══════════════════════════════════════════════════════════════
    # MEMBERSHIP
    # ═══════════════════════════════════════════════════════════════

    async def get_group_members(self, group_id: str) -> list[IdentityRecord]:
        """
        Members of a group.

        Keycloak returns brief user representations, so typically only
        id, username, names and email are populated.
        """
        admin = await self.session.ensure_connected()
        try:
            found = await admin.a_get_group_members(group_id)
        except KeycloakError as e:
            raise remote_error(e, "GROUP_MEMBERS_FAILED") from e
        names = self.session.attributes.names
        return [user_from_keycloak(u, names) for u in found or []]

    async def get_user_groups(self, user_id: str) -> list[GroupRecord]:
        admin = await self.session.ensure_connected()
        try:
            found = await admin.a_get_user_groups(user_id)
        except KeycloakError as e:
            raise remote_error(e, "USER_GROUPS_FAILED") from e
        return [group_from_keycloak(g) for g in found or []]

    async def add_members(
        self, group_id: str, user_ids: list[str], raise_on_failure: bool = True
    ) -> MembershipReport:
        """
        Add users to a group.

        Args:
            group_id: Group's ID
            user_ids: IDs of users to add
            raise_on_failure: Raise AggregateError if any user failed

        Returns:
            Per-user outcomes, in input order

        Raises:
            AggregateError: If any user failed and ``raise_on_failure``
        """
        admin = await self.session.ensure_connected()
        return await self._apply_to_members(
            group_id,
            user_ids,
            lambda user_id: admin.a_group_user_add(user_id, group_id),
            "GROUP_ADD_FAILED",
            raise_on_failure,
        )

    async def remove_members(
        self, group_id: str, user_ids: list[str], raise_on_failure: bool = True
    ) -> MembershipReport:
        """Remove users from a group. Same contract as ``add_members``."""
        admin = await self.session.ensure_connected()
        return await self._apply_to_members(
            group_id,
            user_ids,
            lambda user_id: admin.a_group_user_remove(user_id, group_id),
            "GROUP_REMOVE_FAILED",
            raise_on_failure,
        )

    async def _apply_to_members(
        self,
        group_id: str,
        user_ids: list[str],
        call: Callable[[str], Awaitable[Any]],
        code: str,
        raise_on_failure: bool,
    ) -> MembershipReport:
        outcomes = []
        for user_id in user_ids:
            try:
                await call(user_id)
            except KeycloakError as e:
                logger.warning(f"{code} for user {user_id} in group {group_id}: {e}")
                outcomes.append(MembershipOutcome(user_id, remote_error(e, code)))
            else:
                outcomes.append(MembershipOutcome(user_id))

        report = MembershipReport(group_id=group_id, outcomes=tuple(outcomes))
        if raise_on_failure and not report.ok:
            raise AggregateError(report)
        return report
