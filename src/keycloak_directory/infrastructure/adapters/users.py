"""
Keycloak User Directory.

Implements UserDirectoryPort on top of a DirectorySession. Every
operation first makes sure the session is connected and propagates
its failures unchanged.
"""

import logging
from typing import Optional

from keycloak.exceptions import KeycloakError

from keycloak_directory.domain.value_objects import IdentityRecord, PageCursor
from keycloak_directory.infrastructure.adapters.pagination import UserPageEnumerator
from keycloak_directory.infrastructure.adapters.remote import is_not_found, remote_error
from keycloak_directory.infrastructure.adapters.session import DirectorySession
from keycloak_directory.infrastructure.adapters.translation import (
    user_from_keycloak,
    user_to_keycloak,
)
from keycloak_directory.infrastructure.ports.directory import UserDirectoryPort

logger = logging.getLogger(__name__)

FULL_SYNC = "triggerFullSync"
CHANGED_USERS_SYNC = "triggerChangedUsersSync"


class KeycloakUserDirectory(UserDirectoryPort):
    """
    Keycloak implementation of UserDirectoryPort.

    Example usage:
        session = DirectorySession(config)
        users = KeycloakUserDirectory(session)

        created = await users.create_user(IdentityRecord(
            username="jdoe",
            email="jdoe@example.com",
            attributes={"Department": "R&D"},
        ))
        await users.disable_user(created.id)
    """

    def __init__(
        self,
        session: DirectorySession,
        enumerator: Optional[UserPageEnumerator] = None,
    ):
        self.session = session
        self.enumerator = enumerator or UserPageEnumerator(
            session, session.config.page_size
        )

    def _to_record(self, kc_user: dict) -> IdentityRecord:
        return user_from_keycloak(kc_user, self.session.attributes.names)

    # ═══════════════════════════════════════════════════════════════
    # QUERIES
    # ═══════════════════════════════════════════════════════════════

    async def list_users(
        self, filter: str = "", attrs: Optional[list[str]] = None
    ) -> list[IdentityRecord]:
        """
        List every user of the realm.

        ``filter`` and ``attrs`` are accepted for interface
        compatibility and currently ignored.
        """
        return await self.enumerator.collect()

    async def list_user_page(
        self, cursor: Optional[PageCursor] = None
    ) -> tuple[list[IdentityRecord], Optional[PageCursor]]:
        """Fetch a single page; see UserPageEnumerator.fetch_page."""
        return await self.enumerator.fetch_page(cursor)

    async def get_user(self, user_id: str) -> Optional[IdentityRecord]:
        """
        Get user by ID.

        Returns:
            IdentityRecord if found, None otherwise

        Raises:
            RemoteCallError: On any failure other than "not found"
        """
        admin = await self.session.ensure_connected()
        try:
            kc_user = await admin.a_get_user(user_id)
        except KeycloakError as e:
            if is_not_found(e):
                return None
            raise remote_error(e, "USER_GET_FAILED") from e
        if not kc_user:
            return None
        return self._to_record(kc_user)

    async def get_user_with_attributes(
        self, user_id: str, attrs: Optional[list[str]] = None
    ) -> Optional[IdentityRecord]:
        # Every registered attribute is already mapped; attrs is reserved.
        return await self.get_user(user_id)

    async def get_user_by_email(self, email: str) -> Optional[IdentityRecord]:
        """
        Get the first user matching ``email``.

        The query is passed as is: Keycloak matches it as a substring
        and no normalization happens here.
        """
        admin = await self.session.ensure_connected()
        try:
            found = await admin.a_get_users({"email": email})
        except KeycloakError as e:
            raise remote_error(e, "USER_SEARCH_FAILED") from e
        if not found:
            return None
        return self._to_record(found[0])

    async def user_name_exists(self, name: str) -> bool:
        admin = await self.session.ensure_connected()
        try:
            found = await admin.a_get_users({"username": name, "exact": True})
        except KeycloakError as e:
            raise remote_error(e, "USER_SEARCH_FAILED") from e
        return bool(found)

    async def force_user_name(self, name: str) -> tuple[str, bool]:
        """
        Check whether a proposed username is taken.

        The name is returned unchanged; no normalization is applied.

        Returns:
            (name, exists)
        """
        return name, await self.user_name_exists(name)

    # ═══════════════════════════════════════════════════════════════
    # COMMANDS
    # ═══════════════════════════════════════════════════════════════

    async def create_user(self, user: IdentityRecord) -> IdentityRecord:
        """
        Create a user.

        Only attributes known to the session's attribute registry are
        sent; others are dropped. The new id is written into ``user``.

        Returns:
            The same record, with its id set

        Raises:
            RemoteCallError: If creation fails
        """
        admin = await self.session.ensure_connected()
        payload = user_to_keycloak(user, self.session.attributes.names)
        payload.pop("id", None)
        try:
            user_id = await admin.a_create_user(payload, exist_ok=False)
        except KeycloakError as e:
            raise remote_error(e, "USER_CREATE_FAILED") from e

        if user_id:
            user.id = user_id
        logger.debug(f"Created user {user.username} ({user.id})")
        return user

    async def update_user(self, user: IdentityRecord) -> None:
        """
        Send the full record to Keycloak.

        Raises:
            ValueError: If the record has no id
            RemoteCallError: If the update fails
        """
        if not user.id:
            raise ValueError("Cannot update a user without an id")
        admin = await self.session.ensure_connected()
        payload = user_to_keycloak(user, self.session.attributes.names)
        try:
            await admin.a_update_user(user.id, payload)
        except KeycloakError as e:
            raise remote_error(e, "USER_UPDATE_FAILED") from e

    async def enable_user(self, user_id: str) -> None:
        await self._set_enabled(user_id, True)

    async def disable_user(self, user_id: str) -> None:
        await self._set_enabled(user_id, False)

    async def _set_enabled(self, user_id: str, enabled: bool) -> None:
        # Keycloak's user PUT only applies the fields present in the body,
        # so the minimal payload leaves every other field untouched.
        admin = await self.session.ensure_connected()
        try:
            await admin.a_update_user(user_id, {"enabled": enabled})
        except KeycloakError as e:
            code = "USER_ENABLE_FAILED" if enabled else "USER_DISABLE_FAILED"
            raise remote_error(e, code) from e
        logger.debug(f"User {user_id} enabled={enabled}")

    async def delete_user(self, user_id: str) -> None:
        """
        Delete a user.

        Deleting an absent user fails the way Keycloak reports it
        (a RemoteCallError with status 404).
        """
        admin = await self.session.ensure_connected()
        try:
            await admin.a_delete_user(user_id)
        except KeycloakError as e:
            raise remote_error(e, "USER_DELETE_FAILED") from e
        logger.debug(f"Deleted user {user_id}")

    async def set_user_password(
        self, user_id: str, password: str, temporary: bool = False
    ) -> None:
        admin = await self.session.ensure_connected()
        try:
            await admin.a_set_user_password(user_id, password, temporary)
        except KeycloakError as e:
            raise remote_error(e, "PASSWORD_SET_FAILED") from e

    async def trigger_user_storage_sync(
        self, storage_id: str, full_sync: bool = False
    ) -> None:
        """
        Trigger a user federation (e.g. LDAP) synchronization.

        Args:
            storage_id: ID of the user storage component
            full_sync: Full sync if True, changed users only otherwise
        """
        admin = await self.session.ensure_connected()
        action = FULL_SYNC if full_sync else CHANGED_USERS_SYNC
        try:
            await admin.a_sync_users(storage_id, action)
        except KeycloakError as e:
            raise remote_error(e, "USER_STORAGE_SYNC_FAILED") from e
        logger.info(f"Triggered {action} on user storage {storage_id}")
