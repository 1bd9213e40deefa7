"""
Paginated user enumeration.

Keycloak pages users with ``first``/``max`` and gives no snapshot
isolation across pages, so the walk is strictly sequential. A page
that comes back exactly full means there may be more; anything
shorter ends the walk.
"""

import logging
from typing import Optional

from keycloak.exceptions import KeycloakError

from keycloak_directory.config import DEFAULT_PAGE_SIZE
from keycloak_directory.domain.value_objects import IdentityRecord, PageCursor
from keycloak_directory.infrastructure.adapters.remote import remote_error
from keycloak_directory.infrastructure.adapters.session import DirectorySession
from keycloak_directory.infrastructure.adapters.translation import user_from_keycloak

logger = logging.getLogger(__name__)


class UserPageEnumerator:
    """Walks the realm's users one fixed-size page at a time."""

    def __init__(self, session: DirectorySession, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.session = session
        self.page_size = page_size

    def first_cursor(self) -> PageCursor:
        return PageCursor(offset=0, page_size=self.page_size)

    async def fetch_page(
        self, cursor: Optional[PageCursor] = None
    ) -> tuple[list[IdentityRecord], Optional[PageCursor]]:
        """
        Fetch one page of users.

        Args:
            cursor: Page to fetch; None means the first page

        Returns:
            The translated users and the cursor of the next page, or
            None when this page was short (the collection is exhausted)

        Raises:
            AuthenticationError: If the session cannot be established
            RemoteCallError: If the page fetch fails
        """
        admin = await self.session.ensure_connected()
        cursor = cursor or self.first_cursor()

        try:
            kc_users = await admin.a_get_users(
                {"first": cursor.offset, "max": cursor.page_size}
            )
        except KeycloakError as e:
            raise remote_error(
                e, "USER_PAGE_FAILED", f"Failed to fetch users at offset {cursor.offset}"
            ) from e

        kc_users = kc_users or []
        names = self.session.attributes.names
        records = [user_from_keycloak(u, names) for u in kc_users]
        logger.debug(f"Fetched {len(records)} users at offset {cursor.offset}")

        next_cursor = cursor.next() if len(kc_users) == cursor.page_size else None
        return records, next_cursor

    async def collect(self) -> list[IdentityRecord]:
        """
        Fetch every page until one comes back short.

        A failure on any page discards what was collected so far and
        propagates.
        """
        collected: list[IdentityRecord] = []
        cursor: Optional[PageCursor] = None
        pages = 0
        while True:
            records, cursor = await self.fetch_page(cursor)
            pages += 1
            collected.extend(records)
            if cursor is None:
                logger.debug(f"Enumerated {len(collected)} users in {pages} pages")
                return collected
