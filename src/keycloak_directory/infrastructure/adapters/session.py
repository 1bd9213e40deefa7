"""
Directory session.

Owns the admin login against the Keycloak realm and the KeycloakAdmin
handle every directory operation goes through. The session is lazy:
nothing touches the network until the first ``ensure_connected()``.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, TYPE_CHECKING

from keycloak import KeycloakAdmin, KeycloakOpenID
from keycloak.exceptions import KeycloakError

from keycloak_directory.config import KeycloakDirectoryConfig
from keycloak_directory.domain.attributes import AttributeRegistry
from keycloak_directory.domain.errors import AuthenticationError

if TYPE_CHECKING:
    from keycloak_directory.infrastructure.adapters.profile import (
        AttributeProfileSynchronizer,
    )

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Used when the token response carries no expires_in.
DEFAULT_TOKEN_LIFETIME = 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DirectorySession:
    """
    Lazily established admin session for one Keycloak realm.

    The cached token is trusted until its stored expiry (minus a small
    skew) has passed on the injected clock; after that the next
    ``ensure_connected()`` logs in again with the stored credentials.

    Establishment is serialized with an asyncio.Lock, so concurrent
    first-use calls log in once. The KeycloakAdmin handle is shared by
    every operation on the session and must stay on one event loop.

    On the first successful login the attribute profile synchronizer
    (if any) runs and the attribute registry is reloaded from the
    merged profile.

    Example usage:
        session = DirectorySession(config)
        admin = await session.ensure_connected()
    """

    def __init__(
        self,
        config: KeycloakDirectoryConfig,
        clock: Clock = utc_now,
        profile_synchronizer: Optional["AttributeProfileSynchronizer"] = None,
    ):
        self.config = config
        self._clock = clock
        self._profile_synchronizer = profile_synchronizer
        self._profile_synced = False
        self._token: Optional[dict[str, Any]] = None
        self._expires_at: Optional[datetime] = None
        self._admin: Optional[KeycloakAdmin] = None
        self._lock = asyncio.Lock()
        self.attributes = AttributeRegistry.from_definitions()

    # ═══════════════════════════════════════════════════════════════
    # STATE
    # ═══════════════════════════════════════════════════════════════

    @property
    def realm(self) -> str:
        return self.config.realm

    @property
    def admin(self) -> KeycloakAdmin:
        """The admin handle. Only valid after ``ensure_connected()``."""
        if self._admin is None or self._token is None:
            raise AuthenticationError(
                "Directory session is not connected", "NOT_CONNECTED"
            )
        return self._admin

    @property
    def access_token(self) -> Optional[str]:
        if self._token is None:
            return None
        return self._token.get("access_token")

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._expires_at

    def token_valid(self) -> bool:
        if self._token is None or self._expires_at is None:
            return False
        skew = timedelta(seconds=self.config.token_expiry_skew_seconds)
        return self._clock() < self._expires_at - skew

    def is_ready(self) -> bool:
        synced = self._profile_synchronizer is None or self._profile_synced
        return self.token_valid() and synced

    def invalidate(self) -> None:
        """Drop the cached token so the next call logs in again."""
        self._token = None
        self._expires_at = None

    # ═══════════════════════════════════════════════════════════════
    # CONNECTION
    # ═══════════════════════════════════════════════════════════════

    async def ensure_connected(self) -> KeycloakAdmin:
        """
        Make sure a valid admin token and handle exist.

        Idempotent; a no-op while the cached token is valid.

        Returns:
            The KeycloakAdmin handle bound to the configured realm

        Raises:
            AuthenticationError: If the credentials are rejected or the
                server cannot be reached
            ProfileNotFoundError, MalformedConfigError: If the attribute
                profile cannot be synchronized on first connection
        """
        if self.is_ready():
            return self.admin

        async with self._lock:
            if not self.token_valid():
                await self._login()
            if self._profile_synchronizer is not None and not self._profile_synced:
                profile = await self._profile_synchronizer.synchronize(self.admin)
                self.attributes = AttributeRegistry.from_profile(profile)
                self._profile_synced = True
                logger.debug(f"Attribute registry loaded: {self.attributes!r}")

        return self.admin

    async def _login(self) -> None:
        config = self.config
        openid = KeycloakOpenID(
            server_url=config.server_url,
            realm_name=config.realm,
            client_id=config.client_id,
            verify=config.verify,
            timeout=config.timeout,
        )
        try:
            token = await openid.a_token(config.admin_username, config.admin_password)
        except KeycloakError as e:
            logger.error(f"Admin login to realm {config.realm} failed: {e}")
            raise AuthenticationError(
                f"Admin login to realm '{config.realm}' failed: {e}",
                details={
                    "realm": config.realm,
                    "status_code": getattr(e, "response_code", None),
                },
            ) from e

        lifetime = int(token.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        self._token = token
        self._expires_at = self._clock() + timedelta(seconds=lifetime)
        self._admin = KeycloakAdmin(
            server_url=config.server_url,
            token=token,
            realm_name=config.realm,
            user_realm_name=config.realm,
            client_id=config.client_id,
            verify=config.verify,
            timeout=config.timeout,
        )
        logger.info(
            f"Admin session established for realm {config.realm} "
            f"(token valid for {lifetime}s)"
        )
