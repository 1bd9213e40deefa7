"""
Factory functions for building a directory.

One call gives a user and a group directory sharing a single session.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from keycloak_directory.config import KeycloakDirectoryConfig
from keycloak_directory.infrastructure.adapters.groups import KeycloakGroupDirectory
from keycloak_directory.infrastructure.adapters.profile import (
    AttributeProfileSynchronizer,
)
from keycloak_directory.infrastructure.adapters.session import (
    Clock,
    DirectorySession,
    utc_now,
)
from keycloak_directory.infrastructure.adapters.users import KeycloakUserDirectory

logger = logging.getLogger(__name__)


@dataclass
class KeycloakDirectory:
    """User and group directories bound to one session."""

    session: DirectorySession
    users: KeycloakUserDirectory
    groups: KeycloakGroupDirectory


def create_session(
    config: KeycloakDirectoryConfig, clock: Clock = utc_now
) -> DirectorySession:
    synchronizer = (
        AttributeProfileSynchronizer() if config.sync_attribute_profile else None
    )
    return DirectorySession(config, clock=clock, profile_synchronizer=synchronizer)


def create_directory(
    config: Optional[KeycloakDirectoryConfig] = None, clock: Clock = utc_now
) -> KeycloakDirectory:
    """
    Build a directory from ``config``, or from environment variables.

    Nothing connects until the first operation.
    """
    if config is None:
        config = KeycloakDirectoryConfig.from_env()
    session = create_session(config, clock)
    logger.debug(f"Directory created for realm {config.realm} at {config.server_url}")
    return KeycloakDirectory(
        session=session,
        users=KeycloakUserDirectory(session),
        groups=KeycloakGroupDirectory(session),
    )
