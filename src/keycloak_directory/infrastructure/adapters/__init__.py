"""Keycloak infrastructure adapters (session, enumeration, profile, directories)."""

from keycloak_directory.infrastructure.adapters.session import (
    DirectorySession,
    utc_now,
)
from keycloak_directory.infrastructure.adapters.pagination import UserPageEnumerator
from keycloak_directory.infrastructure.adapters.profile import (
    AttributeProfileSynchronizer,
    USER_PROFILE_PROVIDER_ID,
    USER_PROFILE_CONFIG_KEY,
)
from keycloak_directory.infrastructure.adapters.users import KeycloakUserDirectory
from keycloak_directory.infrastructure.adapters.groups import KeycloakGroupDirectory

__all__ = [
    # Session
    "DirectorySession",
    "utc_now",
    # Enumeration
    "UserPageEnumerator",
    # Attribute profile
    "AttributeProfileSynchronizer",
    "USER_PROFILE_PROVIDER_ID",
    "USER_PROFILE_CONFIG_KEY",
    # Directories
    "KeycloakUserDirectory",
    "KeycloakGroupDirectory",
]
