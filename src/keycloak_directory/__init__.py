"""
keycloak-directory: identity directory (users, groups, memberships)
backed by the Keycloak Admin REST API.
"""

__version__ = "0.1.0"

from keycloak_directory.config import KeycloakDirectoryConfig
from keycloak_directory.domain import (
    AttributeDefinition,
    AttributeProfileConfig,
    AttributeRegistry,
    REQUIRED_ATTRIBUTES,
    DirectoryError,
    AuthenticationError,
    ProfileNotFoundError,
    MalformedConfigError,
    RemoteCallError,
    AggregateError,
    IdentityRecord,
    GroupRecord,
    PageCursor,
    MembershipOutcome,
    MembershipReport,
)
from keycloak_directory.infrastructure.adapters import (
    DirectorySession,
    UserPageEnumerator,
    AttributeProfileSynchronizer,
    KeycloakUserDirectory,
    KeycloakGroupDirectory,
)
from keycloak_directory.infrastructure.ports import (
    UserDirectoryPort,
    GroupDirectoryPort,
)
from keycloak_directory.factory import KeycloakDirectory, create_directory

__all__ = [
    # Version
    "__version__",
    # Configuration
    "KeycloakDirectoryConfig",
    "KeycloakDirectory",
    "create_directory",
    # Records
    "IdentityRecord",
    "GroupRecord",
    "PageCursor",
    "MembershipOutcome",
    "MembershipReport",
    # Attribute profile
    "AttributeDefinition",
    "AttributeProfileConfig",
    "AttributeRegistry",
    "REQUIRED_ATTRIBUTES",
    # Errors
    "DirectoryError",
    "AuthenticationError",
    "ProfileNotFoundError",
    "MalformedConfigError",
    "RemoteCallError",
    "AggregateError",
    # Ports
    "UserDirectoryPort",
    "GroupDirectoryPort",
    # Adapters
    "DirectorySession",
    "UserPageEnumerator",
    "AttributeProfileSynchronizer",
    "KeycloakUserDirectory",
    "KeycloakGroupDirectory",
]
