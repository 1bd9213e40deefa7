"""Domain layer: records, attribute profile model, and errors."""

from keycloak_directory.domain.attributes import (
    AttributeDefinition,
    AttributeProfileConfig,
    AttributeRegistry,
    BUILTIN_ATTRIBUTE_NAMES,
    REQUIRED_ATTRIBUTES,
)
from keycloak_directory.domain.errors import (
    DirectoryError,
    AuthenticationError,
    ProfileNotFoundError,
    MalformedConfigError,
    RemoteCallError,
    AggregateError,
)
from keycloak_directory.domain.value_objects import (
    IdentityRecord,
    GroupRecord,
    PageCursor,
    MembershipOutcome,
    MembershipReport,
)

__all__ = [
    # Attribute profile
    "AttributeDefinition",
    "AttributeProfileConfig",
    "AttributeRegistry",
    "BUILTIN_ATTRIBUTE_NAMES",
    "REQUIRED_ATTRIBUTES",
    # Errors
    "DirectoryError",
    "AuthenticationError",
    "ProfileNotFoundError",
    "MalformedConfigError",
    "RemoteCallError",
    "AggregateError",
    # Records
    "IdentityRecord",
    "GroupRecord",
    "PageCursor",
    "MembershipOutcome",
    "MembershipReport",
]
