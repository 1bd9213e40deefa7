"""
Attribute profile synchronizer.

Keycloak rejects user attributes that are not declared in the realm's
declarative user profile. The profile lives as a JSON string inside a
realm component, so declaring attributes is a read-modify-write of
that component:

1. find the component by provider id
2. decode its profile configuration
3. append every required attribute that is not declared yet
4. write the whole configuration back

The merge is idempotent but not transactional: a concurrent writer
to the same component can lose updates.
"""

import logging
from typing import Any, Iterable, Optional

from keycloak import KeycloakAdmin
from keycloak.exceptions import KeycloakError

from keycloak_directory.domain.attributes import (
    AttributeDefinition,
    AttributeProfileConfig,
    REQUIRED_ATTRIBUTES,
)
from keycloak_directory.domain.errors import MalformedConfigError, ProfileNotFoundError
from keycloak_directory.infrastructure.adapters.remote import remote_error

logger = logging.getLogger(__name__)

USER_PROFILE_PROVIDER_ID = "declarative-user-profile"
USER_PROFILE_CONFIG_KEY = "kc.user.profile.config"


class AttributeProfileSynchronizer:
    """Makes sure a fixed set of attribute definitions exists in the realm."""

    def __init__(
        self,
        definitions: Iterable[AttributeDefinition] = REQUIRED_ATTRIBUTES,
        provider_id: str = USER_PROFILE_PROVIDER_ID,
    ):
        self.definitions = tuple(definitions)
        self.provider_id = provider_id

    async def synchronize(self, admin: KeycloakAdmin) -> AttributeProfileConfig:
        """
        Merge the required definitions into the realm's user profile.

        Args:
            admin: Connected admin handle

        Returns:
            The merged profile configuration, as written back

        Raises:
            ProfileNotFoundError: If no user profile component exists
            MalformedConfigError: If the profile blob is missing, not a
                single value, or not a JSON object
            RemoteCallError: If reading or writing the component fails
        """
        component = await self.find_profile_component(admin)
        if component is None:
            raise ProfileNotFoundError(
                f"No component with provider id '{self.provider_id}'",
                details={"provider_id": self.provider_id},
            )

        profile = self.parse_profile(component)
        added = profile.merge(self.definitions)

        component_config = dict(component.get("config") or {})
        component_config[USER_PROFILE_CONFIG_KEY] = [profile.to_json()]
        payload = {**component, "config": component_config}

        try:
            await admin.a_update_component(component["id"], payload)
        except KeycloakError as e:
            raise remote_error(
                e, "PROFILE_UPDATE_FAILED", "Failed to write user profile"
            ) from e

        if added:
            logger.info(f"Declared user profile attributes: {', '.join(added)}")
        else:
            logger.debug("User profile already declares all required attributes")
        return profile

    async def find_profile_component(
        self, admin: KeycloakAdmin
    ) -> Optional[dict[str, Any]]:
        return await find_component(admin, self.provider_id)

    @staticmethod
    def parse_profile(component: dict[str, Any]) -> AttributeProfileConfig:
        """
        Decode the profile configuration held by a component.

        Raises:
            MalformedConfigError: If the value is missing, not singular,
                or not a JSON object
        """
        values = (component.get("config") or {}).get(USER_PROFILE_CONFIG_KEY)
        if not isinstance(values, list) or len(values) != 1:
            raise MalformedConfigError(
                f"Bad {USER_PROFILE_CONFIG_KEY}: expected exactly one value",
                details={"component_id": component.get("id")},
            )
        try:
            return AttributeProfileConfig.from_json(values[0])
        except (TypeError, ValueError) as e:
            raise MalformedConfigError(
                f"Bad {USER_PROFILE_CONFIG_KEY}: {e}",
                details={"component_id": component.get("id")},
            ) from e


async def find_component(
    admin: KeycloakAdmin, provider_id: str
) -> Optional[dict[str, Any]]:
    """First realm component with the given provider id, or None."""
    try:
        components = await admin.a_get_components()
    except KeycloakError as e:
        raise remote_error(e, "COMPONENT_LIST_FAILED") from e

    for component in components or []:
        if component.get("providerId") == provider_id:
            return component
    return None
