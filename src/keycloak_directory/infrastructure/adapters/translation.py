"""
Field mapping between directory records and Keycloak representations.

Pure functions, no I/O. Custom attributes are mapped only when their
name is in the given attribute registry; Keycloak stores attributes
as lists of strings, the directory exposes the first value.
"""

from typing import Any, Iterable, Optional

from keycloak_directory.domain.attributes import DISPLAY_NAME_ATTRIBUTE
from keycloak_directory.domain.value_objects import GroupRecord, IdentityRecord

GROUP_SOURCE = "Keycloak"
GROUP_TYPE = "security"


def first_value(attributes: Optional[dict[str, Any]], name: str) -> str:
    if not attributes:
        return ""
    values = attributes.get(name)
    if isinstance(values, str):
        return values
    if not values:
        return ""
    return values[0]


def user_from_keycloak(
    kc_user: dict[str, Any], attribute_names: Iterable[str]
) -> IdentityRecord:
    """Map a Keycloak user representation to an IdentityRecord."""
    kc_attributes = kc_user.get("attributes") or {}

    attributes = {}
    for name in attribute_names:
        value = first_value(kc_attributes, name)
        if value:
            attributes[name] = value

    return IdentityRecord(
        id=kc_user.get("id") or "",
        username=kc_user.get("username") or "",
        first_name=kc_user.get("firstName") or "",
        last_name=kc_user.get("lastName") or "",
        email=kc_user.get("email") or "",
        enabled=bool(kc_user.get("enabled", False)),
        display_name=first_value(kc_attributes, DISPLAY_NAME_ATTRIBUTE),
        attributes=attributes,
    )


def user_to_keycloak(
    user: IdentityRecord, attribute_names: Iterable[str]
) -> dict[str, Any]:
    """
    Map an IdentityRecord to a Keycloak user representation.

    Attributes outside ``attribute_names`` are dropped silently. The
    display name travels as the DisplayName attribute when registered.
    """
    names = list(attribute_names)
    kc_attributes: dict[str, list[str]] = {}
    for name in names:
        if name in user.attributes:
            kc_attributes[name] = [user.attributes[name]]
    if user.display_name and DISPLAY_NAME_ATTRIBUTE in names:
        kc_attributes[DISPLAY_NAME_ATTRIBUTE] = [user.display_name]

    payload: dict[str, Any] = {
        "username": user.username,
        "enabled": user.enabled,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "attributes": kc_attributes,
    }
    if user.id:
        payload["id"] = user.id
    return payload


def group_from_keycloak(kc_group: dict[str, Any]) -> GroupRecord:
    """Map a Keycloak group representation; the raw payload is kept in ``extra``."""
    return GroupRecord(
        id=kc_group.get("id") or "",
        name=kc_group.get("name") or "",
        source=GROUP_SOURCE,
        type=GROUP_TYPE,
        extra=kc_group,
    )


def group_to_keycloak(group: GroupRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    if group.id:
        payload["id"] = group.id
    if group.name:
        payload["name"] = group.name
    return payload
