"""
User attribute definitions and the declarative user profile model.

Keycloak only stores user attributes that are declared in the realm's
user profile. The directory needs a fixed set of organization-specific
attributes declared there, so this module defines them, models the
serialized profile blob, and keeps a registry of the attribute names
the translation layer is allowed to map.
"""

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional


PERMISSION_ADMIN = "admin"
PERMISSION_USER = "user"

# Attributes every Keycloak realm declares natively. They map to
# first-class fields of the user representation, not to attributes.
BUILTIN_ATTRIBUTE_NAMES = ("username", "email", "firstName", "lastName")


@dataclass(frozen=True)
class AttributeDefinition:
    """
    Declarative definition of one user profile attribute.

    Only the keys below are written; anything else Keycloak keeps on an
    existing definition is never touched because existing definitions
    are never overwritten.
    """

    name: str
    display_name: str = ""
    validations: dict[str, Any] = field(
        default_factory=lambda: {"length": {"min": 1, "max": 255}}
    )
    view: tuple[str, ...] = (PERMISSION_ADMIN, PERMISSION_USER)
    edit: tuple[str, ...] = (PERMISSION_ADMIN, PERMISSION_USER)
    multivalued: bool = False

    def to_representation(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name or self.name,
            "validations": copy.deepcopy(self.validations),
            "permissions": {"view": list(self.view), "edit": list(self.edit)},
            "multivalued": self.multivalued,
        }


def _organization_attribute(name: str) -> AttributeDefinition:
    return AttributeDefinition(name=name, display_name=name)


# Organization attributes the directory requires in every realm.
REQUIRED_ATTRIBUTES: tuple[AttributeDefinition, ...] = tuple(
    _organization_attribute(name)
    for name in (
        "AccountType",
        "Citizenship",
        "Company",
        "ContractDate",
        "ContractNumber",
        "Department",
        "DisplayName",
        "MobilePhone",
        "OfficePhone",
        "Organization",
        "JobTitle",
        "ProgramRole",
        "Project",
    )
)

DISPLAY_NAME_ATTRIBUTE = "DisplayName"


class AttributeProfileConfig:
    """
    Parsed ``kc.user.profile.config`` blob.

    Wraps the decoded JSON object instead of copying it into typed
    fields so that keys this library does not know about (annotations,
    required rules, unmanaged attribute policy...) survive a
    read-modify-write cycle unchanged.
    """

    def __init__(self, data: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = dict(data or {})
        if self._data.get("attributes") is None:
            self._data["attributes"] = []

    @classmethod
    def from_json(cls, raw: str) -> "AttributeProfileConfig":
        """
        Decode a serialized profile.

        Raises:
            ValueError: If the blob is not a JSON object or an attribute
                entry is not an object
        """
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("user profile configuration must be a JSON object")
        attributes = data.get("attributes")
        if attributes is not None and not isinstance(attributes, list):
            raise ValueError("user profile 'attributes' must be a list")
        if any(not isinstance(a, dict) for a in attributes or []):
            raise ValueError("user profile attributes must be JSON objects")
        return cls(data)

    def to_json(self) -> str:
        return json.dumps(self._data, separators=(",", ":"))

    @property
    def attributes(self) -> list[dict[str, Any]]:
        return self._data["attributes"]

    @property
    def groups(self) -> list[dict[str, Any]]:
        return self._data.get("groups") or []

    @property
    def attribute_names(self) -> list[str]:
        return [a.get("name", "") for a in self.attributes]

    def find_attribute(self, name: str) -> Optional[dict[str, Any]]:
        for existing in self.attributes:
            if existing.get("name") == name:
                return existing
        return None

    def merge(self, definitions: Iterable[AttributeDefinition]) -> list[str]:
        """
        Append every definition whose name is not declared yet.

        Existing definitions win, whatever their configuration. The
        order of pre-existing entries is preserved.

        Returns:
            Names of the definitions that were appended
        """
        added = []
        for definition in definitions:
            if self.find_attribute(definition.name) is not None:
                continue
            self.attributes.append(definition.to_representation())
            added.append(definition.name)
        return added


class AttributeRegistry:
    """
    Names of the custom attributes the translation layer maps.

    Starts from the required attribute set and is reloaded from the
    realm's user profile once it has been synchronized, so attributes
    declared at runtime are mapped too.
    """

    def __init__(self, names: Iterable[str]):
        self._names = tuple(dict.fromkeys(n for n in names if n))

    @classmethod
    def from_definitions(
        cls, definitions: Iterable[AttributeDefinition] = REQUIRED_ATTRIBUTES
    ) -> "AttributeRegistry":
        return cls(d.name for d in definitions)

    @classmethod
    def from_profile(cls, config: AttributeProfileConfig) -> "AttributeRegistry":
        return cls(
            name
            for name in config.attribute_names
            if name not in BUILTIN_ATTRIBUTE_NAMES
        )

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"AttributeRegistry({list(self._names)!r})"
