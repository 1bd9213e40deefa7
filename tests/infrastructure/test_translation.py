"""
Tests for the record <-> Keycloak representation mapping.
"""

from keycloak_directory.domain.value_objects import GroupRecord, IdentityRecord
from keycloak_directory.infrastructure.adapters.translation import (
    GROUP_SOURCE,
    GROUP_TYPE,
    first_value,
    group_from_keycloak,
    group_to_keycloak,
    user_from_keycloak,
    user_to_keycloak,
)

NAMES = ("Department", "Project", "DisplayName")


def test_first_value():
    assert first_value({"a": ["x", "y"]}, "a") == "x"
    assert first_value({"a": "plain"}, "a") == "plain"
    assert first_value({"a": []}, "a") == ""
    assert first_value({}, "a") == ""
    assert first_value(None, "a") == ""


def test_user_from_keycloak_maps_registered_attributes_only():
    kc_user = {
        "id": "u1",
        "username": "jdoe",
        "firstName": "John",
        "lastName": "Doe",
        "email": "jdoe@example.com",
        "enabled": True,
        "attributes": {
            "Department": ["R&D"],
            "DisplayName": ["Johnny"],
            "Shoe": ["42"],
        },
    }

    user = user_from_keycloak(kc_user, NAMES)

    assert user.id == "u1"
    assert user.username == "jdoe"
    assert user.first_name == "John"
    assert user.last_name == "Doe"
    assert user.email == "jdoe@example.com"
    assert user.enabled is True
    assert user.display_name == "Johnny"
    assert user.attributes == {"Department": "R&D", "DisplayName": "Johnny"}


def test_user_from_keycloak_with_brief_representation():
    user = user_from_keycloak({"id": "u1", "username": "jdoe"}, NAMES)
    assert user.enabled is False
    assert user.email == ""
    assert user.display_name == ""
    assert user.attributes == {}


def test_user_to_keycloak_drops_unknown_attributes():
    user = IdentityRecord(
        username="jdoe",
        email="jdoe@example.com",
        enabled=True,
        attributes={"Department": "R&D", "Shoe": "42"},
    )

    payload = user_to_keycloak(user, NAMES)

    assert payload == {
        "username": "jdoe",
        "enabled": True,
        "firstName": "",
        "lastName": "",
        "email": "jdoe@example.com",
        "attributes": {"Department": ["R&D"]},
    }


def test_user_to_keycloak_carries_id_and_display_name():
    user = IdentityRecord(username="jdoe", id="u1", display_name="Johnny")

    payload = user_to_keycloak(user, NAMES)

    assert payload["id"] == "u1"
    assert payload["attributes"] == {"DisplayName": ["Johnny"]}


def test_display_name_dropped_when_not_registered():
    user = IdentityRecord(username="jdoe", display_name="Johnny")
    assert user_to_keycloak(user, ("Department",))["attributes"] == {}


def test_group_mapping():
    raw = {"id": "g1", "name": "Team A", "path": "/Team A", "subGroups": []}

    group = group_from_keycloak(raw)

    assert group.id == "g1"
    assert group.name == "Team A"
    assert group.source == GROUP_SOURCE
    assert group.type == GROUP_TYPE
    assert group.extra["path"] == "/Team A"

    assert group_to_keycloak(group) == {"id": "g1", "name": "Team A"}
    assert group_to_keycloak(GroupRecord(name="New")) == {"name": "New"}
