"""
Pytest configuration for keycloak-directory tests.
"""

import copy
import itertools
import json
from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import AsyncMock, patch
from keycloak.exceptions import (
    KeycloakDeleteError,
    KeycloakGetError,
    KeycloakPostError,
    KeycloakPutError,
)

from keycloak_directory.config import KeycloakDirectoryConfig
from keycloak_directory.infrastructure.adapters.groups import KeycloakGroupDirectory
from keycloak_directory.infrastructure.adapters.profile import (
    AttributeProfileSynchronizer,
)
from keycloak_directory.infrastructure.adapters.session import DirectorySession
from keycloak_directory.infrastructure.adapters.users import KeycloakUserDirectory


# -----------------------------------------------------------------------------
# FAKES
# -----------------------------------------------------------------------------


BUILTIN_PROFILE_ATTRIBUTES = [
    {
        "name": "username",
        "displayName": "${username}",
        "validations": {
            "length": {"min": 3, "max": 255},
            "username-prohibited-characters": {},
        },
        "permissions": {"view": ["admin", "user"], "edit": ["admin", "user"]},
        "multivalued": False,
    },
    {
        "name": "email",
        "displayName": "${email}",
        "validations": {"email": {}, "length": {"max": 255}},
        "required": {"roles": ["user"]},
        "permissions": {"view": ["admin", "user"], "edit": ["admin", "user"]},
        "multivalued": False,
    },
    {
        "name": "firstName",
        "displayName": "${firstName}",
        "validations": {"length": {"max": 255}},
        "permissions": {"view": ["admin", "user"], "edit": ["admin", "user"]},
        "multivalued": False,
    },
    {
        "name": "lastName",
        "displayName": "${lastName}",
        "validations": {"length": {"max": 255}},
        "annotations": {"inputType": "text"},
        "permissions": {"view": ["admin", "user"], "edit": ["admin", "user"]},
        "multivalued": False,
    },
]


def make_profile_component(attributes=None, **top_level):
    """Realm component holding a declarative user profile."""
    profile = {
        "attributes": copy.deepcopy(
            BUILTIN_PROFILE_ATTRIBUTES if attributes is None else attributes
        ),
        "groups": [
            {
                "name": "user-metadata",
                "displayHeader": "User metadata",
                "displayDescription": "Attributes, which refer to user metadata",
            }
        ],
    }
    profile.update(top_level)
    return {
        "id": "profile-component",
        "name": "declarative-user-profile",
        "providerId": "declarative-user-profile",
        "providerType": "org.keycloak.userprofile.UserProfileProvider",
        "parentId": "test-realm",
        "config": {"kc.user.profile.config": [json.dumps(profile)]},
    }


def not_found(error_cls, what):
    return error_cls(
        error_message=json.dumps({"error": f"{what} not found"}).encode(),
        response_code=404,
    )


class FakeKeycloakAdmin:
    """
    In-memory stand-in for the async half of python-keycloak's KeycloakAdmin.

    Mirrors the Admin API behaviors the directory relies on: 404s for
    missing resources, 409s for duplicate names, partial user updates,
    and first/max paging.
    """

    def __init__(self, components=None):
        self.users = {}
        self.groups = {}
        self.members = {}
        self.components = (
            [make_profile_component()] if components is None else components
        )
        self.passwords = {}
        self.storage_syncs = []
        self.get_users_queries = []
        self._ids = itertools.count(1)

    def _new_id(self, prefix):
        return f"{prefix}-{next(self._ids)}"

    # USERS

    async def a_get_users(self, query=None):
        query = dict(query or {})
        self.get_users_queries.append(query)
        users = list(self.users.values())
        if "username" in query:
            if query.get("exact"):
                users = [u for u in users if u.get("username") == query["username"]]
            else:
                users = [u for u in users if query["username"] in u.get("username", "")]
        if "email" in query:
            users = [u for u in users if query["email"] in (u.get("email") or "")]
        first = query.get("first", 0)
        if "max" in query:
            users = users[first : first + query["max"]]
        else:
            users = users[first:]
        return copy.deepcopy(users)

    async def a_get_user(self, user_id):
        if user_id not in self.users:
            raise not_found(KeycloakGetError, "User")
        return copy.deepcopy(self.users[user_id])

    async def a_create_user(self, payload, exist_ok=False):
        username = payload.get("username")
        if any(u.get("username") == username for u in self.users.values()):
            raise KeycloakPostError(
                error_message=b'{"errorMessage":"User exists with same username"}',
                response_code=409,
            )
        user_id = self._new_id("user")
        user = copy.deepcopy(payload)
        user["id"] = user_id
        self.users[user_id] = user
        return user_id

    async def a_update_user(self, user_id, payload):
        if user_id not in self.users:
            raise not_found(KeycloakPutError, "User")
        self.users[user_id].update(copy.deepcopy(payload))
        return {}

    async def a_delete_user(self, user_id):
        if user_id not in self.users:
            raise not_found(KeycloakDeleteError, "User")
        del self.users[user_id]
        for member_ids in self.members.values():
            if user_id in member_ids:
                member_ids.remove(user_id)
        return {}

    async def a_set_user_password(self, user_id, password, temporary=True):
        if user_id not in self.users:
            raise not_found(KeycloakPutError, "User")
        self.passwords[user_id] = (password, temporary)
        return {}

    async def a_sync_users(self, storage_id, action):
        self.storage_syncs.append((storage_id, action))
        return {}

    # GROUPS

    async def a_get_groups(self, query=None, full_hierarchy=False):
        query = dict(query or {})
        groups = list(self.groups.values())
        if "search" in query:
            if query.get("exact"):
                groups = [g for g in groups if g["name"] == query["search"]]
            else:
                groups = [g for g in groups if query["search"] in g["name"]]
        return copy.deepcopy(groups)

    async def a_get_group(self, group_id, full_hierarchy=False):
        if group_id not in self.groups:
            raise not_found(KeycloakGetError, "Could not find group by id")
        return copy.deepcopy(self.groups[group_id])

    async def a_create_group(self, payload, parent=None, skip_exists=False):
        if any(g["name"] == payload.get("name") for g in self.groups.values()):
            raise KeycloakPostError(
                error_message=b'{"errorMessage":"Top level group named already exists."}',
                response_code=409,
            )
        group_id = self._new_id("group")
        name = payload.get("name", "")
        self.groups[group_id] = {
            "id": group_id,
            "name": name,
            "path": f"/{name}",
            "subGroups": [],
        }
        self.members[group_id] = []
        return group_id

    async def a_update_group(self, group_id, payload):
        if group_id not in self.groups:
            raise not_found(KeycloakPutError, "Could not find group by id")
        group = self.groups[group_id]
        group.update({k: v for k, v in payload.items() if k != "id"})
        group["path"] = f"/{group['name']}"
        return {}

    async def a_delete_group(self, group_id):
        if group_id not in self.groups:
            raise not_found(KeycloakDeleteError, "Could not find group by id")
        del self.groups[group_id]
        del self.members[group_id]
        return {}

    async def a_get_group_members(self, group_id, query=None):
        if group_id not in self.groups:
            raise not_found(KeycloakGetError, "Could not find group by id")
        return [copy.deepcopy(self.users[uid]) for uid in self.members[group_id]]

    async def a_get_user_groups(self, user_id, query=None, brief_representation=True):
        if user_id not in self.users:
            raise not_found(KeycloakGetError, "User")
        return [
            copy.deepcopy(self.groups[gid])
            for gid, member_ids in self.members.items()
            if user_id in member_ids
        ]

    async def a_group_user_add(self, user_id, group_id):
        if user_id not in self.users:
            raise not_found(KeycloakPutError, "User")
        if group_id not in self.groups:
            raise not_found(KeycloakPutError, "Could not find group by id")
        if user_id not in self.members[group_id]:
            self.members[group_id].append(user_id)
        return {}

    async def a_group_user_remove(self, user_id, group_id):
        if user_id not in self.users:
            raise not_found(KeycloakDeleteError, "User")
        if group_id not in self.groups:
            raise not_found(KeycloakDeleteError, "Could not find group by id")
        if user_id in self.members[group_id]:
            self.members[group_id].remove(user_id)
        return {}

    # COMPONENTS

    async def a_get_components(self, query=None):
        return copy.deepcopy(self.components)

    async def a_update_component(self, component_id, payload):
        for i, component in enumerate(self.components):
            if component["id"] == component_id:
                self.components[i] = copy.deepcopy(payload)
                return {}
        raise not_found(KeycloakPutError, "Could not find component")

    def profile_json(self):
        for component in self.components:
            if component["providerId"] == "declarative-user-profile":
                return component["config"]["kc.user.profile.config"][0]
        return None


class FakeClock:
    """Manually advanced, timezone-aware clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


# -----------------------------------------------------------------------------
# FIXTURES
# -----------------------------------------------------------------------------


@pytest.fixture
def directory_config():
    return KeycloakDirectoryConfig(
        server_url="https://auth.example.com",
        admin_username="admin",
        admin_password="secret",
        realm="test-realm",
        verify=False,
    )


@pytest.fixture
def builtin_profile_attributes():
    return copy.deepcopy(BUILTIN_PROFILE_ATTRIBUTES)


@pytest.fixture
def profile_component():
    return make_profile_component


@pytest.fixture
def fake_admin():
    return FakeKeycloakAdmin()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def keycloak_clients(fake_admin):
    """Patch KeycloakOpenID and KeycloakAdmin where the session builds them."""
    with (
        patch(
            "keycloak_directory.infrastructure.adapters.session.KeycloakOpenID"
        ) as mock_openid,
        patch(
            "keycloak_directory.infrastructure.adapters.session.KeycloakAdmin"
        ) as mock_admin,
    ):
        mock_openid.return_value.a_token = AsyncMock(
            return_value={
                "access_token": "token-1",
                "refresh_token": "refresh-1",
                "expires_in": 300,
            }
        )
        mock_admin.return_value = fake_admin
        yield mock_openid, mock_admin


@pytest.fixture
def session(directory_config, keycloak_clients, clock):
    return DirectorySession(
        directory_config,
        clock=clock,
        profile_synchronizer=AttributeProfileSynchronizer(),
    )


@pytest.fixture
def users(session):
    return KeycloakUserDirectory(session)


@pytest.fixture
def groups(session):
    return KeycloakGroupDirectory(session)
