"""
Configuration for the Keycloak directory.

Read once when the directory is built; nothing here is reloaded.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_REALM = "master"
DEFAULT_PAGE_SIZE = 100


@dataclass
class KeycloakDirectoryConfig:
    """Configuration for the Keycloak directory adapters."""

    server_url: str  # e.g., "https://keycloak.example.com"
    admin_username: str
    admin_password: str
    realm: str = DEFAULT_REALM
    client_id: str = "admin-cli"
    # Connection options
    verify: bool = True
    timeout: int = 60  # per HTTP request, seconds
    # Directory behavior
    page_size: int = DEFAULT_PAGE_SIZE
    sync_attribute_profile: bool = True
    token_expiry_skew_seconds: int = 10

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "KeycloakDirectoryConfig":
        """
        Build a configuration from environment variables.

        Required: KEYCLOAK_HOST, KEYCLOAK_USER, KEYCLOAK_PWD.
        Optional: KEYCLOAK_REALM (default "master"), KEYCLOAK_VERIFY,
        KEYCLOAK_TIMEOUT.

        Raises:
            KeyError: If a required variable is missing
        """
        env = os.environ if environ is None else environ

        missing = [
            name
            for name in ("KEYCLOAK_HOST", "KEYCLOAK_USER", "KEYCLOAK_PWD")
            if not env.get(name)
        ]
        if missing:
            raise KeyError(f"Missing required environment variables: {missing}")

        return cls(
            server_url=env["KEYCLOAK_HOST"],
            admin_username=env["KEYCLOAK_USER"],
            admin_password=env["KEYCLOAK_PWD"],
            realm=env.get("KEYCLOAK_REALM") or DEFAULT_REALM,
            verify=env.get("KEYCLOAK_VERIFY", "true").lower() == "true",
            timeout=int(env.get("KEYCLOAK_TIMEOUT", "60")),
        )
