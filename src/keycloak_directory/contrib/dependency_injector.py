"""
Dependency Injector integration for keycloak-directory.

Provides an IoC Container wiring one directory session to the user and
group directories. Host applications can extend it or use it directly.

Usage:
    from keycloak_directory.contrib.dependency_injector import DirectoryContainer

    container = DirectoryContainer()
    container.config.from_dict({
        "keycloak": {
            "server_url": "https://keycloak.example.com",
            "admin_username": "admin",
            "admin_password": "secret",
            "realm": "my-realm",
        }
    })

    users = container.user_directory()
"""

from dependency_injector import containers, providers

from keycloak_directory.config import DEFAULT_PAGE_SIZE, DEFAULT_REALM
from keycloak_directory.infrastructure.adapters.session import utc_now


class DirectoryContainer(containers.DeclarativeContainer):
    """
    IoC Container for the directory adapters.

    Config requirements (under config.keycloak.*):
    - server_url: Keycloak server URL
    - admin_username / admin_password: admin credentials
    - realm: realm name (default: master)

    Optional (under config.keycloak.*):
    - client_id (default: admin-cli), verify, timeout, page_size,
      sync_attribute_profile, token_expiry_skew_seconds

    Overridable dependencies:
    - clock: callable returning an aware datetime (default: utc_now)
    """

    config = providers.Configuration(
        default={
            "keycloak": {
                "realm": DEFAULT_REALM,
                "client_id": "admin-cli",
                "verify": True,
                "timeout": 60,
                "page_size": DEFAULT_PAGE_SIZE,
                "sync_attribute_profile": True,
                "token_expiry_skew_seconds": 10,
            }
        }
    )

    directory_config = providers.Singleton(
        "keycloak_directory.config.KeycloakDirectoryConfig",
        server_url=config.keycloak.server_url,
        admin_username=config.keycloak.admin_username,
        admin_password=config.keycloak.admin_password,
        realm=config.keycloak.realm,
        client_id=config.keycloak.client_id,
        verify=config.keycloak.verify,
        timeout=config.keycloak.timeout,
        page_size=config.keycloak.page_size,
        sync_attribute_profile=config.keycloak.sync_attribute_profile,
        token_expiry_skew_seconds=config.keycloak.token_expiry_skew_seconds,
    )

    clock = providers.Object(utc_now)

    # Attaches the attribute profile synchronizer unless disabled in config
    session = providers.Singleton(
        "keycloak_directory.factory.create_session",
        config=directory_config,
        clock=clock,
    )

    user_directory = providers.Singleton(
        "keycloak_directory.infrastructure.adapters.users.KeycloakUserDirectory",
        session=session,
    )

    group_directory = providers.Singleton(
        "keycloak_directory.infrastructure.adapters.groups.KeycloakGroupDirectory",
        session=session,
    )
