"""
Helpers for translating python-keycloak failures into directory errors.
"""

from keycloak.exceptions import KeycloakError

from keycloak_directory.domain.errors import RemoteCallError


def status_of(error: KeycloakError):
    """HTTP status carried by a python-keycloak error, if any."""
    return getattr(error, "response_code", None)


def is_not_found(error: KeycloakError) -> bool:
    return status_of(error) == 404


def remote_error(error: KeycloakError, code: str, message: str = "") -> RemoteCallError:
    """Wrap a KeycloakError; callers raise it ``from`` the original."""
    text = str(error)
    return RemoteCallError(
        f"{message}: {text}" if message else text,
        code,
        status_code=status_of(error),
    )
