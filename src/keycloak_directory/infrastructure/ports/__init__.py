"""Ports (interfaces) the directory adapters implement."""

from keycloak_directory.infrastructure.ports.directory import (
    UserDirectoryPort,
    GroupDirectoryPort,
)

__all__ = [
    "UserDirectoryPort",
    "GroupDirectoryPort",
]
