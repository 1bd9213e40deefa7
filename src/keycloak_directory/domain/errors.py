"""
Domain errors for the identity directory.

These errors provide a consistent interface for reporting failures
across the session, enumeration and directory adapters.

"Not found" is deliberately absent: lookups return None instead.
"""

from typing import Optional, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from keycloak_directory.domain.value_objects import MembershipReport


class DirectoryError(Exception):
    """Base class for all directory errors."""

    def __init__(
        self,
        message: str,
        code: str = "DIRECTORY_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class AuthenticationError(DirectoryError):
    """Raised when admin credentials are rejected or the server is unreachable."""

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTHENTICATION_FAILED",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class ProfileNotFoundError(DirectoryError):
    """Raised when the realm has no declarative user profile component."""

    def __init__(
        self,
        message: str = "No user profile component found",
        code: str = "PROFILE_NOT_FOUND",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class MalformedConfigError(DirectoryError):
    """Raised when the user profile configuration blob cannot be used."""

    def __init__(
        self,
        message: str = "Malformed user profile configuration",
        code: str = "MALFORMED_PROFILE_CONFIG",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class RemoteCallError(DirectoryError):
    """Raised when a call to the Keycloak Admin API fails."""

    def __init__(
        self,
        message: str,
        code: str = "REMOTE_CALL_FAILED",
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, code, details)
        self.status_code = status_code


class AggregateError(DirectoryError):
    """
    Raised when some items of a bulk operation failed.

    The report lists every item with its outcome, so callers can tell
    which ids succeeded without parsing the message.
    """

    def __init__(
        self,
        report: "MembershipReport",
        message: Optional[str] = None,
        code: str = "PARTIAL_FAILURE",
    ):
        failed = report.failed_ids
        if message is None:
            message = f"{len(failed)} of {len(report.outcomes)} operations failed: " + (
                ", ".join(failed)
            )
        super().__init__(message, code, {"failed_ids": failed})
        self.report = report

    @property
    def failed_ids(self) -> list[str]:
        return self.report.failed_ids
