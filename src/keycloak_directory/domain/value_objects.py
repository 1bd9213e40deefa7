"""
Domain records and value objects for the identity directory.

Records (users, groups) are plain mutable dataclasses: the remote
service assigns their ids, and creation writes the id back into the
caller's record. Everything else here is immutable.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════
# RECORDS
# ═══════════════════════════════════════════════════════════════


@dataclass
class IdentityRecord:
    """
    Provider-neutral user record.

    ``id`` is empty until the user has been created remotely.
    ``attributes`` only carries attributes known to the directory's
    attribute registry; anything else is dropped on translation.
    """

    username: str = ""
    id: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    enabled: bool = False
    display_name: str = ""
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass
class GroupRecord:
    """Provider-neutral group record."""

    name: str = ""
    id: str = ""
    source: str = ""
    type: str = ""
    extra: Optional[dict[str, Any]] = None


# ═══════════════════════════════════════════════════════════════
# PAGINATION
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PageCursor:
    """Offset/size pair describing the next page to fetch. Never persisted."""

    offset: int = 0
    page_size: int = 100

    def next(self) -> "PageCursor":
        return PageCursor(offset=self.offset + self.page_size, page_size=self.page_size)


# ═══════════════════════════════════════════════════════════════
# BULK MEMBERSHIP RESULTS
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class MembershipOutcome:
    """Result of a single membership change."""

    user_id: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class MembershipReport:
    """Ordered per-user outcomes of a bulk membership operation."""

    group_id: str
    outcomes: tuple[MembershipOutcome, ...] = ()

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def succeeded_ids(self) -> list[str]:
        return [o.user_id for o in self.outcomes if o.ok]

    @property
    def failed_ids(self) -> list[str]:
        return [o.user_id for o in self.outcomes if not o.ok]
