"""
Data models for the exonerator system.

This module defines the immutable values that flow through a single
request: the canonicalized address, the validated date, the coverage
range reported by the backend, and the structured lookup result.
"""

from dataclasses import dataclass, field
import datetime
from typing import Optional

from .enums import AddressFamily, ExitFlag, InputStatus, LookupErrorCode


@dataclass(frozen=True)
class CanonicalAddress:
    """An IP address parameter after canonicalization."""

    status: InputStatus
    raw: Optional[str]  # Original input, echoed back on errors
    family: Optional[AddressFamily] = None
    # Dotted decimal, or 32 lower-case hex chars. The hex form is not itself
    # parseable input; `display` canonicalizes back to the same value.
    canonical: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.status == InputStatus.EMPTY

    @property
    def is_valid(self) -> bool:
        return self.status == InputStatus.VALID

    @property
    def expanded(self) -> Optional[str]:
        """Canonical form with colons re-inserted between IPv6 groups."""
        if not self.is_valid:
            return None
        if self.family == AddressFamily.IPV6:
            return ":".join(
                self.canonical[i:i + 4] for i in range(0, len(self.canonical), 4)
            )
        return self.canonical

    @property
    def display(self) -> Optional[str]:
        """Human-readable form; IPv6 addresses are wrapped in brackets."""
        if not self.is_valid:
            return None
        if self.family == AddressFamily.IPV6:
            return f"[{self.expanded}]"
        return self.canonical

    @property
    def query_value(self) -> Optional[str]:
        """Form used as the ``ip`` parameter in backend queries and links."""
        if not self.is_valid:
            return None
        if self.family == AddressFamily.IPV6:
            return self.display.replace(":", "%3A")
        return self.canonical

    @property
    def prefix_length(self) -> Optional[int]:
        """Network prefix used when describing addresses in the same network."""
        if not self.is_valid:
            return None
        return 48 if self.family == AddressFamily.IPV6 else 24


@dataclass(frozen=True)
class ValidatedDate:
    """A date parameter after validation against the current UTC date."""

    status: InputStatus
    as_requested: Optional[str]
    date: Optional[datetime.date] = None
    too_recent: bool = False  # Only meaningful when status is VALID

    @property
    def is_empty(self) -> bool:
        return self.status == InputStatus.EMPTY

    @property
    def is_valid(self) -> bool:
        return self.status == InputStatus.VALID

    @property
    def as_canonical(self) -> Optional[str]:
        """ISO ``YYYY-MM-DD`` form of a valid date."""
        return self.date.isoformat() if self.is_valid else None


@dataclass(frozen=True)
class CoverageRange:
    """Span of dates for which the backend holds consensus data."""

    first_date: ValidatedDate
    last_date: ValidatedDate

    @property
    def is_empty(self) -> bool:
        return self.first_date.is_empty or self.last_date.is_empty

    def contains(self, day: datetime.date) -> bool:
        """
        Check whether a day falls inside the covered span.

        Bounds that are not valid dates do not constrain the span.
        """
        if self.first_date.is_valid and day < self.first_date.date:
            return False
        if self.last_date.is_valid and day > self.last_date.date:
            return False
        return True


@dataclass(frozen=True)
class MatchRecord:
    """A single relay-consensus entry matching the queried address."""

    timestamp: str
    addresses: tuple[str, ...]
    fingerprint: str
    nickname: Optional[str] = None
    exit_flag: ExitFlag = ExitFlag.UNKNOWN


@dataclass(frozen=True)
class LookupFailure:
    """Why a lookup could not produce a usable result."""

    code: LookupErrorCode
    message: str
    http_status_code: Optional[int] = None


EMPTY_DATE = ValidatedDate(status=InputStatus.EMPTY, as_requested=None)


@dataclass(frozen=True)
class LookupResult:
    """
    Structured result of one backend round trip.

    When ``reachable`` is False, every other field except ``failure``
    is meaningless and must not be read.
    """

    reachable: bool
    coverage: CoverageRange = field(
        default_factory=lambda: CoverageRange(EMPTY_DATE, EMPTY_DATE)
    )
    has_relevant_data: bool = False
    matches: tuple[MatchRecord, ...] = ()
    related_addresses: tuple[str, ...] = ()
    failure: Optional[LookupFailure] = None

    @classmethod
    def unreachable(cls, failure: LookupFailure) -> "LookupResult":
        return cls(reachable=False, failure=failure)
