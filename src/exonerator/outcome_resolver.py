"""
Outcome resolver for exonerator requests.

Combines the canonicalized address, the validated date and the optional
lookup result into exactly one outcome state. Rules are evaluated top to
bottom and the first match wins:

 1. no address, no date            -> StartPage
 2. no address                     -> MissingAddress
 3. no date                        -> MissingDate
 4. unparseable address            -> InvalidAddress
 5. unparseable date               -> InvalidDate
 6. date inside too-recent window  -> DateTooRecent
 7. no lookup or unreachable       -> BackendUnreachable
 8. coverage bound missing         -> NoDataInDatabase
 9. date outside coverage          -> DateOutOfRange
10. no relevant consensuses        -> NoConsensusForInterval
11. matches                        -> PositiveMatch
    related addresses              -> NegativeSameNetwork
    otherwise                      -> NegativeNoMatch

Resolution is pure: no I/O, no clock access, no mutation of inputs.
"""

import datetime
from dataclasses import dataclass
from typing import ClassVar, Optional

from .date_validator import latest_available
from .enums import OutcomeKind
from .models import (
    CanonicalAddress,
    LookupResult,
    MatchRecord,
    ValidatedDate,
)


ELLIPSIS_MARKER = "[...]"
MAX_ADDRESS_ECHO = 40
MAX_DATE_ECHO = 20


def truncate_echo(value: Optional[str], limit: int) -> str:
    """Cap an untrusted string for display, marking the cut with [...]."""
    if value is None:
        return ""
    if len(value) > limit:
        return value[:limit] + ELLIPSIS_MARKER
    return value


@dataclass(frozen=True)
class Outcome:
    """Base class of all outcome states."""

    kind: ClassVar[OutcomeKind]


@dataclass(frozen=True)
class StartPage(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.START_PAGE


@dataclass(frozen=True)
class MissingAddress(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.MISSING_ADDRESS


@dataclass(frozen=True)
class MissingDate(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.MISSING_DATE


@dataclass(frozen=True)
class InvalidAddress(Outcome):
    """Carries the raw address parameter, truncated to 40 characters."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.INVALID_ADDRESS
    echo: str


@dataclass(frozen=True)
class InvalidDate(Outcome):
    """Carries the raw date parameter, truncated to 20 characters."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.INVALID_DATE
    echo: str


@dataclass(frozen=True)
class DateTooRecent(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.DATE_TOO_RECENT


@dataclass(frozen=True)
class BackendUnreachable(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.BACKEND_UNREACHABLE


@dataclass(frozen=True)
class NoDataInDatabase(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.NO_DATA_IN_DATABASE


@dataclass(frozen=True)
class DateOutOfRange(Outcome):
    """The requested date and the displayable coverage bounds, ISO formatted."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.DATE_OUT_OF_RANGE
    requested: str
    first_date: str
    last_date: str


@dataclass(frozen=True)
class NoConsensusForInterval(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.NO_CONSENSUS_FOR_INTERVAL
    address: str
    date: str


@dataclass(frozen=True)
class PositiveMatch(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.POSITIVE_MATCH
    address: str
    date: str
    matches: tuple[MatchRecord, ...]


@dataclass(frozen=True)
class RelatedAddress:
    """An address in the same network block, ready for a re-query link."""

    address: str  # Without brackets
    display: str  # IPv6 wrapped in brackets
    query_value: str  # Value for the ``ip`` link parameter


@dataclass(frozen=True)
class NegativeSameNetwork(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.NEGATIVE_SAME_NETWORK
    address: str
    date: str
    prefix_length: int
    related: tuple[RelatedAddress, ...]


@dataclass(frozen=True)
class NegativeNoMatch(Outcome):
    kind: ClassVar[OutcomeKind] = OutcomeKind.NEGATIVE_NO_MATCH
    address: str
    date: str


OUTCOME_TYPES: dict[OutcomeKind, type] = {
    cls.kind: cls
    for cls in (
        StartPage,
        MissingAddress,
        MissingDate,
        InvalidAddress,
        InvalidDate,
        DateTooRecent,
        BackendUnreachable,
        NoDataInDatabase,
        DateOutOfRange,
        NoConsensusForInterval,
        PositiveMatch,
        NegativeSameNetwork,
        NegativeNoMatch,
    )
}


def related_address(value: str) -> RelatedAddress:
    """Prepare a backend-supplied related address for display and linking."""
    if ":" in value:
        bare = value.replace("[", "").replace("]", "")
        return RelatedAddress(
            address=bare,
            display=f"[{bare}]",
            query_value="[" + bare.replace(":", "%3A") + "]",
        )
    return RelatedAddress(address=value, display=value, query_value=value)


class OutcomeResolver:
    """
    Maps request inputs onto exactly one outcome state.

    The resolver never reads the lookup fields when the lookup is absent
    or unreachable, and never calls the gateway itself.
    """

    def resolve(
        self,
        address: CanonicalAddress,
        date: ValidatedDate,
        lookup: Optional[LookupResult],
        today: datetime.date,
    ) -> Outcome:
        """
        Resolve the outcome of a request.

        Args:
            address: Canonicalized address parameter
            date: Validated date parameter
            lookup: Lookup result, or None if the gateway was not invoked
            today: Current date in UTC, used to cap the displayed coverage

        Returns:
            The single outcome state for this request
        """
        if address.is_empty and date.is_empty:
            return StartPage()
        if address.is_empty:
            return MissingAddress()
        if date.is_empty:
            return MissingDate()

        if not address.is_valid:
            return InvalidAddress(echo=truncate_echo(address.raw, MAX_ADDRESS_ECHO))
        if not date.is_valid:
            return InvalidDate(echo=truncate_echo(date.as_requested, MAX_DATE_ECHO))
        if date.too_recent:
            return DateTooRecent()

        if lookup is None or not lookup.reachable:
            return BackendUnreachable()

        coverage = lookup.coverage
        if coverage.is_empty:
            return NoDataInDatabase()

        if not coverage.contains(date.date):
            return self._out_of_range(date, lookup, today)

        shown_address = address.display
        shown_date = date.as_canonical

        if not lookup.has_relevant_data:
            return NoConsensusForInterval(address=shown_address, date=shown_date)

        if lookup.matches:
            return PositiveMatch(
                address=shown_address,
                date=shown_date,
                matches=tuple(lookup.matches),
            )

        if lookup.related_addresses:
            return NegativeSameNetwork(
                address=shown_address,
                date=shown_date,
                prefix_length=address.prefix_length,
                related=tuple(related_address(a) for a in lookup.related_addresses),
            )

        return NegativeNoMatch(address=shown_address, date=shown_date)

    def _out_of_range(
        self,
        date: ValidatedDate,
        lookup: LookupResult,
        today: datetime.date,
    ) -> DateOutOfRange:
        coverage = lookup.coverage
        cap = latest_available(today)
        last = coverage.last_date.date if coverage.last_date.is_valid else cap
        first = coverage.first_date.date if coverage.first_date.is_valid else None
        return DateOutOfRange(
            requested=date.as_canonical,
            first_date=first.isoformat() if first else "",
            last_date=min(last, cap).isoformat(),
        )


_default_resolver = OutcomeResolver()


def resolve(
    address: CanonicalAddress,
    date: ValidatedDate,
    lookup: Optional[LookupResult],
    today: datetime.date,
) -> Outcome:
    """Resolve the outcome of a request with the default resolver."""
    return _default_resolver.resolve(address, date, lookup, today)
