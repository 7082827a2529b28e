"""
Lookup gateway for the relay consensus database.

This module performs the single backend round trip of a request and maps
the JSON answer into a LookupResult. Transport failures, timeouts, HTTP
errors and undecodable bodies all yield ``reachable=False``; nothing is
retried or cached here.

Individual malformed fields are treated as absent rather than failing
the whole response.
"""

import time
from typing import Any, Optional

import httpx

from .audit_logger import AuditLogger
from .date_validator import DateValidator
from .enums import ExitFlag, InputStatus, LookupErrorCode
from .exceptions import ProtocolError, ValidationError
from .models import (
    EMPTY_DATE,
    CanonicalAddress,
    CoverageRange,
    LookupFailure,
    LookupResult,
    MatchRecord,
    ValidatedDate,
)


COMPONENT = "LookupGateway"


class LookupGateway:
    """
    Async client for the consensus lookup backend.

    Queries ``{base_url}/query.json`` with the canonical address and the
    requested date, and parses only the fields the resolver reads.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        simulation_mode: bool = False,
        logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the lookup gateway.

        Args:
            base_url: Base URL of the backend service
            timeout: Request timeout in seconds
            simulation_mode: If True, no real network requests are made
            logger: Optional audit logger for failed lookups
            transport: Optional httpx transport (used by tests)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._simulation_mode = simulation_mode
        self._logger = logger
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._date_parser = DateValidator()

    async def __aenter__(self) -> "LookupGateway":
        """Async context manager entry."""
        self._client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def query_url(self) -> str:
        return f"{self._base_url}/query.json"

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=True,
            transport=self._transport,
        )

    async def lookup(
        self,
        address: CanonicalAddress,
        date: ValidatedDate,
    ) -> LookupResult:
        """
        Look up relay activity for an address on a date.

        Args:
            address: A VALID canonical address
            date: A VALID date outside the too-recent window

        Returns:
            LookupResult; ``reachable`` is False on any failure

        Raises:
            ValidationError: If called with an address or date that must not be queried
        """
        if not address.is_valid or not date.is_valid or date.too_recent:
            raise ValidationError(
                code="lookup_precondition",
                message="Lookup requires a valid address and a valid, not too recent date",
                details={
                    "address_status": address.status.value,
                    "date_status": date.status.value,
                    "too_recent": date.too_recent,
                },
            )

        if self._simulation_mode:
            return self._create_simulation_result(date)

        if self._client is None:
            self._client = self._create_client()

        params = {"ip": address.display, "timestamp": date.as_canonical}
        start_time = time.perf_counter()

        try:
            response = await self._client.get(
                self.query_url,
                params=params,
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException:
            return self._failure(
                LookupErrorCode.TIMEOUT,
                f"Backend request timed out after {self._timeout}s",
                start_time,
            )
        except httpx.HTTPError as e:
            return self._failure(
                LookupErrorCode.NETWORK_ERROR,
                f"Connection error: {e}",
                start_time,
                error=e,
            )
        except Exception as e:
            return self._failure(
                LookupErrorCode.NETWORK_ERROR,
                f"Unexpected error: {e}",
                start_time,
                error=e,
            )

        if response.status_code != 200:
            return self._failure(
                LookupErrorCode.HTTP_ERROR,
                f"Unexpected HTTP status: {response.status_code}",
                start_time,
                http_status_code=response.status_code,
            )

        try:
            return self.parse_response(response.json())
        except (ValueError, RecursionError, ProtocolError) as e:
            return self._failure(
                LookupErrorCode.PARSE_ERROR,
                f"Failed to parse backend response: {e}",
                start_time,
                http_status_code=200,
            )

    def parse_response(self, json_data: Any) -> LookupResult:
        """
        Map a decoded backend response to a reachable LookupResult.

        Raises:
            ProtocolError: If the body is not a JSON object
        """
        if not isinstance(json_data, dict):
            raise ProtocolError(
                code=LookupErrorCode.PARSE_ERROR.value,
                message="Response is not a JSON object",
                details={"type": type(json_data).__name__},
            )

        coverage = CoverageRange(
            first_date=self._parse_coverage_date(json_data.get("first_date_in_database")),
            last_date=self._parse_coverage_date(json_data.get("last_date_in_database")),
        )

        matches = []
        raw_matches = json_data.get("matches")
        if isinstance(raw_matches, list):
            for raw_match in raw_matches:
                match = self._parse_match(raw_match)
                if match is not None:
                    matches.append(match)

        related: list[str] = []
        raw_related = json_data.get("nearby_addresses")
        if isinstance(raw_related, list):
            for value in raw_related:
                if isinstance(value, str) and value and value not in related:
                    related.append(value)

        return LookupResult(
            reachable=True,
            coverage=coverage,
            has_relevant_data=json_data.get("relevant_statuses") is True,
            matches=tuple(matches),
            related_addresses=tuple(related),
        )

    def _parse_coverage_date(self, value: Any) -> ValidatedDate:
        """Parse a coverage bound; absent or malformed bounds count as no data."""
        if not isinstance(value, str) or not value:
            return EMPTY_DATE
        try:
            parsed = self._date_parser.parse(value.strip())
        except ValidationError:
            return EMPTY_DATE
        return ValidatedDate(
            status=InputStatus.VALID,
            as_requested=value,
            date=parsed,
        )

    def _parse_match(self, raw_match: Any) -> Optional[MatchRecord]:
        """Parse one match entry, skipping entries without timestamp or fingerprint."""
        if not isinstance(raw_match, dict):
            return None

        timestamp = raw_match.get("timestamp")
        fingerprint = raw_match.get("fingerprint")
        if not isinstance(timestamp, str) or not isinstance(fingerprint, str):
            return None

        addresses = raw_match.get("addresses")
        if isinstance(addresses, list):
            addresses = tuple(a for a in addresses if isinstance(a, str))
        else:
            addresses = ()

        nickname = raw_match.get("nickname")
        if not isinstance(nickname, str) or not nickname:
            nickname = None

        exit_value = raw_match.get("exit")
        if exit_value is True:
            exit_flag = ExitFlag.YES
        elif exit_value is False:
            exit_flag = ExitFlag.NO
        else:
            exit_flag = ExitFlag.UNKNOWN

        return MatchRecord(
            timestamp=timestamp,
            addresses=addresses,
            fingerprint=fingerprint,
            nickname=nickname,
            exit_flag=exit_flag,
        )

    def _failure(
        self,
        code: LookupErrorCode,
        message: str,
        start_time: float,
        http_status_code: Optional[int] = None,
        error: Optional[BaseException] = None,
    ) -> LookupResult:
        if self._logger:
            self._logger.log_error(
                COMPONENT,
                "Backend query failed",
                error=error,
                request_url=self.query_url,
                response_status_code=http_status_code,
                additional_data={
                    "code": code.value,
                    "detail": message,
                    "elapsed_ms": round(self._elapsed_ms(start_time), 1),
                },
            )
        return LookupResult.unreachable(
            LookupFailure(code=code, message=message, http_status_code=http_status_code)
        )

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    def _create_simulation_result(self, date: ValidatedDate) -> LookupResult:
        """Create a simulated result for running without network access."""
        return LookupResult(
            reachable=True,
            coverage=CoverageRange(
                first_date=self._parse_coverage_date("2007-10-27"),
                last_date=date,
            ),
            has_relevant_data=True,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
