"""
Request pipeline for the exonerator system.

Coordinates one request end to end:
- language selection against the configured languages
- address canonicalization and date validation
- at most one backend lookup, only for valid, queryable inputs
- outcome resolution

Any unexpected fault inside the pipeline is logged and reported as a
general error, without passing diagnostic detail to the caller.
"""

import datetime
from dataclasses import dataclass
from typing import Optional

from .address_canonicalizer import AddressCanonicalizer
from .audit_logger import AuditLogger
from .config import SystemConfig
from .date_validator import DateValidator
from .lookup_client import LookupGateway
from .models import CanonicalAddress, LookupResult, ValidatedDate
from .outcome_resolver import Outcome, OutcomeResolver


COMPONENT = "ExoneratorService"

GENERAL_ERROR = "general_error"


@dataclass(frozen=True)
class RequestResult:
    """
    Everything the rendering layer needs for one request.

    ``address`` and ``date`` are the canonical inputs used to rebuild
    permanent links; they are None when the input was not valid.
    ``outcome`` is None only when ``error`` is set.
    """

    outcome: Optional[Outcome]
    language: str
    address: Optional[str] = None
    date: Optional[str] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def today_utc() -> datetime.date:
    """Current calendar date in UTC."""
    return datetime.datetime.now(datetime.timezone.utc).date()


class ExoneratorService:
    """
    Runs the parse, validate, lookup and resolve pipeline.

    The service holds only read-only configuration and stateless
    components; concurrent requests share no request-scoped state.
    """

    async def __aenter__(self) -> "ExoneratorService":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self._gateway.close()

    def __init__(
        self,
        config: SystemConfig,
        gateway: Optional[LookupGateway] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            config: System configuration
            gateway: Optional lookup gateway; built from config if omitted
            logger: Optional audit logger
        """
        self._config = config
        self._logger = logger
        self._canonicalizer = AddressCanonicalizer()
        self._date_validator = DateValidator()
        self._resolver = OutcomeResolver()
        self._gateway = gateway or LookupGateway(
            base_url=config.backend.base_url,
            timeout=config.backend.timeout_seconds,
            simulation_mode=config.simulation_mode,
            logger=logger,
        )

    @property
    def config(self) -> SystemConfig:
        return self._config

    async def handle(
        self,
        ip: Optional[str],
        timestamp: Optional[str],
        lang: Optional[str] = None,
        today: Optional[datetime.date] = None,
    ) -> RequestResult:
        """
        Handle one lookup request.

        Args:
            ip: Raw address parameter
            timestamp: Raw date parameter
            lang: Requested language tag
            today: Current UTC date; read from the clock if omitted

        Returns:
            RequestResult with the outcome, or a general error
        """
        language = self._config.select_language(lang)
        if today is None:
            today = today_utc()

        try:
            address = self._canonicalizer.canonicalize(ip)
            date = self._date_validator.validate(timestamp, today)
            lookup = await self._lookup_if_queryable(address, date)
            outcome = self._resolver.resolve(address, date, lookup, today)
        except Exception as e:
            if self._logger:
                self._logger.log_error(
                    COMPONENT,
                    "Request processing failed",
                    error=e,
                    additional_data={"ip": ip, "timestamp": timestamp},
                )
            return RequestResult(outcome=None, language=language, error=GENERAL_ERROR)

        if self._logger:
            self._logger.info(
                COMPONENT,
                f"Resolved request: {outcome.kind.value}",
                {
                    "address_status": address.status.value,
                    "date_status": date.status.value,
                    "looked_up": lookup is not None,
                    "outcome": outcome.kind.value,
                },
            )

        return RequestResult(
            outcome=outcome,
            language=language,
            address=address.query_value,
            date=date.as_canonical,
        )

    async def _lookup_if_queryable(
        self,
        address: CanonicalAddress,
        date: ValidatedDate,
    ) -> Optional[LookupResult]:
        if address.is_valid and date.is_valid and not date.too_recent:
            return await self._gateway.lookup(address, date)
        return None
