"""
Property-based tests for the request pipeline.

Uses a recording fake gateway to verify that the backend is consulted
at most once, only for queryable input, and that unexpected faults are
reported as a general error.
"""

import asyncio
import datetime
import io
from typing import Optional

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from exonerator.audit_logger import AuditLogger
from exonerator.config import create_default_config
from exonerator.enums import LogLevel, OutcomeKind
from exonerator.models import CoverageRange, LookupResult
from exonerator.date_validator import validate
from exonerator.lookup_client import LookupGateway
from exonerator.service import GENERAL_ERROR, ExoneratorService, RequestResult


TODAY = datetime.date(2024, 6, 15)


class FakeGateway:
    """Gateway double that records calls and returns a fixed result."""

    def __init__(self, result: Optional[LookupResult] = None, error: Optional[Exception] = None):
        self.calls = []
        self.closed = False
        self._result = result or LookupResult(
            reachable=True,
            coverage=CoverageRange(
                first_date=validate("2007-10-27", TODAY),
                last_date=validate("2024-06-13", TODAY),
            ),
            has_relevant_data=True,
        )
        self._error = error

    async def lookup(self, address, date):
        self.calls.append((address, date))
        if self._error is not None:
            raise self._error
        return self._result

    async def close(self) -> None:
        self.closed = True


def handle(gateway, ip, timestamp, lang=None, logger=None) -> RequestResult:
    async def go():
        async with ExoneratorService(
            config=create_default_config(),
            gateway=gateway,
            logger=logger,
        ) as service:
            return await service.handle(ip, timestamp, lang=lang, today=TODAY)

    return asyncio.run(go())


class TestLookupGatingProperty:
    """
    Property-based tests for when the backend is consulted.
    """

    def test_queryable_input_looks_up_once(self) -> None:
        gateway = FakeGateway()
        result = handle(gateway, "86.59.21.38", "2020-01-01")

        assert len(gateway.calls) == 1
        assert result.outcome.kind == OutcomeKind.NEGATIVE_NO_MATCH
        assert result.address == "86.59.21.38"
        assert result.date == "2020-01-01"
        assert gateway.closed

    def test_non_queryable_input_never_looks_up(self) -> None:
        cases = {
            ("", ""): OutcomeKind.START_PAGE,
            ("", "2020-01-01"): OutcomeKind.MISSING_ADDRESS,
            ("1.2.3.4", ""): OutcomeKind.MISSING_DATE,
            ("1.2.3.999", "2020-01-01"): OutcomeKind.INVALID_ADDRESS,
            ("1.2.3.4", "2020-13-01"): OutcomeKind.INVALID_DATE,
            ("1.2.3.4", "2024-06-14"): OutcomeKind.DATE_TOO_RECENT,
        }
        for (ip, timestamp), kind in cases.items():
            gateway = FakeGateway()
            result = handle(gateway, ip, timestamp)
            assert result.outcome.kind == kind, (ip, timestamp)
            assert gateway.calls == [], (ip, timestamp)

    @given(
        ip=st.one_of(st.none(), st.text(max_size=50)),
        timestamp=st.one_of(st.none(), st.text(max_size=20)),
    )
    @settings(max_examples=200)
    def test_at_most_one_lookup(self, ip, timestamp) -> None:
        """
        Property 18: *For any* request, the gateway SHALL be called at
        most once, and only when both inputs are queryable.
        """
        gateway = FakeGateway()
        result = handle(gateway, ip, timestamp)

        assert len(gateway.calls) <= 1
        assert not result.failed
        if gateway.calls:
            address, date = gateway.calls[0]
            assert address.is_valid
            assert date.is_valid and not date.too_recent

    def test_ipv6_link_value(self) -> None:
        result = handle(FakeGateway(), "[::1]", "2020-01-01")

        assert result.address == "[0000%3A0000%3A0000%3A0000%3A0000%3A0000%3A0000%3A0001]"


class TestGeneralErrorProperty:
    """
    Property-based tests for the fault barrier.
    """

    def test_gateway_fault_becomes_general_error(self) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="text", output_stream=stream)
        gateway = FakeGateway(error=RuntimeError("boom"))

        result = handle(gateway, "86.59.21.38", "2020-01-01", logger=logger)

        assert result.failed
        assert result.error == GENERAL_ERROR
        assert result.outcome is None
        assert result.address is None
        errors = [e for e in logger.entries if e.level == LogLevel.ERROR]
        assert errors[0].data["error_type"] == "RuntimeError"

    def test_undecodable_backend_body_is_not_a_general_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"[" * 200000)

        gateway = LookupGateway(
            "https://backend.example",
            transport=httpx.MockTransport(handler),
        )
        result = handle(gateway, "86.59.21.38", "2020-01-01")

        assert not result.failed
        assert result.outcome.kind == OutcomeKind.BACKEND_UNREACHABLE

    def test_successful_requests_are_logged(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=io.StringIO())

        handle(FakeGateway(), "86.59.21.38", "2020-01-01", logger=logger)

        infos = [e for e in logger.entries if e.level == LogLevel.INFO]
        assert infos[-1].data["outcome"] == "negative_no_match"
        assert infos[-1].data["looked_up"] is True


class TestLanguageSelectionProperty:
    """
    Property-based tests for language selection.
    """

    @given(lang=st.one_of(st.none(), st.text(max_size=5)))
    @settings(max_examples=50)
    def test_language_is_always_supported(self, lang) -> None:
        """
        Property 19: *For any* requested language, the result language
        SHALL be one of the configured languages.
        """
        result = handle(FakeGateway(), "", "", lang=lang)

        assert result.language in ("de", "en")
        if lang in ("de", "en"):
            assert result.language == lang
        else:
            assert result.language == "en"
