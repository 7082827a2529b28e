"""
Property-based tests for the lookup gateway.

HTTP traffic is served by httpx.MockTransport, so the tests exercise the
real client code path without network access.
"""

import asyncio
import datetime
import io

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from exonerator.address_canonicalizer import canonicalize
from exonerator.audit_logger import AuditLogger
from exonerator.date_validator import validate
from exonerator.enums import ExitFlag, LookupErrorCode, LogLevel
from exonerator.exceptions import ProtocolError, ValidationError
from exonerator.lookup_client import LookupGateway


TODAY = datetime.date(2024, 6, 15)
BASE_URL = "https://backend.example"

FULL_RESPONSE = {
    "first_date_in_database": "2007-10-27",
    "last_date_in_database": "2024-06-13",
    "relevant_statuses": True,
    "matches": [
        {
            "timestamp": "2020-01-01 12:00:00",
            "addresses": ["86.59.21.38"],
            "fingerprint": "9695DFC35FFEB861329B9F1AB04C46397020CE31",
            "nickname": "moria1",
            "exit": False,
        },
    ],
    "nearby_addresses": ["86.59.21.1", "86.59.21.2"],
}


def run_lookup(handler, ip="86.59.21.38", timestamp="2020-01-01", logger=None, **kwargs):
    """Run one lookup against a mock transport."""
    async def go():
        async with LookupGateway(
            BASE_URL,
            transport=httpx.MockTransport(handler),
            logger=logger,
            **kwargs,
        ) as gateway:
            return await gateway.lookup(canonicalize(ip), validate(timestamp, TODAY))

    return asyncio.run(go())


def json_handler(body, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)
    return handler


class TestGatewayRequestProperty:
    """
    Property-based tests for the outgoing request.
    """

    def test_request_parameters_ipv4(self) -> None:
        """The backend receives the canonical address and ISO date."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=FULL_RESPONSE)

        run_lookup(handler, ip="86.059.21.38", timestamp=" 2020-01-01 ")

        assert len(seen) == 1
        assert seen[0].url.path == "/query.json"
        assert seen[0].url.params["ip"] == "86.59.21.38"
        assert seen[0].url.params["timestamp"] == "2020-01-01"

    def test_request_parameters_ipv6(self) -> None:
        """IPv6 addresses are sent in bracketed, fully expanded form."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=FULL_RESPONSE)

        run_lookup(handler, ip="2001:db8::1")

        assert seen[0].url.params["ip"] == "[2001:0db8:0000:0000:0000:0000:0000:0001]"

    def test_precondition_violation_raises(self) -> None:
        """Invalid or too-recent inputs must never reach the backend."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=FULL_RESPONSE)

        for ip, timestamp in (("bad", "2020-01-01"), ("1.2.3.4", "bad"), ("1.2.3.4", "2024-06-14"), ("", "")):
            with pytest.raises(ValidationError) as exc_info:
                run_lookup(handler, ip=ip, timestamp=timestamp)
            assert exc_info.value.code == "lookup_precondition"

        assert calls == []


class TestGatewayResponseProperty:
    """
    Property-based tests for response mapping.
    """

    def test_full_response(self) -> None:
        result = run_lookup(json_handler(FULL_RESPONSE))

        assert result.reachable
        assert result.failure is None
        assert result.coverage.first_date.date == datetime.date(2007, 10, 27)
        assert result.coverage.last_date.date == datetime.date(2024, 6, 13)
        assert result.has_relevant_data
        assert len(result.matches) == 1
        match = result.matches[0]
        assert match.fingerprint == "9695DFC35FFEB861329B9F1AB04C46397020CE31"
        assert match.nickname == "moria1"
        assert match.addresses == ("86.59.21.38",)
        assert match.exit_flag == ExitFlag.NO
        assert result.related_addresses == ("86.59.21.1", "86.59.21.2")

    def test_empty_object(self) -> None:
        """An empty answer is reachable with no coverage and no data."""
        result = run_lookup(json_handler({}))

        assert result.reachable
        assert result.coverage.is_empty
        assert not result.has_relevant_data
        assert result.matches == ()
        assert result.related_addresses == ()

    def test_malformed_fields_are_treated_as_absent(self) -> None:
        body = {
            "first_date_in_database": "not a date",
            "last_date_in_database": 20240613,
            "relevant_statuses": "yes",
            "matches": [
                "junk",
                {"timestamp": "2020-01-01 00:00:00"},
                {"fingerprint": "ABC"},
                {"timestamp": "2020-01-01 01:00:00", "fingerprint": "ABC", "exit": "maybe", "addresses": "1.2.3.4"},
            ],
            "nearby_addresses": ["86.59.21.1", 5, "", "86.59.21.1"],
        }
        result = run_lookup(json_handler(body))

        assert result.reachable
        assert result.coverage.first_date.is_empty
        assert result.coverage.last_date.is_empty
        assert not result.has_relevant_data
        assert len(result.matches) == 1
        assert result.matches[0].exit_flag == ExitFlag.UNKNOWN
        assert result.matches[0].addresses == ()
        assert result.matches[0].nickname is None
        assert result.related_addresses == ("86.59.21.1",)

    @pytest.mark.parametrize("exit_value,expected", [
        (True, ExitFlag.YES),
        (False, ExitFlag.NO),
        (None, ExitFlag.UNKNOWN),
    ])
    def test_exit_flag_mapping(self, exit_value, expected) -> None:
        gateway = LookupGateway(BASE_URL)
        result = gateway.parse_response({
            "matches": [{"timestamp": "t", "fingerprint": "f", "exit": exit_value}],
        })

        assert result.matches[0].exit_flag == expected

    def test_non_object_body_raises_protocol_error(self) -> None:
        gateway = LookupGateway(BASE_URL)

        with pytest.raises(ProtocolError):
            gateway.parse_response(["not", "an", "object"])

    @given(body=st.recursive(
        st.none() | st.booleans() | st.integers() | st.text(max_size=20),
        lambda children: st.lists(children, max_size=4) | st.dictionaries(
            st.sampled_from([
                "first_date_in_database", "last_date_in_database",
                "relevant_statuses", "matches", "nearby_addresses",
                "timestamp", "fingerprint", "nickname", "exit", "addresses",
            ]),
            children,
            max_size=6,
        ),
        max_leaves=20,
    ))
    @settings(max_examples=300)
    def test_arbitrary_json_never_crashes(self, body) -> None:
        """
        Property 15: *For any* decoded JSON value, parsing SHALL either
        produce a reachable result or raise ProtocolError for non-objects.
        """
        gateway = LookupGateway(BASE_URL)

        if isinstance(body, dict):
            assert gateway.parse_response(body).reachable
        else:
            with pytest.raises(ProtocolError):
                gateway.parse_response(body)


class TestGatewayFailureProperty:
    """
    Property-based tests for failure mapping.
    """

    @given(status=st.integers(min_value=201, max_value=599))
    @settings(max_examples=50)
    def test_non_200_is_unreachable(self, status: int) -> None:
        """
        Property 16: *For any* status other than 200, the result SHALL be
        unreachable with an HTTP error code.
        """
        result = run_lookup(json_handler(FULL_RESPONSE, status_code=status))

        assert not result.reachable
        assert result.failure.code == LookupErrorCode.HTTP_ERROR
        assert result.failure.http_status_code == status

    def test_undecodable_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        result = run_lookup(handler)

        assert not result.reachable
        assert result.failure.code == LookupErrorCode.PARSE_ERROR

    def test_deeply_nested_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"[" * 200000)

        result = run_lookup(handler)

        assert not result.reachable
        assert result.failure.code == LookupErrorCode.PARSE_ERROR

    def test_non_object_json(self) -> None:
        result = run_lookup(json_handler([1, 2, 3]))

        assert not result.reachable
        assert result.failure.code == LookupErrorCode.PARSE_ERROR

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        result = run_lookup(handler)

        assert not result.reachable
        assert result.failure.code == LookupErrorCode.TIMEOUT

    def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = run_lookup(handler)

        assert not result.reachable
        assert result.failure.code == LookupErrorCode.NETWORK_ERROR

    def test_failures_are_logged(self) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)

        run_lookup(json_handler({}, status_code=503), logger=logger)

        errors = [e for e in logger.entries if e.level == LogLevel.ERROR]
        assert len(errors) == 1
        assert errors[0].component == "LookupGateway"
        assert errors[0].data["response_status_code"] == 503
        assert errors[0].data["code"] == "http_error"


class TestGatewaySimulationProperty:
    """
    Property-based tests for simulation mode.
    """

    @given(day=st.dates(min_value=datetime.date(2008, 1, 1), max_value=datetime.date(2024, 6, 13)))
    @settings(max_examples=50)
    def test_simulation_makes_no_requests(self, day: datetime.date) -> None:
        """
        Property 17: *For any* queryable date, a gateway in simulation
        mode SHALL answer without any HTTP request, with coverage that
        includes the requested date.
        """
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        result = run_lookup(handler, timestamp=day.isoformat(), simulation_mode=True)

        assert calls == []
        assert result.reachable
        assert result.coverage.contains(day)
        assert result.matches == ()
