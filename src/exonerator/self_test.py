"""
Startup self-test for the exonerator system.

Validates the configuration and probes the lookup backend once, so that
a misconfigured backend URL is reported before the first user request.
"""

import time
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import httpx

from .config import SystemConfig
from .i18n import get_message


@dataclass
class EndpointTestResult:
    """Result of probing the backend endpoint."""

    endpoint: str
    success: bool
    response_time_ms: float
    error: Optional[str] = None
    http_status_code: Optional[int] = None


@dataclass
class ConfigValidationResult:
    """Result of configuration validation."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class SelfTestResult:
    """Complete self-test result."""

    success: bool
    config_validation: ConfigValidationResult
    endpoint_result: Optional[EndpointTestResult] = None
    total_duration_ms: float = 0.0


class SelfTest:
    """
    Startup self-test.

    Performs:
    1. Configuration validation
    2. One connectivity probe against the backend query endpoint,
       skipped in simulation mode
    """

    # Timeout for the connectivity probe (shorter than normal lookups)
    CONNECTIVITY_TIMEOUT = 5.0

    def __init__(
        self,
        config: SystemConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the self-test.

        Args:
            config: System configuration to validate and test
            transport: Optional httpx transport (used by tests)
        """
        self._config = config
        self._transport = transport

    async def run(self) -> SelfTestResult:
        """
        Run the complete self-test.

        Returns:
            SelfTestResult with validation and connectivity results
        """
        start_time = time.perf_counter()

        config_result = self.validate_config()

        # Don't probe with an invalid configuration
        if not config_result.valid or self._config.simulation_mode:
            return SelfTestResult(
                success=config_result.valid,
                config_validation=config_result,
                total_duration_ms=self._elapsed_ms(start_time),
            )

        endpoint_result = await self._test_backend()

        return SelfTestResult(
            success=endpoint_result.success,
            config_validation=config_result,
            endpoint_result=endpoint_result,
            total_duration_ms=self._elapsed_ms(start_time),
        )

    def validate_config(self) -> ConfigValidationResult:
        """
        Validate the system configuration.

        Checks:
        - The backend URL is an http(s) URL with a host
        - The timeout is positive
        - The default language is one of the configured languages
        - The permanent link base is set

        Returns:
            ConfigValidationResult with validation status
        """
        errors: list[str] = []
        warnings: list[str] = []

        backend_url = self._config.backend.base_url
        parsed = urlparse(backend_url)
        if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
            errors.append(f"Backend URL is not an http(s) URL: {backend_url}")
        elif parsed.scheme.lower() != "https":
            warnings.append(f"Backend URL does not use HTTPS: {backend_url}")

        if self._config.backend.timeout_seconds <= 0:
            errors.append("Backend timeout must be positive")

        if not self._config.languages:
            errors.append("No languages configured")
        elif self._config.default_language not in self._config.languages:
            errors.append(
                f"Default language '{self._config.default_language}' "
                f"is not one of: {', '.join(sorted(self._config.languages))}"
            )

        if not self._config.permalink_base:
            warnings.append("No permanent link base configured")

        return ConfigValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    async def _test_backend(self) -> EndpointTestResult:
        """
        Probe the backend query endpoint.

        Any response below 500 counts as reachable; the probe sends no
        query parameters, so a 4xx answer is expected.
        """
        endpoint = f"{self._config.backend.base_url.rstrip('/')}/query.json"
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.CONNECTIVITY_TIMEOUT),
                transport=self._transport,
            ) as client:
                response = await client.get(endpoint)
        except httpx.TimeoutException:
            return EndpointTestResult(
                endpoint=endpoint,
                success=False,
                response_time_ms=self._elapsed_ms(start_time),
                error=f"Connection timed out after {self.CONNECTIVITY_TIMEOUT}s",
            )
        except httpx.HTTPError as e:
            return EndpointTestResult(
                endpoint=endpoint,
                success=False,
                response_time_ms=self._elapsed_ms(start_time),
                error=f"Connection error: {e}",
            )

        success = response.status_code < 500
        return EndpointTestResult(
            endpoint=endpoint,
            success=success,
            response_time_ms=self._elapsed_ms(start_time),
            http_status_code=response.status_code,
            error=None if success else f"Server error: {response.status_code}",
        )

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    def print_results(self, result: SelfTestResult, language: str = "en") -> None:
        """
        Print self-test results to stdout.

        Args:
            result: Self-test result to print
            language: Output language
        """
        print(get_message("selftest.header", language))
        print("=" * 60)

        print(f"\n{get_message('selftest.config_validation', language)}")
        if result.config_validation.valid:
            print(f"  ✓ {get_message('selftest.config_valid', language)}")
        else:
            print(f"  ✗ {get_message('selftest.config_invalid', language)}")
            for error in result.config_validation.errors:
                print(f"    - {error}")

        if result.config_validation.warnings:
            print(f"\n  {get_message('selftest.warnings', language)}")
            for warning in result.config_validation.warnings:
                print(f"    - {warning}")

        print(f"\n{get_message('selftest.connectivity', language)}")
        endpoint_result = result.endpoint_result
        if endpoint_result is None:
            print(f"  - {get_message('selftest.skipped', language)}")
        else:
            status = "✓" if endpoint_result.success else "✗"
            print(
                f"  {status} {endpoint_result.endpoint} "
                f"({endpoint_result.response_time_ms:.0f}ms)"
            )
            if endpoint_result.error:
                print(f"      Error: {endpoint_result.error}")

        print(f"\n{'-' * 60}")
        if result.success:
            print(f"✓ {get_message('selftest.success', language)}")
        else:
            print(f"✗ {get_message('selftest.failed', language)}")

        print(f"  {get_message('selftest.duration', language)}: {result.total_duration_ms:.0f}ms")


async def run_self_test(
    config: SystemConfig,
    print_output: bool = True,
    language: str = "en",
) -> SelfTestResult:
    """
    Convenience function to run self-test.

    Args:
        config: System configuration to test
        print_output: Whether to print results to stdout
        language: Output language

    Returns:
        SelfTestResult with test outcomes
    """
    self_test = SelfTest(config)
    result = await self_test.run()

    if print_output:
        self_test.print_results(result, language)

    return result
