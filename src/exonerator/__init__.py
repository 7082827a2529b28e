"""
ExoneraTor - find out whether an IP address was a Tor relay on a given date.

This package validates an address and a date, queries a relay consensus
database once, and classifies the answer into exactly one outcome state
that can be rendered as localized text or JSON.
"""

__version__ = "0.1.0"
__author__ = "ExoneraTor Team"

from exonerator.exceptions import (
    ExoneratorError,
    ValidationError,
    ProtocolError,
    ConfigurationError,
)
from exonerator.enums import (
    InputStatus,
    AddressFamily,
    ExitFlag,
    OutcomeKind,
    LookupErrorCode,
    LogLevel,
)
from exonerator.models import (
    CanonicalAddress,
    ValidatedDate,
    CoverageRange,
    MatchRecord,
    LookupFailure,
    LookupResult,
)
from exonerator.address_canonicalizer import (
    AddressCanonicalizer,
    canonicalize,
)
from exonerator.date_validator import (
    DateValidator,
    validate,
    latest_available,
)
from exonerator.config import (
    BackendConfig,
    LoggingConfig,
    SystemConfig,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
    apply_environment,
)
from exonerator.lookup_client import (
    LookupGateway,
)
from exonerator.outcome_resolver import (
    Outcome,
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
    RelatedAddress,
    OutcomeResolver,
    resolve,
)
from exonerator.audit_logger import (
    AuditLogger,
    LogEntry,
)
from exonerator.i18n import (
    get_message,
    get_all_message_keys,
    has_translation,
    get_missing_translations,
    validate_translations,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from exonerator.service import (
    ExoneratorService,
    RequestResult,
)
from exonerator.renderer import (
    render_text,
    render_json,
)
from exonerator.cli import (
    main as cli_main,
    create_parser,
)
from exonerator.self_test import (
    SelfTest,
    SelfTestResult,
    EndpointTestResult,
    ConfigValidationResult,
    run_self_test,
)

__all__ = [
    # Exceptions
    "ExoneratorError",
    "ValidationError",
    "ProtocolError",
    "ConfigurationError",
    # Enums
    "InputStatus",
    "AddressFamily",
    "ExitFlag",
    "OutcomeKind",
    "LookupErrorCode",
    "LogLevel",
    # Models
    "CanonicalAddress",
    "ValidatedDate",
    "CoverageRange",
    "MatchRecord",
    "LookupFailure",
    "LookupResult",
    # Address Canonicalizer
    "AddressCanonicalizer",
    "canonicalize",
    # Date Validator
    "DateValidator",
    "validate",
    "latest_available",
    # Configuration
    "BackendConfig",
    "LoggingConfig",
    "SystemConfig",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
    "apply_environment",
    # Lookup Gateway
    "LookupGateway",
    # Outcome Resolver
    "Outcome",
    "StartPage",
    "MissingAddress",
    "MissingDate",
    "InvalidAddress",
    "InvalidDate",
    "DateTooRecent",
    "BackendUnreachable",
    "NoDataInDatabase",
    "DateOutOfRange",
    "NoConsensusForInterval",
    "PositiveMatch",
    "NegativeSameNetwork",
    "NegativeNoMatch",
    "RelatedAddress",
    "OutcomeResolver",
    "resolve",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # I18n
    "get_message",
    "get_all_message_keys",
    "has_translation",
    "get_missing_translations",
    "validate_translations",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # Service
    "ExoneratorService",
    "RequestResult",
    # Rendering
    "render_text",
    "render_json",
    # CLI
    "cli_main",
    "create_parser",
    # Self-Test
    "SelfTest",
    "SelfTestResult",
    "EndpointTestResult",
    "ConfigValidationResult",
    "run_self_test",
]
