"""
Enumeration types for the exonerator system.

These enums provide type-safe constants for input states, address families,
outcome states and error codes throughout the system.
"""

from enum import Enum


class InputStatus(Enum):
    """Parse state of a user-supplied parameter."""

    EMPTY = "empty"
    INVALID = "invalid"
    VALID = "valid"


class AddressFamily(Enum):
    """IP address family of a canonical address."""

    IPV4 = "ipv4"
    IPV6 = "ipv6"


class ExitFlag(Enum):
    """Whether a matched relay permitted exiting to the queried address."""

    UNKNOWN = "unknown"
    YES = "yes"
    NO = "no"


class OutcomeKind(Enum):
    """The closed set of outcome states produced per request."""

    START_PAGE = "start_page"
    MISSING_ADDRESS = "missing_address"
    MISSING_DATE = "missing_date"
    INVALID_ADDRESS = "invalid_address"
    INVALID_DATE = "invalid_date"
    DATE_TOO_RECENT = "date_too_recent"
    BACKEND_UNREACHABLE = "backend_unreachable"
    NO_DATA_IN_DATABASE = "no_data_in_database"
    DATE_OUT_OF_RANGE = "date_out_of_range"
    NO_CONSENSUS_FOR_INTERVAL = "no_consensus_for_interval"
    POSITIVE_MATCH = "positive_match"
    NEGATIVE_SAME_NETWORK = "negative_same_network"
    NEGATIVE_NO_MATCH = "negative_no_match"


class LookupErrorCode(Enum):
    """Error codes for lookup gateway failures."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
