"""
Exception classes for the exonerator system.

All exceptions inherit from ExoneratorError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class ExoneratorError(Exception):
    """Base exception for all exonerator errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ExoneratorError):
    """Raised when an address or date cannot be parsed, or a precondition is violated."""

    pass


class ProtocolError(ExoneratorError):
    """Raised when the lookup backend returns a response that cannot be decoded."""

    pass


class ConfigurationError(ExoneratorError):
    """Raised when a configuration file is malformed."""

    pass
