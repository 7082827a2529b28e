"""
Date parameter validation module.

Parses strict ``YYYY-MM-DD`` calendar dates and flags dates that fall
inside the too-recent window, for which the backend has not yet
processed consensus data.

Surrounding whitespace is stripped before the strict format check, the
same way address parameters are handled. Only the stripped text must be
exactly ``YYYY-MM-DD``.
"""

import datetime
import re
from typing import Optional

from .enums import InputStatus
from .exceptions import ValidationError
from .models import ValidatedDate


DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

# Days before today that are still considered not yet available
TOO_RECENT_DAYS = 2


class DateValidator:
    """
    Validates date parameters against an explicitly supplied "today".

    The current date is never read from the system clock here, so
    validation is deterministic for a given input and ``now``.
    """

    def __init__(self, too_recent_days: int = TOO_RECENT_DAYS) -> None:
        self._too_recent_days = too_recent_days

    def validate(self, raw: Optional[str], now: datetime.date) -> ValidatedDate:
        """
        Validate a raw date parameter.

        Args:
            raw: The date string as supplied by the user, or None
            now: The current date in UTC

        Returns:
            ValidatedDate tagged EMPTY, INVALID or VALID
        """
        if raw is None or raw == "":
            return ValidatedDate(status=InputStatus.EMPTY, as_requested=raw)

        if not isinstance(raw, str):
            return ValidatedDate(status=InputStatus.INVALID, as_requested=str(raw))

        try:
            parsed = self.parse(raw.strip())
        except ValidationError:
            return ValidatedDate(status=InputStatus.INVALID, as_requested=raw)

        return ValidatedDate(
            status=InputStatus.VALID,
            as_requested=raw,
            date=parsed,
            too_recent=self.is_too_recent(parsed, now),
        )

    def parse(self, text: str) -> datetime.date:
        """
        Parse a strict ISO calendar date.

        Raises:
            ValidationError: If the text is not a real YYYY-MM-DD date
        """
        if not DATE_PATTERN.fullmatch(text):
            raise ValidationError(
                code="invalid_format",
                message="Date must be formatted as YYYY-MM-DD",
                details={"date": text},
            )
        year, month, day = (int(part) for part in text.split("-"))
        try:
            return datetime.date(year, month, day)
        except ValueError as e:
            raise ValidationError(
                code="invalid_date",
                message=f"Not a calendar date: {e}",
                details={"date": text},
            )

    def is_too_recent(self, day: datetime.date, now: datetime.date) -> bool:
        return day > self.latest_available(now)

    def latest_available(self, now: datetime.date) -> datetime.date:
        """Most recent date the backend is expected to have processed."""
        return now - datetime.timedelta(days=self._too_recent_days)


_default_validator = DateValidator()


def validate(raw: Optional[str], now: datetime.date) -> ValidatedDate:
    """Validate a raw date parameter with the default validator."""
    return _default_validator.validate(raw, now)


def latest_available(now: datetime.date) -> datetime.date:
    """Most recent date the backend is expected to have processed."""
    return _default_validator.latest_available(now)
