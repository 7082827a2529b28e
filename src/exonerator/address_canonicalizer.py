"""
IP address parsing and canonicalization module.

Turns an untrusted address parameter into a tagged CanonicalAddress:
EMPTY when nothing was supplied, INVALID when the input cannot be parsed,
or VALID with a canonical form that re-canonicalizes to itself.

IPv4 addresses are rendered in dotted decimal without leading zeros.
IPv6 addresses are expanded to 32 lower-case hex characters with no
colons and no brackets.
"""

import re
from typing import Optional

from .enums import AddressFamily, InputStatus
from .exceptions import ValidationError
from .models import CanonicalAddress


_OCTET = r"([01]?[0-9][0-9]?|2[0-4][0-9]|25[0-5])"

IPV4_PATTERN = re.compile(r"\.".join([_OCTET] * 4))

# Optional brackets around 3-39 hex digits and colons
IPV6_PATTERN = re.compile(r"\[?[0-9a-fA-F:]{3,39}\]?")

HEX_FIELD_PATTERN = re.compile(r"[0-9a-fA-F]{1,4}")

IPV6_GROUPS = 8
GROUP_WIDTH = 4


class AddressCanonicalizer:
    """
    Parses address parameters into canonical form.

    The IPv6 path runs as a small pipeline of explicit steps:
    bracket stripping, field splitting, per-field validation,
    gap expansion, and joining. Each step raises ValidationError
    on malformed input; canonicalize() converts that into INVALID.
    """

    def canonicalize(self, raw: Optional[str]) -> CanonicalAddress:
        """
        Canonicalize a raw address parameter.

        Args:
            raw: The address string as supplied by the user, or None

        Returns:
            CanonicalAddress tagged EMPTY, INVALID or VALID
        """
        if raw is None or raw == "":
            return CanonicalAddress(status=InputStatus.EMPTY, raw=raw)

        if not isinstance(raw, str):
            return CanonicalAddress(status=InputStatus.INVALID, raw=str(raw))

        text = raw.strip()

        try:
            if IPV4_PATTERN.fullmatch(text):
                return CanonicalAddress(
                    status=InputStatus.VALID,
                    raw=raw,
                    family=AddressFamily.IPV4,
                    canonical=self.normalize_ipv4(text),
                )
            if IPV6_PATTERN.fullmatch(text):
                return CanonicalAddress(
                    status=InputStatus.VALID,
                    raw=raw,
                    family=AddressFamily.IPV6,
                    canonical=self.normalize_ipv6(text),
                )
        except ValidationError:
            pass

        return CanonicalAddress(status=InputStatus.INVALID, raw=raw)

    def normalize_ipv4(self, text: str) -> str:
        """Render each octet without leading zeros."""
        return ".".join(str(int(octet)) for octet in text.split("."))

    def normalize_ipv6(self, text: str) -> str:
        """
        Expand an IPv6 address to 32 lower-case hex characters.

        Raises:
            ValidationError: If any step of the expansion fails
        """
        body = self._strip_brackets(text)
        fields = self._split_fields(body)
        for value in fields:
            self._check_field(value, text)
        groups = self._expand_gap(fields, text)
        return "".join(groups).lower()

    def _strip_brackets(self, text: str) -> str:
        if text.startswith("[") and text.endswith("]"):
            return text[1:-1]
        if "[" in text or "]" in text:
            raise ValidationError(
                code="unbalanced_brackets",
                message="Address has unbalanced brackets",
                details={"address": text},
            )
        return text

    def _split_fields(self, body: str) -> list[str]:
        """
        Split on colons, keeping empty fields.

        A leading or trailing ``::`` contributes a single empty field
        rather than two, so ``::1`` splits as ``["", "1"]``.
        """
        start = 1 if body.startswith("::") else 0
        end = len(body) - (1 if body.endswith("::") else 0)
        if start == 0 and body.startswith(":"):
            raise ValidationError(
                code="stray_colon",
                message="Address starts with a single colon",
                details={"address": body},
            )
        if end == len(body) and body.endswith(":"):
            raise ValidationError(
                code="stray_colon",
                message="Address ends with a single colon",
                details={"address": body},
            )
        return body[start:end].split(":")

    def _check_field(self, value: str, text: str) -> None:
        if value and not HEX_FIELD_PATTERN.fullmatch(value):
            raise ValidationError(
                code="invalid_field",
                message=f"Field '{value}' is not 1-4 hex digits",
                details={"address": text, "field": value},
            )

    def _expand_gap(self, fields: list[str], text: str) -> list[str]:
        """
        Pad fields to four digits and fill the ``::`` gap with zero groups.

        The gap stands for at least one group.
        """
        gaps = fields.count("")
        if gaps > 1:
            raise ValidationError(
                code="multiple_gaps",
                message="Address contains more than one '::'",
                details={"address": text},
            )

        groups = [value.rjust(GROUP_WIDTH, "0") for value in fields if value]

        if gaps == 0:
            if len(groups) != IPV6_GROUPS:
                raise ValidationError(
                    code="wrong_group_count",
                    message=f"Expected {IPV6_GROUPS} groups, got {len(groups)}",
                    details={"address": text},
                )
            return groups

        missing = IPV6_GROUPS - len(groups)
        if missing < 1:
            raise ValidationError(
                code="wrong_group_count",
                message="'::' leaves no room for a zero group",
                details={"address": text},
            )
        position = fields.index("")
        filler = ["0" * GROUP_WIDTH] * missing
        return groups[:position] + filler + groups[position:]


_default_canonicalizer = AddressCanonicalizer()


def canonicalize(raw: Optional[str]) -> CanonicalAddress:
    """Canonicalize a raw address parameter with the default canonicalizer."""
    return _default_canonicalizer.canonicalize(raw)
