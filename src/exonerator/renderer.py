"""
Plain-text and JSON rendering of request results.

The text renderer produces the localized summary for an outcome, the
technical details table for positive matches, re-query links for
addresses in the same network, and a permanent link for final answers.
Echoed user input is escaped before it is shown.
"""

import dataclasses
import html
from enum import Enum
from typing import Any, Optional

from .config import SystemConfig
from .enums import ExitFlag, OutcomeKind
from .i18n import get_message
from .models import MatchRecord
from .outcome_resolver import (
    DateOutOfRange,
    InvalidAddress,
    InvalidDate,
    NegativeNoMatch,
    NegativeSameNetwork,
    NoConsensusForInterval,
    Outcome,
    PositiveMatch,
)
from .service import RequestResult


# Message key prefix per outcome; StartPage has no summary
SUMMARY_KEYS: dict[OutcomeKind, Optional[str]] = {
    OutcomeKind.START_PAGE: None,
    OutcomeKind.MISSING_ADDRESS: "summary.invalidparams.noip",
    OutcomeKind.MISSING_DATE: "summary.invalidparams.notimestamp",
    OutcomeKind.INVALID_ADDRESS: "summary.invalidparams.invalidip",
    OutcomeKind.INVALID_DATE: "summary.invalidparams.invalidtimestamp",
    OutcomeKind.DATE_TOO_RECENT: "summary.invalidparams.timestamptoorecent",
    OutcomeKind.BACKEND_UNREACHABLE: "summary.serverproblem.dbnoconnect",
    OutcomeKind.NO_DATA_IN_DATABASE: "summary.serverproblem.dbempty",
    OutcomeKind.DATE_OUT_OF_RANGE: "summary.invalidparams.timestamprange",
    OutcomeKind.NO_CONSENSUS_FOR_INTERVAL: "summary.serverproblem.nodata",
    OutcomeKind.POSITIVE_MATCH: "summary.positive",
    OutcomeKind.NEGATIVE_SAME_NETWORK: "summary.negativesamenetwork",
    OutcomeKind.NEGATIVE_NO_MATCH: "summary.negative",
}

# Outcomes that answer the question and get a permanent link
FINAL_OUTCOMES = frozenset({
    OutcomeKind.POSITIVE_MATCH,
    OutcomeKind.NEGATIVE_SAME_NETWORK,
    OutcomeKind.NEGATIVE_NO_MATCH,
})

EXIT_KEYS = {
    ExitFlag.UNKNOWN: "technicaldetails.exit.unknown",
    ExitFlag.YES: "technicaldetails.exit.yes",
    ExitFlag.NO: "technicaldetails.exit.no",
}


def build_link(base: str, ip: str, date: str, lang: str) -> str:
    """Build a query link; ``ip`` must already be in link form."""
    return f"{base}?ip={ip}&timestamp={date}&lang={lang}"


def escape_echo(value: str) -> str:
    """Escape an untrusted, already truncated value for display."""
    return html.escape(value, quote=True)


def summary_body_args(outcome: Outcome) -> dict[str, Any]:
    """Format arguments for an outcome's summary body."""
    if isinstance(outcome, InvalidAddress):
        return {
            "value": escape_echo(outcome.echo),
            "ipv4": '"a.b.c.d"',
            "ipv6": '"[a:b:c:d:e:f:g:h]"',
        }
    if isinstance(outcome, InvalidDate):
        return {"value": escape_echo(outcome.echo), "format": '"YYYY-MM-DD"'}
    if isinstance(outcome, DateOutOfRange):
        return {
            "date": outcome.requested,
            "first": outcome.first_date,
            "last": outcome.last_date,
        }
    if isinstance(outcome, NegativeSameNetwork):
        return {
            "address": outcome.address,
            "date": outcome.date,
            "prefix": outcome.prefix_length,
        }
    if isinstance(outcome, (PositiveMatch, NegativeNoMatch, NoConsensusForInterval)):
        return {"address": outcome.address, "date": outcome.date}
    return {}


def render_text(result: RequestResult, config: SystemConfig) -> str:
    """
    Render a request result as localized plain text.

    Args:
        result: Result of ExoneratorService.handle()
        config: System configuration (for the permanent link base)

    Returns:
        Multi-line text; the form explanation for the start page
    """
    language = result.language

    if result.failed:
        return get_message("error.general", language)

    outcome = result.outcome
    key = SUMMARY_KEYS[outcome.kind]
    if key is None:
        return get_message("form.explanation", language)

    heading = get_message("summary.heading", language)
    lines = [
        heading,
        "=" * len(heading),
        get_message(f"{key}.title", language),
        get_message(f"{key}.body", language, **summary_body_args(outcome)),
    ]

    if isinstance(outcome, NegativeSameNetwork):
        label = get_message("cli.related_link", language)
        for related in outcome.related:
            link = build_link(
                config.permalink_base, related.query_value, outcome.date, language
            )
            lines.append(f"  - {related.display}  {label}: {link}")

    if isinstance(outcome, PositiveMatch):
        lines.append("")
        lines.extend(_technical_details(outcome, language))

    if outcome.kind in FINAL_OUTCOMES and result.address and result.date:
        link_heading = get_message("permanentlink.heading", language)
        lines.extend([
            "",
            link_heading,
            "-" * len(link_heading),
            build_link(config.permalink_base, result.address, result.date, language),
        ])

    return "\n".join(lines)


def _technical_details(outcome: PositiveMatch, language: str) -> list[str]:
    heading = get_message("technicaldetails.heading", language)
    header = [
        get_message("technicaldetails.colheader.timestamp", language),
        get_message("technicaldetails.colheader.ip", language),
        get_message("technicaldetails.colheader.fingerprint", language),
        get_message("technicaldetails.colheader.nickname", language),
        get_message("technicaldetails.colheader.exit", language),
    ]
    lines = [
        heading,
        "-" * len(heading),
        get_message(
            "technicaldetails.pre", language,
            address=outcome.address, date=outcome.date,
        ),
        " | ".join(header),
    ]
    for match in outcome.matches:
        lines.append(" | ".join(_match_row(match, language)))
    return lines


def _match_row(match: MatchRecord, language: str) -> list[str]:
    nickname = match.nickname
    if nickname is None:
        nickname = "(" + get_message("technicaldetails.nickname.unknown", language) + ")"
    return [
        match.timestamp,
        ", ".join(match.addresses),
        match.fingerprint,
        nickname,
        get_message(EXIT_KEYS[match.exit_flag], language),
    ]


def _plain(value: Any) -> Any:
    """Convert enums and tuples into JSON-friendly values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def render_json(result: RequestResult) -> dict:
    """
    Render a request result as a JSON-serialisable dictionary.

    Echoed values are included unescaped; JSON consumers escape for
    their own display context.
    """
    if result.failed:
        return {"outcome": None, "language": result.language, "error": result.error}

    return {
        "outcome": result.outcome.kind.value,
        "language": result.language,
        "query": {"ip": result.address, "timestamp": result.date},
        "details": _plain(dataclasses.asdict(result.outcome)),
    }
