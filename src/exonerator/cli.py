"""
Command-line interface for the exonerator system.

This module provides the main CLI entry point with commands for:
- lookup: Find out whether an address was a Tor relay on a date
- config: Configuration management
- self-test: Validate configuration and backend connectivity
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    DEFAULT_CONFIG_PATH,
    SystemConfig,
    apply_environment,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)
from .enums import OutcomeKind
from .exceptions import ConfigurationError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .renderer import render_json, render_text
from .self_test import run_self_test
from .service import ExoneratorService


EXIT_POSITIVE = 0
EXIT_OTHER = 1
EXIT_GENERAL_ERROR = 2


def resolve_config(
    config_path: Optional[str],
    backend_url: Optional[str] = None,
    dry_run: bool = False,
) -> SystemConfig:
    """
    Build the effective configuration.

    Precedence: defaults, the configuration file, EXONERATOR_* environment
    variables, then command-line flags.

    Raises:
        ConfigurationError: If an explicitly given file is missing or invalid
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    config = load_config_from_file(path)
    if config is None:
        if config_path:
            raise ConfigurationError(
                code="config_not_found",
                message=f"No configuration found at: {path}",
                details={"path": str(path)},
            )
        config = create_default_config()

    config = apply_environment(config)

    if backend_url:
        config = replace(config, backend=replace(config.backend, base_url=backend_url))
    if dry_run:
        config = replace(config, simulation_mode=True)

    return config


async def run_lookup(
    ip: Optional[str],
    timestamp: Optional[str],
    config: SystemConfig,
    language: Optional[str] = None,
    as_json: bool = False,
    verbose: bool = False,
) -> int:
    """
    Run one lookup and print the result.

    Returns:
        Exit code (0 for a positive match, 1 for any other outcome,
        2 for a general error)
    """
    logger = AuditLogger.from_level_name(
        "debug" if verbose else config.logging.level,
        config.logging.output_format,
    )

    async with ExoneratorService(config=config, logger=logger) as service:
        shown_language = config.select_language(language)
        if verbose and not as_json:
            if config.simulation_mode:
                print(get_message("cli.simulation", shown_language))
            if ip and timestamp:
                print(get_message(
                    "cli.looking_up", shown_language, address=ip, date=timestamp,
                ))
        result = await service.handle(ip, timestamp, lang=language)

    if as_json:
        print(json.dumps(render_json(result), indent=2, ensure_ascii=False))
    else:
        print(render_text(result, config))

    if result.failed:
        return EXIT_GENERAL_ERROR
    if result.outcome.kind == OutcomeKind.POSITIVE_MATCH:
        return EXIT_POSITIVE
    return EXIT_OTHER


def cmd_lookup(args: argparse.Namespace) -> int:
    """Handle the 'lookup' command."""
    try:
        config = resolve_config(args.config, args.backend_url, args.dry_run)
    except ConfigurationError as e:
        print(get_message("error.config", args.lang or "en", error=e.message), file=sys.stderr)
        return EXIT_OTHER

    return asyncio.run(run_lookup(
        ip=args.ip,
        timestamp=args.date,
        config=config,
        language=args.lang,
        as_json=args.json,
        verbose=args.verbose,
    ))


def cmd_self_test(args: argparse.Namespace) -> int:
    """Handle the 'self-test' command."""
    try:
        config = resolve_config(args.config, args.backend_url)
    except ConfigurationError as e:
        print(get_message("error.config", args.lang or "en", error=e.message), file=sys.stderr)
        return EXIT_OTHER

    result = asyncio.run(run_self_test(
        config=config,
        print_output=True,
        language=config.select_language(args.lang),
    ))

    return 0 if result.success else 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        try:
            config = load_config_from_file(config_path)
        except ConfigurationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Backend URL: {config.backend.base_url}")
        print(f"  Timeout: {config.backend.timeout_seconds}s")
        print(f"  Permanent link base: {config.permalink_base}")
        print(f"  Languages: {', '.join(sorted(config.languages))}")
        print(f"  Default language: {config.default_language}")
        print(f"  Simulation mode: {config.simulation_mode}")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        config = create_default_config(language=args.lang or "en")
        try:
            save_config_to_file(config, config_path)
        except ConfigurationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        print(f"Configuration created at: {config_path}")
        return 0

    elif args.action == "validate":
        try:
            config = load_config_from_file(config_path)
        except ConfigurationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        if config is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="exonerator",
        description="Find out whether an IP address was a Tor relay on a given date",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'lookup' command
    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Look up an IP address on a date",
    )
    lookup_parser.add_argument(
        "ip",
        nargs="?",
        default="",
        help="IPv4 address (a.b.c.d) or IPv6 address ([a:b:c:d:e:f:g:h])",
    )
    lookup_parser.add_argument(
        "date",
        nargs="?",
        default="",
        help="Date in YYYY-MM-DD format",
    )
    lookup_parser.add_argument(
        "--lang", "-l",
        help="Output language (falls back to the configured default)",
    )
    lookup_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    lookup_parser.add_argument(
        "--backend-url",
        help="Base URL of the lookup backend",
    )
    lookup_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - no real network requests",
    )
    lookup_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    lookup_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    lookup_parser.set_defaults(func=cmd_lookup)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--lang", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Default language for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    # 'self-test' command
    self_test_parser = subparsers.add_parser(
        "self-test",
        help="Validate configuration and backend connectivity",
    )
    self_test_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    self_test_parser.add_argument(
        "--backend-url",
        help="Base URL of the lookup backend",
    )
    self_test_parser.add_argument(
        "--lang", "-l",
        help="Output language (falls back to the configured default)",
    )
    self_test_parser.set_defaults(func=cmd_self_test)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
