"""
Configuration dataclasses for the exonerator system.

Configuration is read once at startup and never mutated afterwards.
Sources, from lowest to highest precedence: built-in defaults, a JSON
configuration file, environment variables (optionally from a ``.env``
file), and command-line flags applied by the CLI.
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError


DEFAULT_BACKEND_URL = "https://exonerator.torproject.org"
DEFAULT_PERMALINK_BASE = "https://metrics.torproject.org/exonerator.html"
DEFAULT_LANGUAGES = frozenset({"de", "en"})
DEFAULT_LANGUAGE = "en"
DEFAULT_CONFIG_PATH = Path.home() / ".exonerator" / "config.json"

ENV_BACKEND_URL = "EXONERATOR_BACKEND_URL"
ENV_PERMALINK_BASE = "EXONERATOR_PERMALINK_BASE"
ENV_LANGUAGE = "EXONERATOR_LANGUAGE"
ENV_TIMEOUT = "EXONERATOR_TIMEOUT"


@dataclass(frozen=True)
class BackendConfig:
    """Where and how to reach the consensus lookup backend."""

    base_url: str = DEFAULT_BACKEND_URL
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass(frozen=True)
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    backend: BackendConfig = field(default_factory=BackendConfig)
    permalink_base: str = DEFAULT_PERMALINK_BASE
    languages: frozenset[str] = DEFAULT_LANGUAGES
    default_language: str = DEFAULT_LANGUAGE
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    simulation_mode: bool = False

    def select_language(self, requested: Optional[str]) -> str:
        """Return the requested language if supported, else the default."""
        if requested and requested in self.languages:
            return requested
        return self.default_language


def create_default_config(
    simulation_mode: bool = False,
    language: str = DEFAULT_LANGUAGE,
) -> SystemConfig:
    """
    Create a default system configuration.

    Args:
        simulation_mode: Enable simulation mode (no real network requests)
        language: Default output language

    Returns:
        SystemConfig with default settings
    """
    return SystemConfig(
        default_language=language,
        simulation_mode=simulation_mode,
    )


def config_from_dict(data: dict) -> SystemConfig:
    """
    Build a configuration from its JSON shape.

    Raises:
        ConfigurationError: If a field has the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigurationError(
            code="invalid_config",
            message="Configuration must be a JSON object",
        )

    try:
        backend_data = data.get("backend", {})
        backend = BackendConfig(
            base_url=str(backend_data.get("base_url", DEFAULT_BACKEND_URL)),
            timeout_seconds=float(backend_data.get("timeout_seconds", 15.0)),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=str(logging_data.get("level", "info")),
            output_format=str(logging_data.get("output_format", "text")),
        )
        if logging_config.output_format not in ("json", "text", "both"):
            raise ValueError(
                f"Invalid output_format: {logging_config.output_format}"
            )

        languages = data.get("languages")
        if languages is None:
            languages = DEFAULT_LANGUAGES
        elif isinstance(languages, list):
            languages = frozenset(str(lang) for lang in languages)
        else:
            raise TypeError("languages must be a list")

        simulation_mode = data.get("simulation_mode", False)
        if not isinstance(simulation_mode, bool):
            raise TypeError("simulation_mode must be true or false")

        return SystemConfig(
            backend=backend,
            permalink_base=str(data.get("permalink_base", DEFAULT_PERMALINK_BASE)),
            languages=languages,
            default_language=str(data.get("default_language", DEFAULT_LANGUAGE)),
            logging=logging_config,
            simulation_mode=simulation_mode,
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(
            code="invalid_config",
            message=f"Invalid configuration: {e}",
        )


def config_to_dict(config: SystemConfig) -> dict:
    """Convert a configuration to its JSON shape."""
    return {
        "backend": {
            "base_url": config.backend.base_url,
            "timeout_seconds": config.backend.timeout_seconds,
        },
        "permalink_base": config.permalink_base,
        "languages": sorted(config.languages),
        "default_language": config.default_language,
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
        "simulation_mode": config.simulation_mode,
    }


def load_config_from_file(config_path: Path) -> Optional[SystemConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig if the file exists, None otherwise

    Raises:
        ConfigurationError: If the file exists but cannot be parsed
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ConfigurationError(
            code="unreadable_config",
            message=f"Could not read {config_path}: {e}",
            details={"path": str(config_path)},
        )
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            code="invalid_json",
            message=f"Could not parse {config_path}: {e}",
            details={"path": str(config_path)},
        )

    return config_from_dict(data)


def save_config_to_file(config: SystemConfig, config_path: Path) -> None:
    """
    Save configuration to a JSON file.

    Raises:
        ConfigurationError: If the file cannot be written
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ConfigurationError(
            code="write_failed",
            message=f"Could not write {config_path}: {e}",
            details={"path": str(config_path)},
        )


def apply_environment(
    config: SystemConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> SystemConfig:
    """
    Apply EXONERATOR_* environment overrides.

    When ``environ`` is None, variables from a ``.env`` file in the
    working directory are loaded into the process environment first.

    Raises:
        ConfigurationError: If EXONERATOR_TIMEOUT is not a number
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    backend = config.backend
    if environ.get(ENV_BACKEND_URL):
        backend = replace(backend, base_url=environ[ENV_BACKEND_URL].strip())
    if environ.get(ENV_TIMEOUT):
        try:
            backend = replace(backend, timeout_seconds=float(environ[ENV_TIMEOUT]))
        except ValueError:
            raise ConfigurationError(
                code="invalid_env",
                message=f"{ENV_TIMEOUT} must be a number",
                details={"value": environ[ENV_TIMEOUT]},
            )

    overrides = {"backend": backend}
    if environ.get(ENV_PERMALINK_BASE):
        overrides["permalink_base"] = environ[ENV_PERMALINK_BASE].strip()
    if environ.get(ENV_LANGUAGE):
        overrides["default_language"] = environ[ENV_LANGUAGE].strip()

    return replace(config, **overrides)
