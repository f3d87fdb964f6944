from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import Field, ValidationError as PydanticValidationError, field_validator

from neuroshell.constants import (
    DEFAULT_COMMAND,
    DEFAULT_HISTORY_SLOTS,
    DEFAULT_INTERPOLATION_DEPTH,
    DEFAULT_MAX_SCRIPT_DEPTH,
    DEFAULT_MAX_STACK_SIZE,
    SCRIPT_EXTENSION,
)
from neuroshell.core.common.exceptions import ConfigurationError
from neuroshell.core.domain.model_bases import DomainModel

logger = logging.getLogger(__name__)


def _env_to_bool(name: str, default: bool, env: Mapping[str, str]) -> bool:
    """Return an environment variable parsed as a boolean flag."""
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_to_int(name: str, default: int, env: Mapping[str, str]) -> int:
    """Return an environment variable parsed as an integer."""
    value = env.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer value for %s: %r", name, value)
        return default


def _env_to_float(name: str, default: float, env: Mapping[str, str]) -> float:
    value = env.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric value for %s: %r", name, value)
        return default


class LogLevel(str, Enum):
    """Log levels for configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(DomainModel):
    """Logging configuration."""

    level: LogLevel = LogLevel.WARNING
    log_file: str | None = None
    log_format: str | None = None


class LLMConfig(DomainModel):
    """Configuration for the chat-completion provider."""

    api_key: str | None = None
    api_url: str | None = None
    model: str = "gpt-4o-mini"
    timeout: float = 120.0  # seconds
    temperature: float | None = None

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str | None) -> str | None:
        """Validate the API URL if provided."""
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("API URL must start with http:// or https://")
        return v


class EngineConfig(DomainModel):
    """Execution engine limits and defaults."""

    default_command: str = DEFAULT_COMMAND
    interpolation_max_depth: int = Field(default=DEFAULT_INTERPOLATION_DEPTH, ge=1)
    max_stack_size: int = Field(default=DEFAULT_MAX_STACK_SIZE, ge=1)
    max_script_depth: int = Field(default=DEFAULT_MAX_SCRIPT_DEPTH, ge=1)
    history_slots: int = Field(default=DEFAULT_HISTORY_SLOTS, ge=1)
    script_extension: str = SCRIPT_EXTENSION
    echo_commands: bool = False

    @field_validator("script_extension")
    @classmethod
    def validate_script_extension(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2:
            raise ValueError("script extension must start with '.'")
        return v


class SessionConfig(DomainModel):
    """Chat session defaults."""

    default_system_prompt: str = ""
    auto_session_name: str = "auto"


class AppConfig(DomainModel):
    """Top-level application configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)

    @classmethod
    def from_env(cls, *, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
        """Collect the configuration values present in the environment.

        Only variables that are actually set appear in the result, so the
        returned mapping can be merged over file values without clobbering
        them with defaults.
        """
        env: Mapping[str, str] = os.environ if environ is None else environ
        defaults = EngineConfig()
        overrides: dict[str, Any] = {}

        def put(section: str, key: str, value: Any) -> None:
            overrides.setdefault(section, {})[key] = value

        if "NEUROSHELL_LOG_LEVEL" in env:
            put("logging", "level", env["NEUROSHELL_LOG_LEVEL"].strip().upper())
        if "NEUROSHELL_LOG_FILE" in env:
            put("logging", "log_file", env["NEUROSHELL_LOG_FILE"])

        if "OPENAI_API_KEY" in env:
            put("llm", "api_key", env["OPENAI_API_KEY"])
        if "OPENAI_BASE_URL" in env:
            put("llm", "api_url", env["OPENAI_BASE_URL"])
        if "NEUROSHELL_MODEL" in env:
            put("llm", "model", env["NEUROSHELL_MODEL"])
        if "NEUROSHELL_LLM_TIMEOUT" in env:
            put("llm", "timeout", _env_to_float("NEUROSHELL_LLM_TIMEOUT", 120.0, env))

        if "NEUROSHELL_DEFAULT_COMMAND" in env:
            put("engine", "default_command", env["NEUROSHELL_DEFAULT_COMMAND"])
        if "NEUROSHELL_INTERPOLATION_DEPTH" in env:
            put(
                "engine",
                "interpolation_max_depth",
                _env_to_int(
                    "NEUROSHELL_INTERPOLATION_DEPTH",
                    defaults.interpolation_max_depth,
                    env,
                ),
            )
        if "NEUROSHELL_MAX_STACK_SIZE" in env:
            put(
                "engine",
                "max_stack_size",
                _env_to_int("NEUROSHELL_MAX_STACK_SIZE", defaults.max_stack_size, env),
            )
        if "NEUROSHELL_MAX_SCRIPT_DEPTH" in env:
            put(
                "engine",
                "max_script_depth",
                _env_to_int(
                    "NEUROSHELL_MAX_SCRIPT_DEPTH", defaults.max_script_depth, env
                ),
            )
        if "NEUROSHELL_ECHO_COMMANDS" in env:
            put(
                "engine",
                "echo_commands",
                _env_to_bool("NEUROSHELL_ECHO_COMMANDS", False, env),
            )

        return overrides


def _merge_dicts(d1: dict[str, Any], d2: dict[str, Any]) -> dict[str, Any]:
    for k, v in d2.items():
        if k in d1 and isinstance(d1[k], dict) and isinstance(v, dict):
            _merge_dicts(d1[k], v)
        else:
            d1[k] = v
    return d1


def _load_yaml_file(path: Path) -> dict[str, Any]:
    if path.suffix.lower() not in (".yaml", ".yml"):
        raise ConfigurationError(
            f"Unsupported configuration file format: {path.suffix}. Use YAML (.yaml/.yml).",
            details={"path": str(path)},
        )
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Invalid YAML in {path}: {exc}", details={"path": str(path)}
        ) from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {path} must contain a mapping at the top level",
            details={"path": str(path)},
        )
    return data


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    use_dotenv: bool = True,
) -> AppConfig:
    """
    Load configuration from defaults, an optional YAML file and the environment.

    Environment values win over file values. A `.env` file in the working
    directory is read first unless `use_dotenv` is False or an explicit
    environment mapping is supplied.

    Args:
        config_path: Optional path to a YAML configuration file
        environ: Optional environment mapping (defaults to os.environ)

    Returns:
        AppConfig instance

    Raises:
        ConfigurationError: If the file is unreadable or values are invalid
    """
    if environ is None and use_dotenv:
        load_dotenv()

    config_data: dict[str, Any] = AppConfig().model_dump(mode="json")

    if config_path:
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Configuration file not found: {config_path}")
        else:
            _merge_dicts(config_data, _load_yaml_file(path))
            logger.debug("Loaded configuration file %s", path)

    _merge_dicts(config_data, AppConfig.from_env(environ=environ))

    try:
        return AppConfig.model_validate(config_data)
    except PydanticValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration: {exc}", details={"errors": exc.errors()}
        ) from exc
