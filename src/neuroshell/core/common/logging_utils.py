"""
Logging utilities for NeuroShell.

This module provides:
- Test/production environment tagging for stdlib log records
- Redaction of API keys that end up in log messages
- Structured (structlog) loggers and a context manager to bind fields
"""

import logging
import os
import re
import sys
from typing import Any, Literal

import structlog

DEFAULT_LOG_FORMAT = (
    "%(asctime)s [%(levelname)-8s] [%(env_tag)s] %(name)s:%(lineno)d %(message)s"
)

API_KEY_PATTERN = re.compile(r"(sk-|ak-)[a-zA-Z0-9_-]{20,}")
BEARER_TOKEN_PATTERN = re.compile(r"Bearer\s+([a-zA-Z0-9._~+/-]+=*)")


def _is_running_under_pytest() -> bool:
    return "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST") is not None


def _get_environment_tag() -> str:
    """Get the environment tag for logging.

    NEUROSHELL_ENV wins when set; otherwise 'test' under pytest and 'prod'
    everywhere else.
    """
    explicit = os.getenv("NEUROSHELL_ENV")
    if explicit:
        return explicit.strip().lower()
    return "test" if _is_running_under_pytest() else "prod"


class EnvironmentTaggingFilter(logging.Filter):
    """Logging filter that adds environment tags to log records."""

    def __init__(self) -> None:
        super().__init__()
        self._env_tag = _get_environment_tag()

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.env_tag = self._env_tag
        return True


class EnvironmentTaggingFormatter(logging.Formatter):
    """Logging formatter that includes environment tags."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: Literal["%", "{", "$"] = "%",
    ) -> None:
        super().__init__(fmt or DEFAULT_LOG_FORMAT, datefmt, style=style)


class ApiKeyRedactionFilter(logging.Filter):
    """Logging filter that masks API keys in log messages and arguments."""

    def __init__(
        self, api_keys: list[str] | set[str] | None = None, mask: str = "***"
    ) -> None:
        super().__init__()
        self.mask = mask
        self.patterns: list[re.Pattern] = []
        keys = {k for k in (api_keys or []) if k}
        if keys:
            escaped = sorted((re.escape(k) for k in keys), key=len, reverse=True)
            self.patterns.append(re.compile("|".join(escaped)))
        self.patterns.append(API_KEY_PATTERN)
        self.patterns.append(BEARER_TOKEN_PATTERN)

    def _sanitize(self, obj: object) -> object:
        if isinstance(obj, str):
            text = obj
            for pattern in self.patterns:
                if pattern is BEARER_TOKEN_PATTERN:
                    text = pattern.sub(f"Bearer {self.mask}", text)
                else:
                    text = pattern.sub(self.mask, text)
            return text
        if isinstance(obj, dict):
            return {k: self._sanitize(v) for k, v in obj.items()}
        if isinstance(obj, list | tuple):
            return type(obj)(self._sanitize(v) for v in obj)
        return obj

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if isinstance(record.msg, str):
            record.msg = self._sanitize(record.msg)  # type: ignore[assignment]
        if isinstance(record.args, dict):
            record.args = self._sanitize(record.args)  # type: ignore[assignment]
        elif isinstance(record.args, tuple):
            record.args = tuple(self._sanitize(a) for a in record.args)
        return True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Args:
        name: Optional logger name

    Returns:
        A structured logger
    """
    return structlog.get_logger(name)  # type: ignore


def install_environment_tagging() -> None:
    """Install environment tagging filter on the root logger and its handlers."""
    root = logging.getLogger()
    filter_instance = EnvironmentTaggingFilter()
    root.addFilter(filter_instance)

    for handler in list(root.handlers):
        handler.addFilter(filter_instance)
        if isinstance(handler.formatter, logging.Formatter) and not isinstance(
            handler.formatter, EnvironmentTaggingFormatter
        ):
            handler.setFormatter(
                EnvironmentTaggingFormatter(
                    fmt=handler.formatter._fmt, datefmt=handler.formatter.datefmt
                )
            )


def install_api_key_redaction_filter(
    api_keys: list[str] | set[str] | None, mask: str = "***"
) -> None:
    """Install the API key redaction filter on the root logger and its handlers.

    Safe to call more than once; each call adds a new filter instance.
    """
    root = logging.getLogger()
    filter_instance = ApiKeyRedactionFilter(api_keys or [], mask=mask)
    root.addFilter(filter_instance)
    for handler in list(root.handlers):
        handler.addFilter(filter_instance)


def configure_logging_with_environment_tagging(
    level: int = logging.INFO,
    log_format: str | None = None,
    log_file: str | None = None,
) -> None:
    """Configure logging with environment tagging.

    Log records go to stderr so they never mix with command output on stdout.

    Args:
        level: Logging level
        log_format: Optional log format string
        log_file: Optional log file path
    """
    formatter = EnvironmentTaggingFormatter(fmt=log_format or DEFAULT_LOG_FORMAT)

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    install_environment_tagging()


class LogContext:
    """Context manager for adding context to logs.

    Besides returning a bound logger, the context is also pushed into
    structlog's contextvars so loggers obtained elsewhere during the block
    carry the same fields.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger, **context: Any):
        self.logger = logger
        self.context = context
        self.bound_logger: structlog.stdlib.BoundLogger | None = None
        self._tokens: Any = None

    def __enter__(self) -> structlog.stdlib.BoundLogger:
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        self.bound_logger = self.logger.bind(**self.context)
        return self.bound_logger

    def __exit__(self, *args: Any) -> None:
        if self._tokens is not None:
            structlog.contextvars.reset_contextvars(**self._tokens)
            self._tokens = None
        self.bound_logger = None

    def get_logger(self) -> structlog.stdlib.BoundLogger:
        if self.bound_logger is None:
            raise RuntimeError(
                "Logger not bound. Use this context manager in a with statement."
            )
        return self.bound_logger
