"""
Common exception classes for NeuroShell.

This module defines the exception hierarchy used throughout the interpreter.
Every error that the execution engine knows how to halt on, or that `\\try`
can absorb, derives from `NeuroShellError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class NeuroShellError(Exception):
    """Base exception class for all NeuroShell errors."""

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        **kwargs: Any,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        for key, value in (kwargs or {}).items():
            setattr(self, key, value)

    def to_dict(self) -> dict:
        error_dict = {
            "message": self.message,
            "type": self.__class__.__name__,
            "details": self.details,
        }

        for attr_name, value in vars(self).items():
            if attr_name.startswith("_") or attr_name in ("message", "details"):
                continue
            error_dict[attr_name] = value

        return {"error": error_dict}


class ValidationError(NeuroShellError):
    """Raised when user input fails validation."""

    def __init__(
        self, message: str = "Validation failed", details: dict | None = None, **kwargs
    ):
        super().__init__(message, details, **kwargs)


class ConfigurationError(NeuroShellError):
    """Raised when there's a configuration issue."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)


class CommandRegistrationError(ConfigurationError):
    """Raised when a command cannot be added to the command registry."""

    def __init__(
        self,
        message: str = "Command registration failed",
        command_name: str | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.command_name = command_name


class ServiceRegistrationError(ConfigurationError):
    """Raised when a service cannot be added to the service registry."""

    def __init__(
        self,
        message: str = "Service registration failed",
        service_name: str | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.service_name = service_name


class RegistryLookupError(NeuroShellError):
    """Raised when a command or service name is not registered."""

    def __init__(
        self,
        message: str = "Registry lookup failed",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)


class CommandNotFoundError(RegistryLookupError):
    """Raised when no command is registered under a name."""

    def __init__(self, command_name: str, details: dict | None = None, **kwargs):
        super().__init__(
            f"Unknown command: '{command_name}'. Use \\help to list commands.",
            details,
            **kwargs,
        )
        self.command_name = command_name


class ServiceNotFoundError(RegistryLookupError):
    """Raised when no service is registered under a name."""

    def __init__(self, service_name: str, details: dict | None = None, **kwargs):
        super().__init__(f"Service not registered: '{service_name}'", details, **kwargs)
        self.service_name = service_name


class InterpolationDepthError(NeuroShellError):
    """Raised when variable interpolation recurses past its depth bound."""

    def __init__(
        self,
        message: str = "variable interpolation cycle or excessive depth",
        max_depth: int | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.max_depth = max_depth


class CommandExecutionError(NeuroShellError):
    """Raised when a dispatched command fails."""

    def __init__(
        self,
        message: str = "Command execution failed",
        command_name: str | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.command_name = command_name


class AmbiguousIdentifierError(NeuroShellError):
    """Raised when an identifier matches more than one entity."""

    def __init__(
        self,
        message: str = "Identifier is ambiguous",
        candidates: Sequence[str] = (),
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.candidates = list(candidates)


class NoMatchingIdentifierError(NeuroShellError):
    """Raised when an identifier matches no entity."""

    def __init__(
        self,
        message: str = "No entity matches identifier",
        candidates: Sequence[str] = (),
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.candidates = list(candidates)


class IndexOutOfBoundsError(NeuroShellError):
    """Raised when a message index is invalid or out of range."""

    def __init__(
        self,
        message: str = "Index out of bounds",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)


class ScriptLoadError(NeuroShellError):
    """Raised when a script file cannot be resolved or read."""

    def __init__(
        self,
        message: str = "Script could not be loaded",
        path: str | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.path = path


class StackOverflowError(NeuroShellError):
    """Raised when the pending-command stack or script nesting grows past its limit."""

    def __init__(
        self,
        message: str = "Pending command stack overflow",
        limit: int | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.limit = limit


class EngineBusyError(NeuroShellError):
    """Raised when execute() is called while the engine is already running."""

    def __init__(
        self,
        message: str = "Execution engine is already running",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)


class LLMServiceError(NeuroShellError):
    """Raised when an LLM provider call fails."""

    def __init__(
        self,
        message: str = "LLM request failed",
        provider: str | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, **kwargs)
        self.provider = provider
