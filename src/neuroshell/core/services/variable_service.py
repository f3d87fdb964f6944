"""
Variable store service.

All variables live in one flat key space. The first character of a key picks
its namespace:

- `@name`   computed system values, evaluated on every lookup and never stored
- `#name`   metadata written wholesale by the last command that produced it
- `_name`   output slots and engine-managed values (`_output`, `_status`, ...)
- digits    history slots, `1` being the most recent LLM reply
- anything else is a user variable
"""

from __future__ import annotations

import getpass
import logging
import os
import platform
from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum
from pathlib import Path

from neuroshell.constants import (
    DEFAULT_HISTORY_SLOTS,
    USER_SETTABLE_SYSTEM_PREFIXES,
    USER_SETTABLE_SYSTEM_VARIABLES,
)
from neuroshell.core.common.exceptions import ValidationError
from neuroshell.core.interfaces.variable_store_interface import IVariableStore

logger = logging.getLogger(__name__)


class VariableNamespace(str, Enum):
    USER = "user"
    SYSTEM = "system"
    METADATA = "metadata"
    BUILTIN = "builtin"
    HISTORY = "history"


def classify_key(key: str) -> VariableNamespace:
    """Return the namespace a variable key belongs to."""
    if key.startswith("@"):
        return VariableNamespace.SYSTEM
    if key.startswith("#"):
        return VariableNamespace.METADATA
    if key.startswith("_"):
        return VariableNamespace.BUILTIN
    if key.isdigit():
        return VariableNamespace.HISTORY
    return VariableNamespace.USER


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return os.environ.get("USER", os.environ.get("USERNAME", ""))


class VariableService(IVariableStore):
    """In-memory implementation of the variable store."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._values: dict[str, str] = {}
        self._clock = clock or datetime.now
        self._computed: dict[str, Callable[[], str]] = {
            "@pwd": os.getcwd,
            "@user": _current_user,
            "@home": lambda: str(Path.home()),
            "@date": lambda: self._clock().strftime("%Y-%m-%d"),
            "@time": lambda: self._clock().strftime("%H:%M:%S"),
            "@os": lambda: platform.system().lower(),
        }

    def get(self, key: str) -> str:
        computed = self._computed.get(key)
        if computed is not None:
            return computed()
        return self._values[key]

    def get_or(self, key: str, default: str = "") -> str:
        try:
            return self.get(key)
        except KeyError:
            return default

    def has(self, key: str) -> bool:
        return key in self._computed or key in self._values

    def set(self, key: str, value: str) -> None:
        if key in self._computed:
            logger.debug("Ignoring write to computed variable %s", key)
            return
        self._values[key] = str(value)

    def delete(self, key: str) -> bool:
        return self._values.pop(key, None) is not None

    def set_user_variable(self, key: str, value: str) -> None:
        """Set a variable on behalf of the user, enforcing namespace rules.

        Raises:
            ValidationError: If the key is empty or belongs to a protected
                namespace.
        """
        key = key.strip()
        if not key:
            raise ValidationError("Variable name cannot be empty")
        if key.startswith(("@", "#")):
            raise ValidationError(
                f"Cannot set '{key}': '@' and '#' variables are managed by the system"
            )
        if key.startswith("_") and not (
            key in USER_SETTABLE_SYSTEM_VARIABLES
            or key.startswith(USER_SETTABLE_SYSTEM_PREFIXES)
        ):
            raise ValidationError(
                f"Cannot set '{key}': '_' variables are reserved for command output",
                details={"settable": sorted(USER_SETTABLE_SYSTEM_VARIABLES)},
            )
        self.set(key, value)

    def replace_metadata(self, values: Mapping[str, str]) -> None:
        """Drop all `#` metadata and store `values` in its place."""
        for key in [k for k in self._values if k.startswith("#")]:
            del self._values[key]
        for key, value in values.items():
            name = key if key.startswith("#") else f"#{key}"
            self._values[name] = str(value)

    def push_history(self, value: str, slots: int = DEFAULT_HISTORY_SLOTS) -> None:
        """Record `value` in history slot `1`, shifting older entries down."""
        for index in range(slots, 1, -1):
            previous = self._values.get(str(index - 1))
            if previous is not None:
                self._values[str(index)] = previous
        self._values["1"] = str(value)

    def get_all(self) -> dict[str, str]:
        return self.snapshot()

    def snapshot(self, include_computed: bool = True) -> dict[str, str]:
        """Return a copy of all variables, optionally evaluating `@` keys."""
        result = dict(self._values)
        if include_computed:
            for key, compute in self._computed.items():
                result[key] = compute()
        return result
