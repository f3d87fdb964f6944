"""
Registry mapping command names to command instances.

Registration happens once, explicitly, at startup. The registry is
append-only: a duplicate name is a configuration error, not an override.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from neuroshell.core.common.exceptions import (
    CommandNotFoundError,
    CommandRegistrationError,
)
from neuroshell.core.domain.parsed_command import ParseMode

if TYPE_CHECKING:
    from neuroshell.core.domain.commands.base_command import BaseCommand

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Registry for command handlers."""

    def __init__(self) -> None:
        self._commands: dict[str, BaseCommand] = {}

    def register(self, command: BaseCommand) -> None:
        """Register a command handler.

        Args:
            command: The command handler to register

        Raises:
            CommandRegistrationError: If the name is empty or already taken
        """
        name = command.name
        if not isinstance(name, str) or not name.strip():
            raise CommandRegistrationError(
                "Command name must be a non-empty string.",
                command_name=name,
            )
        if name in self._commands:
            raise CommandRegistrationError(
                f"Command '{name}' is already registered.", command_name=name
            )

        self._commands[name] = command
        logger.debug(f"Registered command: {name}")

    def get(self, name: str) -> BaseCommand | None:
        return self._commands.get(name)

    def get_required(self, name: str) -> BaseCommand:
        """Get a command handler by name.

        Raises:
            CommandNotFoundError: If the command is not registered
        """
        command = self._commands.get(name)
        if command is None:
            raise CommandNotFoundError(name)
        return command

    def has_command(self, name: str) -> bool:
        return name in self._commands

    def parse_mode_for(self, name: str) -> ParseMode:
        """Return the parse mode declared by `name`, KeyValue if unknown."""
        command = self._commands.get(name)
        if command is None:
            return ParseMode.KEY_VALUE
        return command.parse_mode

    def get_all(self) -> dict[str, BaseCommand]:
        return self._commands.copy()

    def names(self) -> list[str]:
        return sorted(self._commands)

    def __len__(self) -> int:
        return len(self._commands)
