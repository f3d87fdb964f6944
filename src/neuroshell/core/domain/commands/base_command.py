"""
Base command implementation.

Every command the interpreter can dispatch derives from `BaseCommand`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.parsed_command import ParseMode

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """Base class for all commands.

    Subclasses declare their name, usage format and description, and may
    override `parse_mode` (RAW keeps bracket text verbatim) or
    `interpolates_input` (False defers interpolation of options and message to
    whatever the command pushes).
    """

    parse_mode: ParseMode = ParseMode.KEY_VALUE
    interpolates_input: bool = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Command name."""

    @property
    @abstractmethod
    def format(self) -> str:
        """Command format string."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Command description."""

    @property
    def examples(self) -> list[str]:
        """Command examples (optional)."""
        return []

    @abstractmethod
    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        """
        Execute the command.

        Args:
            args: Option values from the bracket region (empty in RAW mode,
                where the verbatim text is context.bracket_content)
            message: Trailing message text
            context: Services and engine hooks available to the command

        Returns:
            The command result
        """

    @property
    def usage(self) -> str:
        return f"Usage: {self.format}"

    def success(self, message: str = "", **data: object) -> CommandResult:
        return CommandResult(success=True, message=message, name=self.name, data=data)

    def failure(self, message: str, **data: object) -> CommandResult:
        return CommandResult(success=False, message=message, name=self.name, data=data)

    def parse_bool(self, args: Mapping[str, str], key: str, default: bool = False) -> bool:
        """Read a boolean option.

        A bare flag or `true` (any case) is true; every other value is false.
        """
        if key not in args:
            return default
        value = args[key].strip()
        return value == "" or value.lower() == "true"
