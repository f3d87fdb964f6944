from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.base_command import BaseCommand
from neuroshell.core.domain.parsed_command import ParseMode

logger = logging.getLogger(__name__)


class HelpCommand(BaseCommand):
    """Command to display help information about available commands."""

    @property
    def name(self) -> str:
        return "help"

    @property
    def format(self) -> str:
        return "\\help or \\help[command]"

    @property
    def description(self) -> str:
        return "Show available commands or details for a single command"

    @property
    def examples(self) -> list[str]:
        return ["\\help", "\\help[session-new]", "\\help echo"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        registry = context.command_registry
        cmd_name = next(iter(args), "") if args else message.strip()
        cmd_name = cmd_name.lstrip("\\")

        if cmd_name:
            command = registry.get(cmd_name)
            if command is None:
                return self.failure(
                    f"Unknown command: {cmd_name}. Use \\help to list commands."
                )
            parts = [
                f"\\{command.name} - {command.description}",
                f"Usage: {command.format}",
            ]
            if command.parse_mode is ParseMode.RAW:
                parts.append("Bracket content is passed through verbatim.")
            if command.examples:
                parts.append("Examples:")
                parts.extend(f"  {example}" for example in command.examples)
            return self.success("\n".join(parts))

        commands = registry.get_all()
        width = max((len(name) for name in commands), default=0) + 2
        lines = ["Available commands:"]
        for name in sorted(commands):
            lines.append(f"  \\{name.ljust(width)}{commands[name].description}")
        lines.append("")
        lines.append("Use \\help[command] for details.")
        return self.success("\n".join(lines))
