from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.base_command import BaseCommand

logger = logging.getLogger(__name__)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


def expand_escapes(text: str) -> str:
    """Expand \\n, \\t, \\r and \\\\ sequences; other backslashes stay literal."""
    result: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\" and index + 1 < len(text) and text[index + 1] in _ESCAPES:
            result.append(_ESCAPES[text[index + 1]])
            index += 2
            continue
        result.append(char)
        index += 1
    return "".join(result)


class EchoCommand(BaseCommand):
    """Print a message, optionally storing it in a variable."""

    @property
    def name(self) -> str:
        return "echo"

    @property
    def format(self) -> str:
        return "\\echo[to=var, silent=true|false, raw=true|false] message"

    @property
    def description(self) -> str:
        return "Print text with variables interpolated"

    @property
    def examples(self) -> list[str]:
        return [
            "\\echo Hello ${name}",
            "\\echo[to=greeting, silent=true] Hi there",
            "\\echo[raw=true] keep \\n as typed",
        ]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        silent = self.parse_bool(args, "silent")
        raw = self.parse_bool(args, "raw")
        target = args.get("to", "").strip()

        text = message if raw else expand_escapes(message)
        if target:
            context.variables.set_user_variable(target, text)
        if silent:
            return self.success()
        return self.success(text)
