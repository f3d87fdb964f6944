"""
Commands that steer the execution engine rather than doing work themselves.

`\\silent` and `\\try` do not run their inner command directly: they queue it
between two boundary markers, and the engine applies the block semantics while
draining. Their input is left uninterpolated so the inner command is expanded
exactly once, when it is popped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.constants import SCRIPT_EXTENSION
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.base_command import BaseCommand
from neuroshell.core.domain.parsed_command import ParseMode
from neuroshell.core.services.script_loader import script_command_line
from neuroshell.core.services.stack_service import BoundaryKind

logger = logging.getLogger(__name__)


def _inner_command(message: str, context: CommandContext) -> str:
    return message.strip() or context.bracket_content.strip()


class SilentCommand(BaseCommand):
    parse_mode = ParseMode.RAW
    interpolates_input = False

    @property
    def name(self) -> str:
        return "silent"

    @property
    def format(self) -> str:
        return "\\silent <command>"

    @property
    def description(self) -> str:
        return "Run a command with its output suppressed; errors still propagate"

    @property
    def examples(self) -> list[str]:
        return ["\\silent \\session-new scratch", "\\silent \\try \\session-delete old"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        inner = _inner_command(message, context)
        if inner:
            context.push_block(BoundaryKind.SILENT, inner)
        return self.success()


class TryCommand(BaseCommand):
    parse_mode = ParseMode.RAW
    interpolates_input = False

    @property
    def name(self) -> str:
        return "try"

    @property
    def format(self) -> str:
        return "\\try <command>"

    @property
    def description(self) -> str:
        return (
            "Run a command and absorb its error; sets _status (0 ok, 1 failed) "
            "and _error"
        )

    @property
    def examples(self) -> list[str]:
        return ["\\try \\session-activate work", "\\try \\optional-setup.neuro"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        # An empty try still opens and closes a block, which records success.
        context.push_block(BoundaryKind.TRY, _inner_command(message, context))
        return self.success()


class RunCommand(BaseCommand):
    """Run a script file by delegating to the script pseudo-command."""

    parse_mode = ParseMode.RAW
    interpolates_input = False

    @property
    def name(self) -> str:
        return "run"

    @property
    def format(self) -> str:
        return "\\run <script> [args...]"

    @property
    def description(self) -> str:
        return f"Run a {SCRIPT_EXTENSION} script; arguments become _1, _2, ..."

    @property
    def examples(self) -> list[str]:
        return ["\\run setup", "\\run scripts/review.neuro main.py"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        parts = (message.strip() or context.bracket_content.strip()).split(None, 1)
        if not parts:
            return self.failure(self.usage)

        script = parts[0]
        extension = context.config.engine.script_extension
        if not script.endswith(extension):
            script += extension
        arguments = parts[1] if len(parts) > 1 else ""
        context.push_command(script_command_line(script, arguments))
        return self.success()


class ShowStackCommand(BaseCommand):
    @property
    def name(self) -> str:
        return "show-stack"

    @property
    def format(self) -> str:
        return "\\show-stack"

    @property
    def description(self) -> str:
        return "Show commands still waiting on the execution stack"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        pending = context.pending_commands()
        if not pending:
            return self.success("Execution stack is empty")
        lines = [f"Execution stack ({len(pending)} pending, next first):"]
        lines.extend(f"  {i}. {entry}" for i, entry in enumerate(pending, start=1))
        return self.success("\n".join(lines), size=len(pending))
