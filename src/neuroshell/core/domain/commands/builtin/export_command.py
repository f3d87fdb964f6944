from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.core.common.exceptions import ValidationError
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.base_command import BaseCommand
from neuroshell.core.domain.parsed_command import ParsedCommand

logger = logging.getLogger(__name__)

# format name -> command that implements it
EXPORTERS = {"json": "session-json-export"}


class ExportCommand(BaseCommand):
    """Generic export that hands off to a format-specific command."""

    @property
    def name(self) -> str:
        return "export"

    @property
    def format(self) -> str:
        return "\\export[format=json, file=path, session=name] [file]"

    @property
    def description(self) -> str:
        return "Export a chat session; delegates to the exporter for the format"

    @property
    def examples(self) -> list[str]:
        return ["\\export[file=chat.json]", "\\export[format=json, session=work] work.json"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        export_format = args.get("format", "json").strip().lower() or "json"
        target = EXPORTERS.get(export_format)
        if target is None:
            raise ValidationError(
                f"Unsupported export format '{export_format}'. "
                f"Supported: {', '.join(sorted(EXPORTERS))}"
            )

        options = {k: v for k, v in args.items() if k != "format"}
        if message.strip() and "file" not in options:
            options["file"] = message.strip()
        if not options.get("file"):
            return self.failure(f"An output file is required. {self.usage}")

        delegated = ParsedCommand(name=target, options=options).to_text()
        logger.debug("Export delegating to %s", delegated)
        context.push_command(delegated)
        return self.success()
