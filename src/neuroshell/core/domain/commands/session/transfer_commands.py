from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.session.base import (
    SessionCommandBase,
    publish_session_metadata,
)

logger = logging.getLogger(__name__)


def _file_argument(args: Mapping[str, str], message: str) -> str:
    return (args.get("file") or message).strip()


class SessionJsonExportCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-json-export"

    @property
    def format(self) -> str:
        return "\\session-json-export[file=path, session=name-or-id] [path]"

    @property
    def description(self) -> str:
        return "Write a session, messages included, to a JSON file"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        path = _file_argument(args, message)
        if not path:
            return self.failure(f"An output file is required. {self.usage}")
        session = await self.target_session(args, context)
        written = await context.sessions.export_json(session, path)
        logger.info("Exported session %s to %s", session.id, written)
        publish_session_metadata(context, session)
        return self.success(
            f"Exported session '{session.name}' to {written}", path=str(written)
        )


class SessionJsonImportCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-json-import"

    @property
    def format(self) -> str:
        return "\\session-json-import[file=path] [path]"

    @property
    def description(self) -> str:
        return "Load a session from a JSON file as a new active session"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        path = _file_argument(args, message)
        if not path:
            return self.failure(f"An input file is required. {self.usage}")
        session = await context.sessions.import_json(path)
        publish_session_metadata(context, session)
        context.variables.set("_session_id", session.id)
        return self.success(
            f"Imported {session.message_count} messages as {self.label(session)}",
            session_id=session.id,
        )
