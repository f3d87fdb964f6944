from __future__ import annotations

from collections.abc import Mapping

from neuroshell.core.domain.chat_session import ChatSession
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.commands.base_command import BaseCommand
from neuroshell.core.utils.identifier_resolution import short_id


def publish_session_metadata(context: CommandContext, session: ChatSession) -> None:
    """Replace the `#` metadata with a description of `session`."""
    context.variables.replace_metadata(
        {
            "session_id": session.id,
            "session_name": session.name,
            "message_count": str(session.message_count),
        }
    )


class SessionCommandBase(BaseCommand):
    """Shared helpers for commands that operate on one chat session."""

    async def target_session(
        self, args: Mapping[str, str], context: CommandContext
    ) -> ChatSession:
        """Session named by the `session` option, or the active session."""
        return await context.sessions.require_session(args.get("session"))

    @staticmethod
    def label(session: ChatSession) -> str:
        return f"'{session.name}' (ID: {short_id(session.id)})"
