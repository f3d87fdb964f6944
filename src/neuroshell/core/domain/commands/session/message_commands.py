"""
Commands that edit the messages and system prompt of a session.

Message indices follow the `\\session-edit-msg` convention: a plain number
counts back from the newest message (`1` is the last), a leading dot counts
forward from the oldest (`.1` is the first).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.core.domain.chat_session import MessageRole
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.session.base import (
    SessionCommandBase,
    publish_session_metadata,
)

logger = logging.getLogger(__name__)


class _AddMessageCommand(SessionCommandBase):
    role: MessageRole

    @property
    def format(self) -> str:
        return f"\\{self.name}[session=name-or-id] content"

    @property
    def description(self) -> str:
        return f"Append a {self.role.value} message to a session without calling the LLM"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        if not message.strip():
            return self.failure(f"Message content is required. {self.usage}")
        session = await self.target_session(args, context)
        await context.sessions.add_message(session, self.role, message)
        publish_session_metadata(context, session)
        return self.success(
            f"Added {self.role.value} message to '{session.name}' "
            f"({session.message_count} messages)"
        )


class SessionAddUserMessageCommand(_AddMessageCommand):
    role = MessageRole.USER

    @property
    def name(self) -> str:
        return "session-add-usermsg"


class SessionAddAssistantMessageCommand(_AddMessageCommand):
    role = MessageRole.ASSISTANT

    @property
    def name(self) -> str:
        return "session-add-assistantmsg"


class SessionEditMessageCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-edit-msg"

    @property
    def format(self) -> str:
        return "\\session-edit-msg[idx=N|.N, session=name-or-id] new content"

    @property
    def description(self) -> str:
        return "Replace the content of one message (idx=1 is the newest, .1 the oldest)"

    @property
    def examples(self) -> list[str]:
        return [
            "\\session-edit-msg[idx=1] Corrected reply",
            "\\session-edit-msg[idx=.1] Rephrased first question",
        ]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        index_spec = args.get("idx", "").strip()
        if not index_spec:
            return self.failure(f"idx parameter is required. {self.usage}")
        if not message.strip():
            return self.failure(f"New content is required. {self.usage}")
        session = await self.target_session(args, context)
        position = await context.sessions.edit_message(session, index_spec, message)
        publish_session_metadata(context, session)
        return self.success(f"Edited {position.label} in '{session.name}'")


class SessionDeleteMessageCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-delete-msg"

    @property
    def format(self) -> str:
        return "\\session-delete-msg[idx=N|.N, session=name-or-id, confirm=true|false]"

    @property
    def description(self) -> str:
        return (
            "Delete one message (idx=1 is the newest, .1 the oldest); "
            "refused unless confirm=false"
        )

    @property
    def examples(self) -> list[str]:
        return [
            "\\session-delete-msg[idx=1, confirm=false]",
            "\\session-delete-msg[idx=.1, session=work, confirm=false]",
        ]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        index_spec = args.get("idx", "").strip()
        if not index_spec:
            return self.failure(f"idx parameter is required. {self.usage}")
        if message.strip():
            logger.warning("Ignoring message text passed to \\%s", self.name)

        session = await self.target_session(args, context)
        position = context.sessions.resolve_message(session, index_spec)
        if self.parse_bool(args, "confirm", default=True):
            target = session.messages[position.index]
            return self.failure(
                f"Not deleting {position.label} ({target.role.value}) from "
                f"'{session.name}'. Deletion is permanent; pass confirm=false "
                "to delete it."
            )

        position, removed = await context.sessions.delete_message(session, index_spec)
        publish_session_metadata(context, session)
        return self.success(
            f"Deleted {position.label} ({removed.role.value}) from '{session.name}'"
        )


class SessionEditSystemCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-edit-system"

    @property
    def format(self) -> str:
        return "\\session-edit-system[session=name-or-id] prompt"

    @property
    def description(self) -> str:
        return "Replace the system prompt of a session; an empty prompt clears it"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        session = await self.target_session(args, context)
        await context.sessions.set_system_prompt(session, message.strip())
        publish_session_metadata(context, session)
        if message.strip():
            return self.success(f"Updated system prompt of '{session.name}'")
        return self.success(f"Cleared system prompt of '{session.name}'")
