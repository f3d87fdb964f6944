"""
Session lifecycle commands: create, list, activate, show, rename, copy, delete.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.core.common.exceptions import ValidationError
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.session.base import (
    SessionCommandBase,
    publish_session_metadata,
)
from neuroshell.core.utils.identifier_resolution import MatchMode, short_id

logger = logging.getLogger(__name__)


class SessionNewCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-new"

    @property
    def format(self) -> str:
        return "\\session-new[system=prompt] [name]"

    @property
    def description(self) -> str:
        return "Create a new chat session and make it active"

    @property
    def examples(self) -> list[str]:
        return [
            "\\session-new work",
            '\\session-new[system="You are a terse reviewer"] review',
        ]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        system_prompt = args.get("system")
        if system_prompt is None:
            system_prompt = context.config.session.default_system_prompt
        session = await context.sessions.create_session(message, system_prompt)
        publish_session_metadata(context, session)
        context.variables.set("_session_id", session.id)
        return self.success(
            f"Created session {self.label(session)}", session_id=session.id
        )


class SessionListCommand(SessionCommandBase):
    _SORT_KEYS = {
        "name": lambda s: s.name.lower(),
        "created": lambda s: s.created_at,
        "updated": lambda s: s.updated_at,
    }

    @property
    def name(self) -> str:
        return "session-list"

    @property
    def format(self) -> str:
        return "\\session-list[sort=name|created|updated, order=asc|desc]"

    @property
    def description(self) -> str:
        return "List chat sessions; the active one is marked with *"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        sort = args.get("sort", "created").strip().lower() or "created"
        order = args.get("order", "asc").strip().lower() or "asc"
        if sort not in self._SORT_KEYS:
            raise ValidationError(f"Invalid sort '{sort}'. {self.usage}")
        if order not in ("asc", "desc"):
            raise ValidationError(f"Invalid order '{order}'. {self.usage}")

        sessions_service = context.sessions
        sessions = sorted(
            await sessions_service.list_sessions(),
            key=self._SORT_KEYS[sort],
            reverse=order == "desc",
        )
        if not sessions:
            return self.success("No sessions. Use \\session-new to create one.")

        lines = [f"Sessions ({len(sessions)}):"]
        for session in sessions:
            marker = "*" if sessions_service.is_active(session) else " "
            lines.append(
                f" {marker} {session.name} (ID: {short_id(session.id)}, "
                f"{session.message_count} messages)"
            )
        return self.success("\n".join(lines), count=len(sessions))


class SessionActivateCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-activate"

    @property
    def format(self) -> str:
        return "\\session-activate[id=true|false] name-or-id"

    @property
    def description(self) -> str:
        return "Activate a session by name (substring) or, with id=true, by ID prefix"

    @property
    def examples(self) -> list[str]:
        return ["\\session-activate work", "\\session-activate[id=true] 3f2a"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        sessions = context.sessions
        if not message.strip():
            active = await sessions.get_active_session()
            if active is None:
                return self.success("No active session")
            publish_session_metadata(context, active)
            return self.success(f"Active session: {self.label(active)}")

        mode = MatchMode.ID_PREFIX if self.parse_bool(args, "id") else MatchMode.NAME_SUBSTRING
        session = await sessions.find_session(message, mode)
        await sessions.set_active_session(session)

        publish_session_metadata(context, session)
        variables = context.variables
        variables.set("#active_session_id", session.id)
        variables.set("#active_session_name", session.name)
        variables.set("_session_id", session.id)
        return self.success(f"Activated session {self.label(session)}")


class SessionShowCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-show"

    @property
    def format(self) -> str:
        return "\\session-show [name-or-id]"

    @property
    def description(self) -> str:
        return "Show a session's system prompt and messages (default: active session)"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        session = await context.sessions.require_session(
            args.get("session") or message
        )
        lines = [
            f"Session {self.label(session)}",
            f"Created: {session.created_at.isoformat(timespec='seconds')}",
            f"Messages: {session.message_count}",
        ]
        if session.system_prompt:
            lines.append(f"System: {session.system_prompt}")
        total = session.message_count
        for position, msg in enumerate(session.messages, start=1):
            lines.append(f"  [.{position}|{total - position + 1}] {msg.role.value}: {msg.content}")
        publish_session_metadata(context, session)
        return self.success("\n".join(lines))


class SessionRenameCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-rename"

    @property
    def format(self) -> str:
        return "\\session-rename[session=name-or-id] new-name"

    @property
    def description(self) -> str:
        return "Rename a session (default: active session)"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        if not message.strip():
            return self.failure(f"New name is required. {self.usage}")
        session = await self.target_session(args, context)
        old_name = session.name
        session = await context.sessions.rename_session(session, message)
        publish_session_metadata(context, session)
        return self.success(f"Renamed session '{old_name}' to '{session.name}'")


class SessionCopyCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-copy"

    @property
    def format(self) -> str:
        return "\\session-copy[session=name-or-id] [new-name]"

    @property
    def description(self) -> str:
        return "Copy a session under a new name and make the copy active"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        source = await self.target_session(args, context)
        copy = await context.sessions.copy_session(source, message)
        publish_session_metadata(context, copy)
        return self.success(
            f"Copied session '{source.name}' to {self.label(copy)}",
            session_id=copy.id,
        )


class SessionDeleteCommand(SessionCommandBase):
    @property
    def name(self) -> str:
        return "session-delete"

    @property
    def format(self) -> str:
        return "\\session-delete[id=true|false] name-or-id"

    @property
    def description(self) -> str:
        return "Delete a session by name (substring) or, with id=true, by ID prefix"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        if not message.strip():
            return self.failure(f"Session name or ID is required. {self.usage}")
        mode = MatchMode.ID_PREFIX if self.parse_bool(args, "id") else MatchMode.NAME_SUBSTRING
        sessions = context.sessions
        session = await sessions.find_session(message, mode)
        await sessions.delete_session(session)
        context.variables.replace_metadata({})
        return self.success(f"Deleted session {self.label(session)}")
