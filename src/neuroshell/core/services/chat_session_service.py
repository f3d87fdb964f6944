"""
Chat session service.

Owns the session lifecycle (create, activate, rename, copy, delete), message
editing and JSON import/export. Storage is delegated to an
`ISessionRepository`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from neuroshell.constants import MAX_SESSION_NAME_LENGTH
from neuroshell.core.common.exceptions import NeuroShellError, ValidationError
from neuroshell.core.domain.chat_session import (
    ChatMessage,
    ChatSession,
    MessageRole,
    new_id,
    utcnow,
)
from neuroshell.core.interfaces.repositories_interface import ISessionRepository
from neuroshell.core.utils.identifier_resolution import MatchMode, resolve_identifier
from neuroshell.core.utils.message_index import IndexResolution, resolve_index

logger = logging.getLogger(__name__)

RESERVED_SESSION_NAMES = frozenset(
    {"new", "list", "active", "current", "default", "temp", "temporary"}
)
_DEFAULT_NAME_BASES = ("Session", "Chat", "Work", "Project")
_MAX_VERSION = 1000


class NoActiveSessionError(NeuroShellError):
    """Raised when a command needs the active session and none is set."""

    def __init__(self, message: str = "No active session. Use \\session-new to create one."):
        super().__init__(message)


def validate_session_name(name: str) -> str:
    """Normalise a user-supplied session name.

    Surrounding whitespace and one pair of matching quotes are stripped.

    Raises:
        ValidationError: If the result is empty, too long or contains
            control characters
    """
    processed = name.strip()
    if len(processed) >= 2 and processed[0] in "\"'" and processed[-1] == processed[0]:
        processed = processed[1:-1].strip()

    if not processed:
        raise ValidationError("session name cannot be empty")
    if len(processed) > MAX_SESSION_NAME_LENGTH:
        raise ValidationError(
            f"session name too long (max {MAX_SESSION_NAME_LENGTH} characters)"
        )
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in processed):
        raise ValidationError("session name contains invalid characters")
    return processed


class ChatSessionService:
    """Session operations used by the session commands and the send command."""

    def __init__(self, repository: ISessionRepository) -> None:
        self._repository = repository
        self._active_id: str | None = None

    async def _names(self) -> set[str]:
        return {s.name for s in await self._repository.get_all()}

    @staticmethod
    def _is_unavailable(name: str, taken: set[str]) -> bool:
        return name.lower() in RESERVED_SESSION_NAMES or name in taken

    async def generate_available_name(self, preferred: str) -> str:
        """Return `preferred`, or `preferred:vN` if it is reserved or taken."""
        taken = await self._names()
        if not self._is_unavailable(preferred, taken):
            return preferred
        for version in range(1, _MAX_VERSION + 1):
            candidate = f"{preferred}:v{version}"
            if not self._is_unavailable(candidate, taken):
                return candidate
        return f"{preferred}:v{int(utcnow().timestamp())}"

    async def generate_default_name(self) -> str:
        taken = await self._names()
        for base in _DEFAULT_NAME_BASES:
            for number in range(1, 1000):
                candidate = f"{base} {number}"
                if candidate not in taken:
                    return candidate
        return f"Session {int(utcnow().timestamp())}"

    async def create_session(
        self, name: str = "", system_prompt: str = "", activate: bool = True
    ) -> ChatSession:
        """Create a session; an empty name gets an auto-generated one."""
        if name.strip():
            final_name = await self.generate_available_name(validate_session_name(name))
        else:
            final_name = await self.generate_default_name()

        session = ChatSession(name=final_name, system_prompt=system_prompt)
        await self._repository.add(session)
        if activate:
            self._active_id = session.id
        logger.info("Created session %s (%s)", session.name, session.id)
        return session

    async def list_sessions(self) -> list[ChatSession]:
        return await self._repository.get_all()

    async def find_session(
        self, identifier: str, mode: MatchMode = MatchMode.NAME_SUBSTRING
    ) -> ChatSession:
        sessions = await self._repository.get_all()
        return resolve_identifier(sessions, identifier, mode=mode, kind="session")

    async def get_active_session(self) -> ChatSession | None:
        if self._active_id is None:
            return None
        session = await self._repository.get_by_id(self._active_id)
        if session is None:
            self._active_id = None
        return session

    async def require_session(self, identifier: str | None = None) -> ChatSession:
        """Return the session named by `identifier`, or the active one."""
        if identifier and identifier.strip():
            return await self.find_session(identifier)
        session = await self.get_active_session()
        if session is None:
            raise NoActiveSessionError()
        return session

    async def set_active_session(self, session: ChatSession) -> None:
        self._active_id = session.id

    def is_active(self, session: ChatSession) -> bool:
        return session.id == self._active_id

    async def delete_session(self, session: ChatSession) -> None:
        await self._repository.delete(session.id)
        if self._active_id == session.id:
            self._active_id = None
        logger.info("Deleted session %s (%s)", session.name, session.id)

    async def rename_session(self, session: ChatSession, new_name: str) -> ChatSession:
        name = validate_session_name(new_name)
        if name == session.name:
            return session
        if name.lower() in RESERVED_SESSION_NAMES:
            raise ValidationError(f"'{name}' is a reserved session name")
        if name in await self._names():
            raise ValidationError(f"A session named '{name}' already exists")
        session.name = name
        session.touch()
        return await self._repository.update(session)

    async def add_message(
        self, session: ChatSession, role: MessageRole, content: str
    ) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        session.messages.append(message)
        session.touch()
        await self._repository.update(session)
        return message

    def resolve_message(self, session: ChatSession, index_spec: str) -> IndexResolution:
        return resolve_index(index_spec, session.message_count)

    async def edit_message(
        self, session: ChatSession, index_spec: str, content: str
    ) -> IndexResolution:
        position = self.resolve_message(session, index_spec)
        target = session.messages[position.index]
        target.content = content
        target.timestamp = utcnow()
        session.touch()
        await self._repository.update(session)
        return position

    async def delete_message(
        self, session: ChatSession, index_spec: str
    ) -> tuple[IndexResolution, ChatMessage]:
        position = self.resolve_message(session, index_spec)
        removed = session.messages.pop(position.index)
        session.touch()
        await self._repository.update(session)
        return position, removed

    async def set_system_prompt(self, session: ChatSession, prompt: str) -> None:
        session.system_prompt = prompt
        session.touch()
        await self._repository.update(session)

    async def copy_session(self, source: ChatSession, target_name: str = "") -> ChatSession:
        """Deep-copy `source` under a new id and name and activate the copy."""
        if target_name.strip():
            name = validate_session_name(target_name)
            if name in await self._names():
                raise ValidationError(f"A session named '{name}' already exists")
            name = await self.generate_available_name(name)
        else:
            name = await self.generate_default_name()

        now = utcnow()
        copy = source.model_copy(
            deep=True,
            update={"id": new_id(), "name": name, "created_at": now, "updated_at": now},
        )
        await self._repository.add(copy)
        self._active_id = copy.id
        return copy

    async def export_json(self, session: ChatSession, path: str | Path) -> Path:
        target = Path(path)
        try:
            target.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise NeuroShellError(f"failed to write JSON file {target}: {exc}") from exc
        return target

    async def import_json(self, path: str | Path) -> ChatSession:
        """Load a session file under a fresh id and generated name, then activate it."""
        source = Path(path)
        try:
            raw = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise NeuroShellError(f"failed to read JSON file {source}: {exc}") from exc
        try:
            original = ChatSession.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            raise ValidationError(f"{source} is not a valid session file: {exc}") from exc

        now = utcnow()
        imported = original.model_copy(
            update={
                "id": new_id(),
                "name": await self.generate_default_name(),
                "created_at": now,
                "updated_at": now,
            }
        )
        await self._repository.add(imported)
        self._active_id = imported.id
        return imported
