from __future__ import annotations

import logging

from neuroshell.core.domain.chat_session import ChatSession
from neuroshell.core.interfaces.repositories_interface import ISessionRepository

logger = logging.getLogger(__name__)


class InMemorySessionRepository(ISessionRepository):
    """In-memory implementation of the chat session repository.

    Sessions are kept in insertion order and are lost when the process exits.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ChatSession] = {}

    async def get_by_id(self, id: str) -> ChatSession | None:
        return self._sessions.get(id)

    async def get_by_name(self, name: str) -> ChatSession | None:
        return next((s for s in self._sessions.values() if s.name == name), None)

    async def get_all(self) -> list[ChatSession]:
        return list(self._sessions.values())

    async def add(self, entity: ChatSession) -> ChatSession:
        self._sessions[entity.id] = entity
        logger.debug("Added session %s (%s)", entity.name, entity.id)
        return entity

    async def update(self, entity: ChatSession) -> ChatSession:
        if entity.id not in self._sessions:
            return await self.add(entity)
        self._sessions[entity.id] = entity
        return entity

    async def delete(self, id: str) -> bool:
        if id in self._sessions:
            del self._sessions[id]
            return True
        return False
