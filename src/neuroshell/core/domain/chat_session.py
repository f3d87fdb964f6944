"""
Chat session domain models.

A session has a stable uuid and a human-chosen, mutable name. Both can be
used to address it (see `neuroshell.core.utils.identifier_resolution`).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import Field

from neuroshell.core.domain.model_bases import DomainModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(DomainModel):
    """A single message in a chat session."""

    id: str = Field(default_factory=new_id)
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow)


class ChatSession(DomainModel):
    """A named conversation with an optional system prompt."""

    id: str = Field(default_factory=new_id)
    name: str
    system_prompt: str = ""
    messages: list[ChatMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_llm_messages(self) -> list[dict[str, str]]:
        """Build the role/content list sent to a chat-completion API."""
        result: list[dict[str, str]] = []
        if self.system_prompt:
            result.append({"role": "system", "content": self.system_prompt})
        result.extend(
            {"role": m.role.value, "content": m.content} for m in self.messages
        )
        return result
