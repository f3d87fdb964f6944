from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class ILLMClient(ABC):
    """Minimal chat-completion client used by the LLM service."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: Sequence[dict[str, str]],
        model: str,
        temperature: float | None = None,
    ) -> str:
        """Send role/content messages and return the assistant's reply text."""
