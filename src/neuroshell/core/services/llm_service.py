"""
LLM service.

`LLMService` turns a chat session into a completion request and returns the
reply text. The provider call goes through an `ILLMClient`;
`OpenAIChatClient` is the production implementation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import openai
from openai import AsyncOpenAI

from neuroshell.core.common.exceptions import ConfigurationError, LLMServiceError
from neuroshell.core.config.app_config import LLMConfig
from neuroshell.core.domain.chat_session import ChatSession
from neuroshell.core.interfaces.llm_client_interface import ILLMClient

logger = logging.getLogger(__name__)


class OpenAIChatClient(ILLMClient):
    """Chat-completion client backed by the official openai SDK."""

    def __init__(self, config: LLMConfig) -> None:
        self._config = config
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._config.api_key:
                raise ConfigurationError(
                    "No API key configured. Set OPENAI_API_KEY or llm.api_key."
                )
            self._client = AsyncOpenAI(
                api_key=self._config.api_key,
                base_url=self._config.api_url,
                timeout=self._config.timeout,
            )
        return self._client

    async def chat_completion(
        self,
        messages: Sequence[dict[str, str]],
        model: str,
        temperature: float | None = None,
    ) -> str:
        client = self._get_client()
        kwargs: dict = {"model": model, "messages": list(messages)}
        if temperature is not None:
            kwargs["temperature"] = temperature
        try:
            response = await client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            raise LLMServiceError(
                f"OpenAI request failed: {exc}", provider="openai"
            ) from exc

        if not response.choices:
            raise LLMServiceError("OpenAI returned no choices", provider="openai")
        return response.choices[0].message.content or ""


class LLMService:
    """Sends chat sessions to the configured model."""

    def __init__(self, client: ILLMClient, config: LLMConfig) -> None:
        self._client = client
        self._config = config

    @property
    def model(self) -> str:
        return self._config.model

    async def complete(self, session: ChatSession, model: str | None = None) -> str:
        """Return the model's reply to the full conversation in `session`."""
        target_model = model or self._config.model
        messages = session.to_llm_messages()
        logger.debug(
            "Requesting completion from %s with %d message(s)",
            target_model,
            len(messages),
        )
        return await self._client.chat_completion(
            messages, target_model, temperature=self._config.temperature
        )
