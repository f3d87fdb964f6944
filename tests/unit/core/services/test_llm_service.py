from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import openai
import pytest

from neuroshell.core.common.exceptions import ConfigurationError, LLMServiceError
from neuroshell.core.config.app_config import LLMConfig
from neuroshell.core.domain.chat_session import ChatMessage, ChatSession, MessageRole
from neuroshell.core.services.llm_service import LLMService, OpenAIChatClient
from tests.conftest import FakeLLMClient


def completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def session() -> ChatSession:
    return ChatSession(
        name="demo",
        system_prompt="Be brief",
        messages=[ChatMessage(role=MessageRole.USER, content="hi")],
    )


@pytest.mark.asyncio
async def test_llm_service_sends_session_messages(session: ChatSession) -> None:
    client = FakeLLMClient(["hello"])
    service = LLMService(client, LLMConfig(model="m1", temperature=0.2))

    reply = await service.complete(session)

    assert reply == "hello"
    assert client.calls == [
        {
            "messages": [
                {"role": "system", "content": "Be brief"},
                {"role": "user", "content": "hi"},
            ],
            "model": "m1",
            "temperature": 0.2,
        }
    ]


@pytest.mark.asyncio
async def test_llm_service_model_override(session: ChatSession) -> None:
    client = FakeLLMClient()
    service = LLMService(client, LLMConfig(model="m1"))

    await service.complete(session, model="m2")

    assert client.calls[0]["model"] == "m2"
    assert service.model == "m1"


@pytest.mark.asyncio
async def test_openai_client_requires_api_key() -> None:
    client = OpenAIChatClient(LLMConfig())

    with pytest.raises(ConfigurationError):
        await client.chat_completion([{"role": "user", "content": "hi"}], "gpt-4o-mini")


@pytest.mark.asyncio
async def test_openai_client_returns_first_choice() -> None:
    config = LLMConfig(api_key="sk-test", api_url="http://localhost:9999/v1", timeout=5)
    with patch("neuroshell.core.services.llm_service.AsyncOpenAI") as client_cls:
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=completion("pong"))
        client_cls.return_value = sdk

        client = OpenAIChatClient(config)
        reply = await client.chat_completion(
            [{"role": "user", "content": "ping"}], "gpt-test", temperature=0.5
        )

    assert reply == "pong"
    client_cls.assert_called_once_with(
        api_key="sk-test", base_url="http://localhost:9999/v1", timeout=5
    )
    sdk.chat.completions.create.assert_awaited_once_with(
        model="gpt-test",
        messages=[{"role": "user", "content": "ping"}],
        temperature=0.5,
    )


@pytest.mark.asyncio
async def test_openai_client_wraps_sdk_errors() -> None:
    with patch("neuroshell.core.services.llm_service.AsyncOpenAI") as client_cls:
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(side_effect=openai.OpenAIError("down"))
        client_cls.return_value = sdk

        client = OpenAIChatClient(LLMConfig(api_key="sk-test"))
        with pytest.raises(LLMServiceError) as exc_info:
            await client.chat_completion([], "gpt-test")

    assert exc_info.value.provider == "openai"
    assert "down" in exc_info.value.message


@pytest.mark.asyncio
async def test_openai_client_rejects_empty_choices() -> None:
    with patch("neuroshell.core.services.llm_service.AsyncOpenAI") as client_cls:
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[]))
        client_cls.return_value = sdk

        client = OpenAIChatClient(LLMConfig(api_key="sk-test"))
        with pytest.raises(LLMServiceError):
            await client.chat_completion([], "gpt-test")
