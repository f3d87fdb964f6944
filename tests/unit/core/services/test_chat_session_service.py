import pytest

from neuroshell.core.common.exceptions import ValidationError
from neuroshell.core.domain.chat_session import MessageRole
from neuroshell.core.repositories.in_memory_session_repository import (
    InMemorySessionRepository,
)
from neuroshell.core.services.chat_session_service import (
    ChatSessionService,
    validate_session_name,
)


@pytest.fixture
def service() -> ChatSessionService:
    return ChatSessionService(InMemorySessionRepository())


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("  work  ", "work"), ('"my chat"', "my chat"), ("'quoted'", "quoted")],
)
def test_validate_session_name(raw: str, expected: str) -> None:
    assert validate_session_name(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", '""', "a" * 65, "bad\x07name"])
def test_validate_session_name_rejects(raw: str) -> None:
    with pytest.raises(ValidationError):
        validate_session_name(raw)


@pytest.mark.asyncio
async def test_reserved_name_gets_suffix(service: ChatSessionService) -> None:
    session = await service.create_session("new")

    assert session.name == "new:v1"


@pytest.mark.asyncio
async def test_default_names_count_up(service: ChatSessionService) -> None:
    first = await service.create_session()
    second = await service.create_session()

    assert (first.name, second.name) == ("Session 1", "Session 2")


@pytest.mark.asyncio
async def test_create_without_activation(service: ChatSessionService) -> None:
    await service.create_session("inactive", activate=False)

    assert await service.get_active_session() is None


@pytest.mark.asyncio
async def test_add_message_touches_session(service: ChatSessionService) -> None:
    session = await service.create_session("chat")
    before = session.updated_at

    await service.add_message(session, MessageRole.USER, "hello")

    assert session.message_count == 1
    assert session.updated_at >= before


@pytest.mark.asyncio
async def test_rename_to_taken_name_fails(service: ChatSessionService) -> None:
    await service.create_session("one")
    two = await service.create_session("two")

    with pytest.raises(ValidationError):
        await service.rename_session(two, "one")


@pytest.mark.asyncio
async def test_copy_to_taken_name_fails(service: ChatSessionService) -> None:
    one = await service.create_session("one")

    with pytest.raises(ValidationError):
        await service.copy_session(one, "one")


@pytest.mark.asyncio
async def test_require_session_by_identifier(service: ChatSessionService) -> None:
    target = await service.create_session("target")
    await service.create_session("other")

    assert await service.require_session("targ") is target
