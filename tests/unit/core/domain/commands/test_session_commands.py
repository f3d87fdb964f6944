"""
Session command tests, driven through the engine the way an operator would.
"""

import io
import json
from pathlib import Path

import pytest
import pytest_asyncio

from neuroshell.core.common.exceptions import (
    AmbiguousIdentifierError,
    CommandExecutionError,
    IndexOutOfBoundsError,
    NoMatchingIdentifierError,
    ValidationError,
)
from neuroshell.core.execution.state_machine import ExecutionEngine
from neuroshell.core.services.chat_session_service import (
    ChatSessionService,
    NoActiveSessionError,
)


def sessions(engine: ExecutionEngine) -> ChatSessionService:
    return engine.services.get_required("sessions", ChatSessionService)


async def active_name(engine: ExecutionEngine) -> str | None:
    session = await sessions(engine).get_active_session()
    return session.name if session else None


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_new_session_is_active_and_published(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new work")

        variables = engine.variables
        assert await active_name(engine) == "work"
        assert variables.get("#session_name") == "work"
        assert variables.get("#message_count") == "0"
        assert variables.get("_session_id") == variables.get("#session_id")

    @pytest.mark.asyncio
    async def test_taken_name_gets_version_suffix(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new work")
        await engine.execute("\\session-new work")

        assert await active_name(engine) == "work:v1"

    @pytest.mark.asyncio
    async def test_unnamed_session_gets_default_name(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new")

        assert await active_name(engine) == "Session 1"

    @pytest.mark.asyncio
    async def test_list_marks_active_session(
        self, engine: ExecutionEngine, output: io.StringIO
    ) -> None:
        await engine.execute("\\session-new beta")
        await engine.execute("\\session-new alpha")
        output.truncate(0)
        output.seek(0)

        await engine.execute("\\session-list[sort=name]")

        listing = output.getvalue().splitlines()
        assert listing[0] == "Sessions (2):"
        assert listing[1].startswith(" * alpha (ID: ")
        assert listing[2].startswith("   beta (ID: ")

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_sort(self, engine: ExecutionEngine) -> None:
        with pytest.raises(ValidationError):
            await engine.execute("\\session-list[sort=size]")

    @pytest.mark.asyncio
    async def test_activate_by_name_substring(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new project-alpha")
        await engine.execute("\\session-new scratch")

        await engine.execute("\\session-activate alpha")

        assert await active_name(engine) == "project-alpha"
        assert engine.variables.get("#active_session_name") == "project-alpha"
        assert engine.variables.get("#session_name") == "project-alpha"

    @pytest.mark.asyncio
    async def test_activate_by_id_prefix(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new first")
        first_id = engine.variables.get("#session_id")
        await engine.execute("\\session-new second")

        await engine.execute(f"\\session-activate[id=true] {first_id[:8]}")

        assert await active_name(engine) == "first"
        assert engine.variables.get("#active_session_id") == first_id

    @pytest.mark.asyncio
    async def test_activate_ambiguous(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new work")
        await engine.execute("\\session-new work2")

        await engine.execute("\\session-activate work")
        assert await active_name(engine) == "work"

        with pytest.raises(AmbiguousIdentifierError) as exc_info:
            await engine.execute("\\session-activate wo")
        assert len(exc_info.value.candidates) == 2

    @pytest.mark.asyncio
    async def test_activate_no_match_lists_candidates(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new work")

        with pytest.raises(NoMatchingIdentifierError) as exc_info:
            await engine.execute("\\session-activate xyz")
        assert exc_info.value.candidates[0].startswith("work (ID: ")

    @pytest.mark.asyncio
    async def test_try_absorbs_lookup_failure(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\try \\session-activate missing")

        assert engine.variables.get("_status") == "1"
        assert "No sessions found" in engine.variables.get("_error")

    @pytest.mark.asyncio
    async def test_rename(self, engine: ExecutionEngine, output: io.StringIO) -> None:
        await engine.execute("\\session-new draft")

        await engine.execute("\\session-rename final")

        assert await active_name(engine) == "final"
        assert output.getvalue().splitlines()[-1] == "Renamed session 'draft' to 'final'"

    @pytest.mark.asyncio
    async def test_rename_to_reserved_name_fails(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new draft")

        with pytest.raises(ValidationError):
            await engine.execute("\\session-rename list")

    @pytest.mark.asyncio
    async def test_copy_activates_copy(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new original")
        await engine.execute("\\session-add-usermsg hello")

        await engine.execute("\\session-copy[session=original] clone")

        assert await active_name(engine) == "clone"
        assert engine.variables.get("#message_count") == "1"
        original = await sessions(engine).find_session("original")
        clone = await sessions(engine).find_session("clone")
        assert clone.id != original.id
        clone.messages[0].content = "changed"
        assert original.messages[0].content == "hello"

    @pytest.mark.asyncio
    async def test_delete_clears_active_session(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new doomed")

        await engine.execute("\\session-delete doomed")

        assert await active_name(engine) is None
        assert not engine.variables.has("#session_id")

    @pytest.mark.asyncio
    async def test_show(self, engine: ExecutionEngine, output: io.StringIO) -> None:
        await engine.execute('\\session-new[system="Be kind"] demo')
        await engine.execute("\\session-add-usermsg question")
        await engine.execute("\\session-add-assistantmsg answer")
        output.truncate(0)
        output.seek(0)

        await engine.execute("\\session-show")

        text = output.getvalue()
        assert text.startswith("Session 'demo' (ID: ")
        assert "System: Be kind" in text
        assert "  [.1|2] user: question" in text
        assert "  [.2|1] assistant: answer" in text

    @pytest.mark.asyncio
    async def test_commands_without_active_session_fail(self, engine: ExecutionEngine) -> None:
        with pytest.raises(NoActiveSessionError):
            await engine.execute("\\session-show")


class TestMessages:
    @pytest_asyncio.fixture
    async def chat(self, engine: ExecutionEngine) -> ExecutionEngine:
        await engine.execute("\\session-new chat")
        for index in range(1, 6):
            await engine.execute(f"\\session-add-usermsg message {index}")
        return engine

    async def contents(self, engine: ExecutionEngine) -> list[str]:
        session = await sessions(engine).get_active_session()
        return [m.content for m in session.messages]

    @pytest.mark.asyncio
    async def test_edit_requires_index(self, chat: ExecutionEngine) -> None:
        with pytest.raises(CommandExecutionError) as exc_info:
            await chat.execute("\\session-edit-msg corrected")

        assert "idx parameter is required" in exc_info.value.message
        assert await self.contents(chat) == [f"message {i}" for i in range(1, 6)]

    @pytest.mark.asyncio
    async def test_edit_last_message(self, chat: ExecutionEngine, output: io.StringIO) -> None:
        await chat.execute("\\session-edit-msg[idx=1] corrected")

        assert (await self.contents(chat))[-1] == "corrected"
        assert output.getvalue().splitlines()[-1] == "Edited last message in 'chat'"

    @pytest.mark.asyncio
    async def test_edit_first_message_with_forward_index(
        self, chat: ExecutionEngine, output: io.StringIO
    ) -> None:
        await chat.execute("\\session-edit-msg[idx=.1] rewritten")

        assert (await self.contents(chat))[0] == "rewritten"
        assert output.getvalue().splitlines()[-1] == "Edited first message in 'chat'"

    @pytest.mark.asyncio
    async def test_edit_out_of_range(self, chat: ExecutionEngine) -> None:
        with pytest.raises(IndexOutOfBoundsError) as exc_info:
            await chat.execute("\\session-edit-msg[idx=6] nope")
        assert "valid range: 1-5" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_delete_second_to_last(self, chat: ExecutionEngine, output: io.StringIO) -> None:
        await chat.execute("\\session-delete-msg[idx=2, confirm=false]")

        assert await self.contents(chat) == [
            "message 1",
            "message 2",
            "message 3",
            "message 5",
        ]
        assert chat.variables.get("#message_count") == "4"
        assert output.getvalue().splitlines()[-1] == (
            "Deleted second-to-last message (user) from 'chat'"
        )

    @pytest.mark.asyncio
    async def test_delete_requires_index(self, chat: ExecutionEngine) -> None:
        with pytest.raises(CommandExecutionError) as exc_info:
            await chat.execute("\\session-delete-msg")

        assert "idx parameter is required" in exc_info.value.message
        assert len(await self.contents(chat)) == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("options", ["idx=1", "idx=1, confirm=true", "idx=1, confirm"])
    async def test_delete_refused_without_confirm_false(
        self, chat: ExecutionEngine, options: str
    ) -> None:
        with pytest.raises(CommandExecutionError) as exc_info:
            await chat.execute(f"\\session-delete-msg[{options}]")

        assert "confirm=false" in exc_info.value.message
        assert await self.contents(chat) == [f"message {i}" for i in range(1, 6)]
        assert chat.variables.get("#message_count") == "5"

    @pytest.mark.asyncio
    async def test_add_message_requires_content(self, chat: ExecutionEngine) -> None:
        with pytest.raises(CommandExecutionError):
            await chat.execute("\\session-add-assistantmsg")

    @pytest.mark.asyncio
    async def test_edit_system_prompt(self, chat: ExecutionEngine) -> None:
        await chat.execute("\\session-edit-system You are a pirate")
        session = await sessions(chat).get_active_session()
        assert session.system_prompt == "You are a pirate"

        await chat.execute("\\session-edit-system")
        assert session.system_prompt == ""


class TestTransfer:
    @pytest.mark.asyncio
    async def test_export_then_import(
        self, engine: ExecutionEngine, tmp_path: Path
    ) -> None:
        path = tmp_path / "chat.json"
        await engine.execute("\\session-new source")
        await engine.execute("\\session-add-usermsg kept")
        source_id = engine.variables.get("#session_id")

        await engine.execute(f"\\session-json-export[file={path}]")
        assert json.loads(path.read_text(encoding="utf-8"))["id"] == source_id

        await engine.execute(f"\\session-json-import {path}")

        imported = await sessions(engine).get_active_session()
        assert imported.id != source_id
        assert imported.name == "Session 1"
        assert [m.content for m in imported.messages] == ["kept"]
        assert engine.variables.get("#message_count") == "1"

    @pytest.mark.asyncio
    async def test_import_invalid_file(self, engine: ExecutionEngine, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValidationError):
            await engine.execute(f"\\session-json-import[file={path}]")

    @pytest.mark.asyncio
    async def test_export_requires_path(self, engine: ExecutionEngine) -> None:
        await engine.execute("\\session-new x")

        with pytest.raises(CommandExecutionError):
            await engine.execute("\\session-json-export")
