from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.core.domain.chat_session import MessageRole
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.base_command import BaseCommand
from neuroshell.core.domain.commands.session.base import publish_session_metadata

logger = logging.getLogger(__name__)


class SendCommand(BaseCommand):
    """Send a message to the LLM within the active chat session.

    This is the default command: any input line without a leading backslash
    is wrapped into it. When no session is active one is created using the
    configured auto-session name.
    """

    @property
    def name(self) -> str:
        return "send"

    @property
    def format(self) -> str:
        return "\\send[model=name] message"

    @property
    def description(self) -> str:
        return "Send a message to the LLM and print the reply"

    @property
    def examples(self) -> list[str]:
        return ["\\send Explain closures in Python", "What is a monad?"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        if not message.strip():
            return self.failure(f"Message is required. {self.usage}")

        sessions = context.sessions
        session = await sessions.get_active_session()
        if session is None:
            session = await sessions.create_session(
                context.config.session.auto_session_name,
                context.config.session.default_system_prompt,
            )
            logger.info("Created session %s for send", session.name)

        await sessions.add_message(session, MessageRole.USER, message)
        reply = await context.llm.complete(session, model=args.get("model") or None)
        await sessions.add_message(session, MessageRole.ASSISTANT, reply)

        variables = context.variables
        variables.push_history(reply, context.config.engine.history_slots)
        publish_session_metadata(context, session)
        return self.success(reply, session_id=session.id)
