from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from neuroshell.constants import (
    SERVICE_CONFIG,
    SERVICE_INTERPOLATOR,
    SERVICE_LLM,
    SERVICE_OUTPUT,
    SERVICE_SESSIONS,
    SERVICE_STACK,
    SERVICE_VARIABLES,
)
from neuroshell.core.common.exceptions import ValidationError
from neuroshell.core.services.output_service import OutputService
from neuroshell.core.services.stack_service import (
    BoundaryKind,
    BoundaryMarker,
    PendingCommandStack,
)
from neuroshell.core.services.variable_service import VariableService

if TYPE_CHECKING:  # pragma: no cover
    from neuroshell.core.config.app_config import AppConfig
    from neuroshell.core.services.chat_session_service import ChatSessionService
    from neuroshell.core.services.command_registry import CommandRegistry
    from neuroshell.core.services.interpolation_service import Interpolator
    from neuroshell.core.services.llm_service import LLMService
    from neuroshell.core.services.service_registry import ServiceRegistry


@dataclass(slots=True)
class CommandContext:
    """Typed context passed to commands during execution.

    Services are resolved from the registry on each access, so commands never
    hold on to them across calls.
    """

    services: ServiceRegistry
    command_registry: CommandRegistry
    bracket_content: str = ""

    @property
    def variables(self) -> VariableService:
        return self.services.get_required(SERVICE_VARIABLES, VariableService)

    @property
    def interpolator(self) -> Interpolator:
        return self.services.get_required(SERVICE_INTERPOLATOR)

    @property
    def output(self) -> OutputService:
        return self.services.get_required(SERVICE_OUTPUT, OutputService)

    @property
    def sessions(self) -> ChatSessionService:
        return self.services.get_required(SERVICE_SESSIONS)

    @property
    def llm(self) -> LLMService:
        return self.services.get_required(SERVICE_LLM)

    @property
    def config(self) -> AppConfig:
        return self.services.get_required(SERVICE_CONFIG)

    def push_command(self, text: str) -> None:
        """Queue a follow-up command to run right after the current one.

        Several pushes from one command run in push order, before anything
        that was already pending.
        """
        text = text.strip()
        if not text:
            raise ValidationError("Cannot push an empty command")
        self._stack.push(text)

    def push_block(self, kind: BoundaryKind, inner: str) -> None:
        """Queue `inner` wrapped in a silent/try block."""
        stack = self._stack
        marker_id = stack.new_marker_id()
        stack.push(BoundaryMarker(kind, marker_id, is_start=True))
        if inner.strip():
            stack.push(inner.strip())
        stack.push(BoundaryMarker(kind, marker_id, is_start=False))

    def pending_commands(self) -> tuple[str, ...]:
        return self._stack.listing()

    @property
    def _stack(self) -> PendingCommandStack:
        return self.services.get_required(SERVICE_STACK, PendingCommandStack)
