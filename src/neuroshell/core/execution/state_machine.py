"""
Execution engine.

The engine owns a pending-command stack and drains it one entry at a time:
parse, interpolate, look up, dispatch. Commands may push follow-up commands;
`\\silent` and `\\try` push boundary markers around their inner command, and
the engine interprets those markers while draining. Each script run ends with
a script marker so nesting depth can be bounded.

States:
    IDLE     nothing running; ready for execute()
    RUNNING  draining the stack
    HALTED   the last execute() stopped on an error (kept in `last_error`);
             the next execute() starts afresh
"""

from __future__ import annotations

import logging
import re

from neuroshell.constants import (
    SERVICE_INTERPOLATOR,
    SERVICE_OUTPUT,
    SERVICE_SCRIPTS,
    SERVICE_STACK,
    SERVICE_VARIABLES,
)
from neuroshell.core.commands.parser import CommandParser
from neuroshell.core.common.exceptions import (
    CommandExecutionError,
    EngineBusyError,
    NeuroShellError,
    StackOverflowError,
)
from neuroshell.core.common.logging_utils import LogContext, get_logger
from neuroshell.core.config.app_config import EngineConfig
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.engine_state import EngineState
from neuroshell.core.domain.parsed_command import ParsedCommand
from neuroshell.core.services.command_registry import CommandRegistry
from neuroshell.core.services.interpolation_service import Interpolator
from neuroshell.core.services.output_service import OutputService
from neuroshell.core.services.script_loader import ScriptLoader, script_command_line
from neuroshell.core.services.service_registry import ServiceRegistry
from neuroshell.core.services.stack_service import (
    BoundaryKind,
    BoundaryMarker,
    PendingCommandStack,
)
from neuroshell.core.services.variable_service import VariableService

logger = logging.getLogger(__name__)
struct_logger = get_logger(__name__)

_SCRIPT_PARAM = re.compile(r"_\d+")


class ExecutionEngine:
    """Stack-based interpreter for command-language input."""

    def __init__(
        self,
        command_registry: CommandRegistry,
        services: ServiceRegistry,
        config: EngineConfig | None = None,
    ) -> None:
        self._commands = command_registry
        self._services = services
        self._config = config or EngineConfig()
        self._state = EngineState.IDLE
        self._last_error: NeuroShellError | None = None
        self._try_frames: list[int] = []
        self._script_depth = 0
        self._parser = CommandParser(
            parse_mode_resolver=command_registry.parse_mode_for,
            default_command=self._default_command_name,
        )

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def last_error(self) -> NeuroShellError | None:
        return self._last_error

    @property
    def parser(self) -> CommandParser:
        return self._parser

    @property
    def commands(self) -> CommandRegistry:
        return self._commands

    @property
    def services(self) -> ServiceRegistry:
        return self._services

    @property
    def variables(self) -> VariableService:
        return self._services.get_required(SERVICE_VARIABLES, VariableService)

    @property
    def _interpolator(self) -> Interpolator:
        return self._services.get_required(SERVICE_INTERPOLATOR, Interpolator)

    @property
    def _stack(self) -> PendingCommandStack:
        return self._services.get_required(SERVICE_STACK, PendingCommandStack)

    @property
    def _output(self) -> OutputService:
        return self._services.get_required(SERVICE_OUTPUT, OutputService)

    @property
    def _scripts(self) -> ScriptLoader:
        return self._services.get_required(SERVICE_SCRIPTS, ScriptLoader)

    def _default_command_name(self) -> str:
        return self.variables.get_or("_default_command") or self._config.default_command

    async def execute(self, line: str) -> None:
        """
        Run one line of input, including everything it delegates to.

        Raises:
            EngineBusyError: If called while another execute() is running
            NeuroShellError: The first error not absorbed by `\\try`; the
                engine is left HALTED with the error in `last_error`
        """
        if self._state is EngineState.RUNNING:
            raise EngineBusyError()

        stack = self._stack
        stack.clear()
        self._output.reset()
        self._try_frames.clear()
        self._last_error = None
        self._script_depth = 0
        self._state = EngineState.RUNNING

        try:
            stack.push(line)
            await self._drain()
        except NeuroShellError as exc:
            self._halt(exc)
            raise
        except BaseException as exc:
            self._halt(CommandExecutionError(f"Unexpected failure: {exc!r}"))
            raise

        self._state = EngineState.IDLE

    async def execute_script(self, path: str, arguments: str = "") -> None:
        """Run a script file through the same pipeline as interactive input."""
        await self.execute(script_command_line(path, arguments))

    def pending(self) -> tuple[str, ...]:
        return self._stack.listing()

    def _halt(self, error: NeuroShellError) -> None:
        self._stack.clear()
        self._output.reset()
        self._try_frames.clear()
        self._script_depth = 0
        self._last_error = error
        self._state = EngineState.HALTED
        logger.debug("Engine halted: %s", error.message)

    async def _drain(self) -> None:
        stack = self._stack
        while (entry := stack.pop()) is not None:
            if isinstance(entry, BoundaryMarker):
                self._apply_marker(entry)
                continue
            try:
                await self._run_line(entry)
            except NeuroShellError as exc:
                if not self._try_frames:
                    raise
                self._absorb(exc)

    def _apply_marker(self, marker: BoundaryMarker) -> None:
        if marker.kind is BoundaryKind.SCRIPT:
            self._script_depth = max(0, self._script_depth - 1)
            return

        if marker.kind is BoundaryKind.SILENT:
            if marker.is_start:
                self._output.push_silence()
            else:
                self._output.pop_silence()
            return

        if marker.is_start:
            self._try_frames.append(marker.marker_id)
            return

        if self._try_frames and self._try_frames[-1] == marker.marker_id:
            self._try_frames.pop()
            self.variables.set("_status", "0")
            self.variables.set("_error", "")

    def _absorb(self, error: NeuroShellError) -> None:
        """Record `error` for the innermost try block and skip to its end."""
        frame_id = self._try_frames.pop()
        variables = self.variables
        variables.set("_status", "1")
        variables.set("_error", error.message)
        logger.debug("Error absorbed by try block #%d: %s", frame_id, error.message)

        stack = self._stack
        while (entry := stack.pop()) is not None:
            if not isinstance(entry, BoundaryMarker):
                continue
            if entry.kind is not BoundaryKind.TRY:
                self._apply_marker(entry)
            elif not entry.is_start and entry.marker_id == frame_id:
                return

    async def _run_line(self, text: str) -> None:
        command = self._parser.parse(text)
        if command.is_empty:
            return

        interpolator = self._interpolator
        name_result = interpolator.interpolate_with_report(command.name)
        self._warn_unresolved(command.name, name_result.unresolved)
        name = name_result.value.strip()

        if self._scripts.is_script(name):
            await self._run_script(name, command)
            return

        handler = self._commands.get_required(name)
        if handler.interpolates_input:
            command, unresolved = interpolator.interpolate_command(command)
            self._warn_unresolved(name, unresolved)

        if self._echo_enabled():
            self._output.write(f"%%> {text.strip()}")

        context = CommandContext(
            services=self._services,
            command_registry=self._commands,
            bracket_content=command.bracket_content,
        )
        stack = self._stack
        stack.begin_dispatch()
        try:
            with LogContext(struct_logger, command=name) as log:
                log.debug("dispatch")
                result = await handler.execute(command.options, command.message, context)
        except NeuroShellError:
            stack.discard_dispatch()
            raise
        except Exception as exc:
            stack.discard_dispatch()
            raise CommandExecutionError(
                f"\\{name} failed: {exc}", command_name=name
            ) from exc

        if not result.success:
            stack.discard_dispatch()
            raise CommandExecutionError(
                result.message or f"\\{name} failed", command_name=name
            )

        stack.commit_dispatch()
        if result.message:
            self._output.write(result.message)
            self.variables.set("_output", result.message)

    async def _run_script(self, path: str, command: ParsedCommand) -> None:
        limit = self._config.max_script_depth
        if self._script_depth >= limit:
            raise StackOverflowError(
                f"Script nesting exceeded {limit} levels at {path}", limit=limit
            )
        arguments = self._interpolator.interpolate(command.message)
        lines = self._scripts.load(path)

        variables = self.variables
        for key in [k for k in variables.snapshot(False) if _SCRIPT_PARAM.fullmatch(k)]:
            variables.delete(key)
        words = arguments.split()
        variables.set("_0", path)
        for position, word in enumerate(words, start=1):
            variables.set(f"_{position}", word)
        variables.set("_*", arguments)
        variables.set("_@", " ".join(words))

        logger.info("Running script %s (%d line(s))", path, len(lines))
        stack = self._stack
        end = BoundaryMarker(BoundaryKind.SCRIPT, stack.new_marker_id(), is_start=False)
        stack.push_all([*lines, end])
        self._script_depth += 1

    def _echo_enabled(self) -> bool:
        flag = self.variables.get_or("_echo_command")
        if flag:
            return flag.strip().lower() == "true"
        return self._config.echo_commands

    def _warn_unresolved(self, name: str, keys: list[str]) -> None:
        if keys:
            logger.warning(
                "Unresolved variable(s) in \\%s: %s",
                name,
                ", ".join(f"${{{k}}}" for k in keys),
            )
