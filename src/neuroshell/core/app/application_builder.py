"""
Engine assembly.

`build_engine` wires configuration, services and commands into a ready
`ExecutionEngine`. Every call produces fresh registries and stores, so tests
and embedders can build as many independent engines as they need.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

from neuroshell.constants import (
    SERVICE_CONFIG,
    SERVICE_INTERPOLATOR,
    SERVICE_LLM,
    SERVICE_OUTPUT,
    SERVICE_SCRIPTS,
    SERVICE_SESSIONS,
    SERVICE_STACK,
    SERVICE_VARIABLES,
)
from neuroshell.core.config.app_config import AppConfig
from neuroshell.core.execution.state_machine import ExecutionEngine
from neuroshell.core.interfaces.llm_client_interface import ILLMClient
from neuroshell.core.interfaces.repositories_interface import ISessionRepository
from neuroshell.core.repositories.in_memory_session_repository import (
    InMemorySessionRepository,
)
from neuroshell.core.services.chat_session_service import ChatSessionService
from neuroshell.core.services.command_registration import register_all_commands
from neuroshell.core.services.command_registry import CommandRegistry
from neuroshell.core.services.interpolation_service import Interpolator
from neuroshell.core.services.llm_service import LLMService, OpenAIChatClient
from neuroshell.core.services.output_service import OutputService
from neuroshell.core.services.script_loader import ScriptLoader
from neuroshell.core.services.service_registry import ServiceRegistry
from neuroshell.core.services.stack_service import PendingCommandStack
from neuroshell.core.services.variable_service import VariableService

logger = logging.getLogger(__name__)


def build_services(
    config: AppConfig,
    *,
    output_stream: TextIO | None = None,
    llm_client: ILLMClient | None = None,
    session_repository: ISessionRepository | None = None,
    script_dir: str | Path | None = None,
) -> ServiceRegistry:
    """Create and register every service the engine and commands use."""
    services = ServiceRegistry()

    variables = VariableService()
    services.register(SERVICE_CONFIG, config)
    services.register(SERVICE_VARIABLES, variables)
    services.register(
        SERVICE_INTERPOLATOR,
        Interpolator(variables, max_depth=config.engine.interpolation_max_depth),
    )
    services.register(
        SERVICE_STACK, PendingCommandStack(max_size=config.engine.max_stack_size)
    )
    services.register(SERVICE_OUTPUT, OutputService(output_stream))
    services.register(
        SERVICE_SESSIONS,
        ChatSessionService(session_repository or InMemorySessionRepository()),
    )
    services.register(
        SERVICE_LLM,
        LLMService(llm_client or OpenAIChatClient(config.llm), config.llm),
    )
    services.register(
        SERVICE_SCRIPTS,
        ScriptLoader(script_dir, extension=config.engine.script_extension),
    )
    return services


def build_engine(
    config: AppConfig | None = None,
    *,
    output_stream: TextIO | None = None,
    llm_client: ILLMClient | None = None,
    session_repository: ISessionRepository | None = None,
    script_dir: str | Path | None = None,
) -> ExecutionEngine:
    """
    Build a fully wired execution engine.

    Args:
        config: Application configuration; defaults are used when omitted
        output_stream: Where command output goes (stdout by default)
        llm_client: LLM client override, e.g. a fake in tests
        session_repository: Session storage override
        script_dir: Directory relative script paths are resolved against

    Returns:
        An idle ExecutionEngine
    """
    config = config or AppConfig()
    services = build_services(
        config,
        output_stream=output_stream,
        llm_client=llm_client,
        session_repository=session_repository,
        script_dir=script_dir,
    )

    commands = CommandRegistry()
    register_all_commands(commands)

    engine = ExecutionEngine(commands, services, config.engine)
    if config.engine.echo_commands:
        engine.variables.set("_echo_command", "true")

    logger.debug(
        "Built engine with %d commands and services %s",
        len(commands),
        ", ".join(services.names()),
    )
    return engine
