"""Command registration, run once at startup in a fixed order."""

import logging

from neuroshell.core.domain.commands.base_command import BaseCommand
from neuroshell.core.domain.commands.builtin.conditional_commands import (
    IfCommand,
    IfNotCommand,
)
from neuroshell.core.domain.commands.builtin.control_commands import (
    RunCommand,
    ShowStackCommand,
    SilentCommand,
    TryCommand,
)
from neuroshell.core.domain.commands.builtin.echo_command import EchoCommand
from neuroshell.core.domain.commands.builtin.export_command import ExportCommand
from neuroshell.core.domain.commands.builtin.help_command import HelpCommand
from neuroshell.core.domain.commands.builtin.send_command import SendCommand
from neuroshell.core.domain.commands.builtin.variable_commands import (
    GetCommand,
    SetCommand,
    VarsCommand,
)
from neuroshell.core.domain.commands.session.lifecycle_commands import (
    SessionActivateCommand,
    SessionCopyCommand,
    SessionDeleteCommand,
    SessionListCommand,
    SessionNewCommand,
    SessionRenameCommand,
    SessionShowCommand,
)
from neuroshell.core.domain.commands.session.message_commands import (
    SessionAddAssistantMessageCommand,
    SessionAddUserMessageCommand,
    SessionDeleteMessageCommand,
    SessionEditMessageCommand,
    SessionEditSystemCommand,
)
from neuroshell.core.domain.commands.session.transfer_commands import (
    SessionJsonExportCommand,
    SessionJsonImportCommand,
)
from neuroshell.core.services.command_registry import CommandRegistry

logger = logging.getLogger(__name__)

BUILTIN_COMMANDS: tuple[type[BaseCommand], ...] = (
    SetCommand,
    GetCommand,
    VarsCommand,
    EchoCommand,
    HelpCommand,
    SilentCommand,
    TryCommand,
    RunCommand,
    IfCommand,
    IfNotCommand,
    ShowStackCommand,
    SendCommand,
    ExportCommand,
)

SESSION_COMMANDS: tuple[type[BaseCommand], ...] = (
    SessionNewCommand,
    SessionListCommand,
    SessionActivateCommand,
    SessionShowCommand,
    SessionRenameCommand,
    SessionCopyCommand,
    SessionDeleteCommand,
    SessionAddUserMessageCommand,
    SessionAddAssistantMessageCommand,
    SessionEditMessageCommand,
    SessionDeleteMessageCommand,
    SessionEditSystemCommand,
    SessionJsonExportCommand,
    SessionJsonImportCommand,
)


def _register_commands(
    registry: CommandRegistry, command_types: tuple[type[BaseCommand], ...]
) -> None:
    for command_type in command_types:
        registry.register(command_type())


def register_builtin_commands(registry: CommandRegistry) -> None:
    """Register variable, output, control and LLM commands."""
    _register_commands(registry, BUILTIN_COMMANDS)


def register_session_commands(registry: CommandRegistry) -> None:
    """Register the chat session management commands."""
    _register_commands(registry, SESSION_COMMANDS)


def register_all_commands(registry: CommandRegistry) -> None:
    """Register every command shipped with NeuroShell.

    Args:
        registry: The command registry to register commands with

    Raises:
        CommandRegistrationError: If any command name is registered twice
    """
    register_builtin_commands(registry)
    register_session_commands(registry)
    logger.debug("Registered %d commands", len(registry))
