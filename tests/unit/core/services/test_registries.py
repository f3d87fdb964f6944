from collections.abc import Mapping

import pytest

from neuroshell.core.common.exceptions import (
    CommandNotFoundError,
    CommandRegistrationError,
    ConfigurationError,
    RegistryLookupError,
    ServiceNotFoundError,
    ServiceRegistrationError,
)
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.base_command import BaseCommand
from neuroshell.core.domain.parsed_command import ParseMode
from neuroshell.core.services.command_registration import (
    BUILTIN_COMMANDS,
    SESSION_COMMANDS,
    register_all_commands,
)
from neuroshell.core.services.command_registry import CommandRegistry
from neuroshell.core.services.service_registry import ServiceRegistry


class DummyCommand(BaseCommand):
    parse_mode = ParseMode.RAW

    def __init__(self, name: str = "dummy") -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def format(self) -> str:
        return f"\\{self._name}"

    @property
    def description(self) -> str:
        return "Dummy command"

    async def execute(
        self, args: Mapping[str, str], message: str, context: CommandContext
    ) -> CommandResult:
        return self.success(message)


class TestCommandRegistry:
    def test_register_and_lookup(self) -> None:
        registry = CommandRegistry()
        command = DummyCommand()
        registry.register(command)

        assert registry.get("dummy") is command
        assert registry.get_required("dummy") is command
        assert registry.has_command("dummy")
        assert registry.names() == ["dummy"]
        assert len(registry) == 1

    def test_duplicate_registration_fails(self) -> None:
        registry = CommandRegistry()
        registry.register(DummyCommand())

        with pytest.raises(CommandRegistrationError) as exc_info:
            registry.register(DummyCommand())
        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.command_name == "dummy"

    def test_empty_name_fails(self) -> None:
        with pytest.raises(CommandRegistrationError):
            CommandRegistry().register(DummyCommand(name=" "))

    def test_unknown_command(self) -> None:
        registry = CommandRegistry()

        assert registry.get("nope") is None
        with pytest.raises(CommandNotFoundError) as exc_info:
            registry.get_required("nope")
        assert isinstance(exc_info.value, RegistryLookupError)
        assert "nope" in exc_info.value.message

    def test_parse_mode_for(self) -> None:
        registry = CommandRegistry()
        registry.register(DummyCommand())

        assert registry.parse_mode_for("dummy") is ParseMode.RAW
        assert registry.parse_mode_for("unknown") is ParseMode.KEY_VALUE

    def test_get_all_returns_a_copy(self) -> None:
        registry = CommandRegistry()
        registry.register(DummyCommand())

        registry.get_all().clear()
        assert registry.has_command("dummy")


class TestServiceRegistry:
    def test_register_and_lookup(self) -> None:
        registry = ServiceRegistry()
        registry.register("numbers", [1, 2])

        assert registry.get("numbers") == [1, 2]
        assert registry.get_required("numbers", list) == [1, 2]
        assert registry.has_service("numbers")

    def test_duplicate_registration_fails(self) -> None:
        registry = ServiceRegistry()
        registry.register("svc", object())

        with pytest.raises(ServiceRegistrationError):
            registry.register("svc", object())

    def test_missing_service(self) -> None:
        with pytest.raises(ServiceNotFoundError) as exc_info:
            ServiceRegistry().get_required("absent")
        assert isinstance(exc_info.value, RegistryLookupError)

    def test_wrong_type(self) -> None:
        registry = ServiceRegistry()
        registry.register("svc", "text")

        with pytest.raises(TypeError):
            registry.get_required("svc", int)


def test_register_all_commands_registers_every_command_once() -> None:
    registry = CommandRegistry()
    register_all_commands(registry)

    assert len(registry) == len(BUILTIN_COMMANDS) + len(SESSION_COMMANDS)
    for name in ("set", "get", "echo", "silent", "try", "if", "if-not", "send", "session-new"):
        assert registry.has_command(name)


def test_registering_twice_into_one_registry_fails() -> None:
    registry = CommandRegistry()
    register_all_commands(registry)

    with pytest.raises(CommandRegistrationError):
        register_all_commands(registry)
