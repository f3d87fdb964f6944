from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from neuroshell.core.common.exceptions import ValidationError
from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.base_command import BaseCommand
from neuroshell.core.services.variable_service import VariableNamespace, classify_key

logger = logging.getLogger(__name__)


class SetCommand(BaseCommand):
    """Set one or more user variables."""

    @property
    def name(self) -> str:
        return "set"

    @property
    def format(self) -> str:
        return "\\set[var=value, ...] or \\set var=value"

    @property
    def description(self) -> str:
        return "Set user variables"

    @property
    def examples(self) -> list[str]:
        return ["\\set[name=Alice, greeting=hello]", "\\set topic=databases"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        assignments: dict[str, str] = dict(args)
        if message:
            key, sep, value = message.partition("=")
            if not sep:
                return self.failure(self.usage)
            assignments[key.strip()] = value.strip()

        if not assignments:
            return self.failure(self.usage)

        variables = context.variables
        lines: list[str] = []
        for key, value in assignments.items():
            variables.set_user_variable(key, value)
            lines.append(f"Setting {key.strip()} = {value}")
        return self.success("\n".join(lines))


class GetCommand(BaseCommand):
    """Print a single variable."""

    @property
    def name(self) -> str:
        return "get"

    @property
    def format(self) -> str:
        return "\\get[var] or \\get var"

    @property
    def description(self) -> str:
        return "Show the value of a variable"

    @property
    def examples(self) -> list[str]:
        return ["\\get name", "\\get[@pwd]", "\\get _output"]

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        key = next(iter(args), "") if args else message.strip()
        if not key:
            return self.failure(self.usage)
        try:
            value = context.variables.get(key)
        except KeyError:
            return self.failure(f"Variable '{key}' is not set")
        return self.success(f"{key} = {value}", variable=key, value=value)


class VarsCommand(BaseCommand):
    """List variables, optionally filtered by namespace and pattern."""

    _TYPES = {
        "all": None,
        "user": VariableNamespace.USER,
        "system": VariableNamespace.SYSTEM,
        "builtin": VariableNamespace.BUILTIN,
        "metadata": VariableNamespace.METADATA,
        "history": VariableNamespace.HISTORY,
    }

    @property
    def name(self) -> str:
        return "vars"

    @property
    def format(self) -> str:
        return "\\vars[type=all|user|system|builtin|metadata|history, pattern=regex]"

    @property
    def description(self) -> str:
        return "List variables"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        type_name = args.get("type", "all").strip().lower() or "all"
        if type_name not in self._TYPES:
            raise ValidationError(
                f"Unknown variable type '{type_name}'. {self.usage}"
            )
        namespace = self._TYPES[type_name]

        pattern = args.get("pattern") or message.strip()
        matcher = None
        if pattern:
            try:
                matcher = re.compile(pattern)
            except re.error as exc:
                raise ValidationError(f"Invalid pattern '{pattern}': {exc}") from exc

        rows = [
            f"{key} = {value}"
            for key, value in sorted(context.variables.snapshot().items())
            if (namespace is None or classify_key(key) is namespace)
            and (matcher is None or matcher.search(key))
        ]
        if not rows:
            return self.success("No variables found")
        return self.success("\n".join(rows), count=len(rows))
