"""
Conditional delegation.

`\\if` and `\\if-not` test a condition and, when it applies, push their message
as the next command to run. The message is pushed uninterpolated so it is
expanded once, when it runs; only the condition is interpolated here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from neuroshell.core.domain.command_context import CommandContext
from neuroshell.core.domain.command_results import CommandResult
from neuroshell.core.domain.commands.base_command import BaseCommand

logger = logging.getLogger(__name__)

TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})


def is_truthy(value: str) -> bool:
    """Evaluate condition text.

    Comparison is case-insensitive. Empty text and the FALSY_VALUES words are
    false; the TRUTHY_VALUES words and any other non-empty text are true.
    """
    normalized = value.strip().lower()
    if not normalized or normalized in FALSY_VALUES:
        return False
    return True


class _ConditionalCommand(BaseCommand):
    interpolates_input = False
    result_variable: str
    runs_when: bool

    @property
    def format(self) -> str:
        return f"\\{self.name}[condition=value] command"

    async def execute(
        self,
        args: Mapping[str, str],
        message: str,
        context: CommandContext,
    ) -> CommandResult:
        if "condition" not in args:
            return self.failure(f"condition parameter is required. {self.usage}")

        condition = context.interpolator.interpolate(args["condition"])
        result = is_truthy(condition)
        context.variables.set(self.result_variable, "true" if result else "false")

        if result is self.runs_when and message.strip():
            logger.debug("\\%s delegating: %s", self.name, message.strip())
            context.push_command(message)
        return self.success()


class IfCommand(_ConditionalCommand):
    result_variable = "#if_result"
    runs_when = True

    @property
    def name(self) -> str:
        return "if"

    @property
    def description(self) -> str:
        return (
            "Run a command when the condition is truthy "
            "(true/1/yes/on/enabled or any other non-empty text)"
        )

    @property
    def examples(self) -> list[str]:
        return [
            "\\if[condition=${debug}] \\echo Debug enabled",
            "\\if[condition=${_status}] \\echo Last try failed",
        ]


class IfNotCommand(_ConditionalCommand):
    result_variable = "#if_not_result"
    runs_when = False

    @property
    def name(self) -> str:
        return "if-not"

    @property
    def description(self) -> str:
        return (
            "Run a command when the condition is falsy "
            "(empty, false, 0, no, off or disabled)"
        )

    @property
    def examples(self) -> list[str]:
        return [
            "\\if-not[condition=${@user}] \\echo No user set",
            "\\if-not[condition=${_status}] \\echo Last try succeeded",
        ]
