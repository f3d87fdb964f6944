"""
Variable interpolation.

Replaces `${key}` placeholders with values from the variable store. Values
that themselves contain placeholders are expanded again, up to a fixed depth;
past that bound the expansion is treated as a cycle and fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from neuroshell.constants import DEFAULT_INTERPOLATION_DEPTH
from neuroshell.core.common.exceptions import InterpolationDepthError
from neuroshell.core.domain.parsed_command import ParsedCommand, ParseMode
from neuroshell.core.interfaces.variable_store_interface import IVariableStore

logger = logging.getLogger(__name__)

_OPEN = "${"
_CLOSE = "}"


@dataclass
class InterpolationResult:
    """Expanded text plus the keys that had no value."""

    value: str
    unresolved: list[str] = field(default_factory=list)

    @property
    def has_unresolved(self) -> bool:
        return bool(self.unresolved)


def _find_closing(text: str, start: int) -> int:
    """Find the `}` closing a placeholder whose key starts at `start`."""
    depth = 0
    index = start
    while index < len(text):
        if text.startswith(_OPEN, index):
            depth += 1
            index += len(_OPEN)
            continue
        if text[index] == _CLOSE:
            if depth == 0:
                return index
            depth -= 1
        index += 1
    return -1


class Interpolator:
    """Expands `${key}` placeholders against a variable store."""

    def __init__(
        self,
        variables: IVariableStore,
        max_depth: int = DEFAULT_INTERPOLATION_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._variables = variables
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def interpolate(self, text: str) -> str:
        return self.interpolate_with_report(text).value

    def interpolate_with_report(self, text: str) -> InterpolationResult:
        """
        Expand all placeholders in `text`.

        Returns:
            The expanded text and the list of unresolved keys, in the order
            they were met.

        Raises:
            InterpolationDepthError: If expansion nests deeper than max_depth.
        """
        unresolved: list[str] = []
        value = self._expand(text, 0, unresolved)
        return InterpolationResult(value=value, unresolved=unresolved)

    def interpolate_command(
        self, command: ParsedCommand
    ) -> tuple[ParsedCommand, list[str]]:
        """Expand the option values (or raw bracket) and message of a command."""
        unresolved: list[str] = []
        if command.parse_mode is ParseMode.RAW:
            bracket = self._expand(command.bracket_content, 0, unresolved)
            options = command.options
        else:
            bracket = command.bracket_content
            options = {
                key: self._expand(value, 0, unresolved)
                for key, value in command.options.items()
            }
        message = self._expand(command.message, 0, unresolved)
        return (
            replace(command, options=options, bracket_content=bracket, message=message),
            unresolved,
        )

    def _expand(self, text: str, depth: int, unresolved: list[str]) -> str:
        if depth > self._max_depth:
            raise InterpolationDepthError(
                f"variable interpolation cycle or excessive depth (limit {self._max_depth})",
                max_depth=self._max_depth,
            )
        if _OPEN not in text:
            return text

        parts: list[str] = []
        cursor = 0
        while cursor < len(text):
            start = text.find(_OPEN, cursor)
            if start == -1:
                parts.append(text[cursor:])
                break

            parts.append(text[cursor:start])
            key_start = start + len(_OPEN)
            end = _find_closing(text, key_start)
            if end == -1:
                # Unterminated placeholder stays literal.
                parts.append(text[start:])
                break

            key = text[key_start:end]
            if _OPEN in key:
                key = self._expand(key, depth + 1, unresolved)
            parts.append(self._resolve(key.strip(), depth, unresolved))
            cursor = end + 1

        return "".join(parts)

    def _resolve(self, key: str, depth: int, unresolved: list[str]) -> str:
        try:
            value = self._variables.get(key)
        except KeyError:
            unresolved.append(key)
            return ""
        if _OPEN in value:
            return self._expand(value, depth + 1, unresolved)
        return value
