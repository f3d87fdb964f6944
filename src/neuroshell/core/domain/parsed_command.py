"""
Parsed command domain model.

A `ParsedCommand` is the structured form of one line of command-language
text. It is produced by the parser, rewritten once by interpolation and then
handed to the execution engine for dispatch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from neuroshell.constants import COMMAND_ESCAPE


class ParseMode(str, Enum):
    """How the bracket region of a command is interpreted."""

    KEY_VALUE = "key_value"
    RAW = "raw"


def quote_value(value: str) -> str:
    """Quote an option value so the parser reads it back unchanged."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


_PLAIN_KEY = re.compile(r"[A-Za-z0-9_.:@#-]+")


def quote_key(key: str) -> str:
    """Leave plain keys bare; quote anything the option splitter would cut up."""
    if _PLAIN_KEY.fullmatch(key):
        return key
    return quote_value(key)


@dataclass(frozen=True)
class ParsedCommand:
    """Structured representation of a single command line.

    `options` is only populated in KEY_VALUE mode and `bracket_content` only
    in RAW mode. A command with an empty name is a no-op (blank line or
    comment).
    """

    name: str
    parse_mode: ParseMode = ParseMode.KEY_VALUE
    options: dict[str, str] = field(default_factory=dict)
    bracket_content: str = ""
    message: str = ""

    @classmethod
    def empty(cls) -> ParsedCommand:
        return cls(name="")

    @property
    def is_empty(self) -> bool:
        return not self.name

    def get_option(self, key: str, default: str | None = None) -> str | None:
        return self.options.get(key, default)

    def to_text(self) -> str:
        """Serialize back to command-language text."""
        if self.is_empty:
            return ""

        text = f"{COMMAND_ESCAPE}{self.name}"
        if self.parse_mode is ParseMode.RAW and self.bracket_content:
            text += f"[{self.bracket_content}]"
        elif self.parse_mode is ParseMode.KEY_VALUE and self.options:
            pairs = ", ".join(
                f"{quote_key(k)}={quote_value(v)}" for k, v in self.options.items()
            )
            text += f"[{pairs}]"

        if self.message:
            text += f" {self.message}"
        return text

    def __str__(self) -> str:
        return self.to_text()
