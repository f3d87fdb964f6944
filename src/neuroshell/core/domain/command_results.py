"""
Command Results Domain Model

This module defines the value a command returns to the execution engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class CommandResult:
    """
    Result of a command execution.

    A result with `success=False` is treated by the engine exactly like a
    raised CommandExecutionError. On success, a non-empty `message` is
    printed and stored in the `_output` variable.
    """

    success: bool
    message: str
    name: str = ""
    data: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.data is None:
            self.data = {}
        if not self.name and self.data and "name" in self.data:
            self.name = self.data["name"]
