from __future__ import annotations

from enum import Enum


class EngineState(str, Enum):
    """Lifecycle states of the execution engine."""

    IDLE = "idle"
    RUNNING = "running"
    HALTED = "halted"
