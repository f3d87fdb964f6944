from __future__ import annotations

from abc import ABC, abstractmethod


class IOutput(ABC):
    """Sink for user-visible command output."""

    @abstractmethod
    def write(self, text: str) -> None:
        pass

    @property
    @abstractmethod
    def is_silenced(self) -> bool:
        pass
