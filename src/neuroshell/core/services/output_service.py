from __future__ import annotations

import logging
import sys
from typing import TextIO

from neuroshell.core.interfaces.output_interface import IOutput

logger = logging.getLogger(__name__)


class OutputService(IOutput):
    """Writes command output to a text stream unless a silent block is open."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._silence_depth = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def is_silenced(self) -> bool:
        return self._silence_depth > 0

    def push_silence(self) -> None:
        self._silence_depth += 1

    def pop_silence(self) -> None:
        if self._silence_depth == 0:
            logger.warning("Unbalanced silent block end ignored")
            return
        self._silence_depth -= 1

    def reset(self) -> None:
        self._silence_depth = 0

    def write(self, text: str) -> None:
        if self.is_silenced:
            logger.debug("Suppressed output: %s", text)
            return
        self.stream.write(text if text.endswith("\n") else f"{text}\n")
        self.stream.flush()
