"""
Pending-command stack.

The execution engine drains this stack one entry at a time. Entries are
either command text or boundary markers. Markers delimit `\\silent` and
`\\try` blocks and mark the end of each script run. Commands never touch the
deque directly: while a command is being dispatched its pushes are buffered,
and the engine commits them afterwards so they run in the order they were
pushed, ahead of everything already queued.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from neuroshell.constants import DEFAULT_MAX_STACK_SIZE
from neuroshell.core.common.exceptions import StackOverflowError

logger = logging.getLogger(__name__)


class BoundaryKind(str, Enum):
    SILENT = "silent"
    TRY = "try"
    SCRIPT = "script"


@dataclass(frozen=True)
class BoundaryMarker:
    """Opens or closes a silent/try block, or closes a script run."""

    kind: BoundaryKind
    marker_id: int
    is_start: bool

    def __str__(self) -> str:
        edge = "start" if self.is_start else "end"
        return f"<{self.kind.value} {edge} #{self.marker_id}>"


StackEntry = str | BoundaryMarker


class PendingCommandStack:
    """Deque-backed LIFO of pending entries. push and pop are the only mutators."""

    def __init__(self, max_size: int = DEFAULT_MAX_STACK_SIZE) -> None:
        self._entries: deque[StackEntry] = deque()
        self._max_size = max_size
        self._delegated: list[StackEntry] | None = None
        self._marker_ids = itertools.count(1)

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def push(self, entry: StackEntry) -> None:
        """Push an entry.

        While a dispatch is open, entries are buffered instead and land
        on the stack when the dispatch is committed.
        """
        if self._delegated is not None:
            self._check_capacity(len(self._delegated) + 1)
            self._delegated.append(entry)
            logger.debug("Buffered delegated command: %s", entry)
            return
        self._check_capacity(1)
        self._entries.append(entry)

    def push_all(self, entries: Iterable[StackEntry]) -> None:
        """Push entries so that they pop in the given order."""
        for entry in reversed(list(entries)):
            self._check_capacity(1)
            self._entries.append(entry)

    def pop(self) -> StackEntry | None:
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> tuple[StackEntry, ...]:
        """Return pending entries, next-to-run first."""
        return tuple(reversed(self._entries))

    def listing(self) -> tuple[str, ...]:
        """Pending entries as text, without the bookkeeping script-end markers."""
        return tuple(
            str(entry)
            for entry in self.peek()
            if not (
                isinstance(entry, BoundaryMarker) and entry.kind is BoundaryKind.SCRIPT
            )
        )

    def clear(self) -> None:
        self._entries.clear()
        self._delegated = None

    def new_marker_id(self) -> int:
        return next(self._marker_ids)

    # Dispatch bracketing, used by the engine around each command.

    def begin_dispatch(self) -> None:
        self._delegated = []

    def commit_dispatch(self) -> list[StackEntry]:
        delegated = self._delegated or []
        self._delegated = None
        if delegated:
            self.push_all(delegated)
        return delegated

    def discard_dispatch(self) -> None:
        if self._delegated:
            logger.debug("Discarding %d delegated command(s)", len(self._delegated))
        self._delegated = None

    def _check_capacity(self, adding: int) -> None:
        if len(self._entries) + adding > self._max_size:
            raise StackOverflowError(
                f"Pending command stack exceeded {self._max_size} entries",
                limit=self._max_size,
            )
