"""
Dual message indexing.

`N` counts back from the end (1 is the last message) and `.N` counts forward
from the start (.1 is the first message). Both are 1-based and must lie in
1..count.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from neuroshell.core.common.exceptions import IndexOutOfBoundsError

_INTEGER = re.compile(r"[+-]?\d+")

_REVERSE_LABELS = {
    1: "last message",
    2: "second-to-last message",
    3: "third-to-last message",
}
_FORWARD_LABELS = {
    1: "first message",
    2: "second message",
    3: "third message",
}


class IndexResolution(NamedTuple):
    index: int
    label: str


def ordinal_suffix(n: int) -> str:
    """Return the English ordinal suffix for `n` (st, nd, rd, th)."""
    if 11 <= abs(n) % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(abs(n) % 10, "th")


def _range_text(count: int) -> str:
    if count <= 0:
        return "none, there are no messages"
    return f"1-{count}"


def resolve_index(spec: str, count: int) -> IndexResolution:
    """
    Convert a user index into a zero-based list index and a readable label.

    Args:
        spec: "N" for reverse order or ".N" for forward order
        count: Number of messages available

    Returns:
        IndexResolution(index, label)

    Raises:
        IndexOutOfBoundsError: If `spec` is not a positive integer in range
    """
    text = spec.strip()
    forward = text.startswith(".")
    mode = "normal order" if forward else "reverse order"
    number_text = text[1:] if forward else text

    if not _INTEGER.fullmatch(number_text):
        raise IndexOutOfBoundsError(
            f"Invalid {mode} index '{spec}': expected a positive integer "
            f"(valid range: {_range_text(count)})",
            details={"mode": mode, "value": spec, "count": count},
        )

    n = int(number_text)
    if n < 1 or n > count:
        shown = f".{n}" if forward else str(n)
        raise IndexOutOfBoundsError(
            f"{mode.capitalize()} index {shown} is out of bounds "
            f"(valid range: {_range_text(count)})",
            details={"mode": mode, "value": spec, "count": count},
        )

    if forward:
        label = _FORWARD_LABELS.get(n, f"{n}{ordinal_suffix(n)} message")
        return IndexResolution(n - 1, label)

    label = _REVERSE_LABELS.get(n, f"{n}{ordinal_suffix(n)} from last message")
    return IndexResolution(count - n, label)
