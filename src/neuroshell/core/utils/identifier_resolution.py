"""
Smart identifier resolution.

Turns a loosely typed identifier into exactly one entity, trying in order:

1. exact name (case-sensitive)
2. exact id
3. a case-insensitive partial match in the single mode chosen by the caller

Anything other than exactly one partial match is an error whose message lists
the entities the operator can pick from.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol, TypeVar

from neuroshell.constants import SHORT_ID_LENGTH
from neuroshell.core.common.exceptions import (
    AmbiguousIdentifierError,
    NoMatchingIdentifierError,
    ValidationError,
)


class Identifiable(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...


E = TypeVar("E", bound=Identifiable)


class MatchMode(str, Enum):
    """Which field the partial-match step inspects."""

    ID_PREFIX = "id_prefix"
    NAME_PREFIX = "name_prefix"
    NAME_SUBSTRING = "name_substring"

    @property
    def description(self) -> str:
        return "ID prefix" if self is MatchMode.ID_PREFIX else "name"


def short_id(entity_id: str) -> str:
    return entity_id[:SHORT_ID_LENGTH]


def describe(entity: Identifiable) -> str:
    return f"{entity.name} (ID: {short_id(entity.id)})"


def _partial_matches(entities: Sequence[E], text: str, mode: MatchMode) -> list[E]:
    needle = text.lower()
    if mode is MatchMode.ID_PREFIX:
        return [e for e in entities if e.id.lower().startswith(needle)]
    if mode is MatchMode.NAME_PREFIX:
        return [e for e in entities if e.name.lower().startswith(needle)]
    return [e for e in entities if needle in e.name.lower()]


def resolve_identifier(
    entities: Sequence[E],
    text: str,
    mode: MatchMode = MatchMode.NAME_SUBSTRING,
    kind: str = "session",
) -> E:
    """
    Resolve `text` to a single entity.

    Args:
        entities: Candidate entities, each with `id` and `name`
        text: The identifier typed by the user
        mode: Partial-match strategy used when nothing matches exactly
        kind: Entity noun used in error messages

    Returns:
        The matching entity

    Raises:
        ValidationError: If `text` is empty
        NoMatchingIdentifierError: If nothing matches
        AmbiguousIdentifierError: If more than one entity matches partially
    """
    text = text.strip()
    if not text:
        raise ValidationError(f"{kind.capitalize()} identifier cannot be empty")

    for entity in entities:
        if entity.name == text:
            return entity
    for entity in entities:
        if entity.id == text:
            return entity

    matches = _partial_matches(entities, text, mode)
    if len(matches) == 1:
        return matches[0]

    if not matches:
        candidates = [describe(e) for e in entities]
        if not candidates:
            raise NoMatchingIdentifierError(
                f"No {kind}s found matching {mode.description} '{text}'. "
                f"There are no {kind}s.",
                candidates=[],
            )
        listing = "".join(f"\n  {c}" for c in candidates)
        raise NoMatchingIdentifierError(
            f"No {kind}s found matching {mode.description} '{text}'.\n\n"
            f"Available {kind}s:{listing}",
            candidates=candidates,
        )

    candidates = [describe(e) for e in matches]
    listing = "".join(f"\n  {c}" for c in candidates)
    hint = (
        "Use a longer ID prefix to uniquely identify the " + kind + "."
        if mode is MatchMode.ID_PREFIX
        else "Use the full name or a more specific name to uniquely identify the "
        + kind
        + "."
    )
    raise AmbiguousIdentifierError(
        f"Multiple {kind}s match {mode.description} '{text}'. "
        f"Please be more specific:{listing}\n\nTip: {hint}",
        candidates=candidates,
    )
