"""Propagation directions and traversal-order helpers.

Directions are power-of-two flags, so an event's allowed directions are a
plain union of members:

    mask = Direction.LOCAL | Direction.DOWN
    Direction.DOWN in mask  # True
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntFlag
from typing import Any

from .exceptions import InvalidDirectionError


class Direction(IntFlag):
    """Axis along which an event may travel through an emitter tree."""

    NONE = 0
    LOCAL = 1
    UP = 2
    DOWN = 4
    SIBLINGS = 8
    SATURATING = 16


NONE = Direction.NONE
LOCAL = Direction.LOCAL
UP = Direction.UP
DOWN = Direction.DOWN
SIBLINGS = Direction.SIBLINGS
SATURATING = Direction.SATURATING

ALL_DIRECTIONS = LOCAL | UP | DOWN | SIBLINGS | SATURATING
TRAVERSABLE = frozenset({NONE, LOCAL, UP, DOWN, SIBLINGS})

DEFAULT_PROPAGATION = LOCAL | UP | DOWN
DEFAULT_ORDER: tuple[Direction, ...] = (LOCAL, DOWN, UP, NONE)
ORDER_SLOTS = 4


def coerce_direction(value: Any) -> Direction:
    """Return ``value`` as a ``Direction``.

    Accepts members, plain ints and case-insensitive names; names may be
    joined with ``|`` (``"local|down"``).
    """
    if isinstance(value, Direction):
        return value
    if isinstance(value, bool):
        raise InvalidDirectionError(f"Not a direction: {value!r}")
    if isinstance(value, int):
        if value < 0 or value & ~int(ALL_DIRECTIONS):
            raise InvalidDirectionError(f"Unknown direction bits in {value!r}")
        return Direction(value)
    if isinstance(value, str):
        combined = NONE
        for part in value.split("|"):
            name = part.strip().upper()
            try:
                combined |= Direction[name]
            except KeyError:
                raise InvalidDirectionError(f"Unknown direction name {part!r}") from None
        return combined
    raise InvalidDirectionError(f"Not a direction: {value!r}")


def normalize_order(directions: Iterable[Any]) -> tuple[Direction, ...]:
    """Validate a traversal order and pad it to ``ORDER_SLOTS`` entries.

    A direction appearing more than once is kept only at its first slot;
    later occurrences become ``NONE``.
    """
    items = [coerce_direction(item) for item in directions]
    if len(items) > ORDER_SLOTS:
        raise InvalidDirectionError(
            f"A traversal order holds at most {ORDER_SLOTS} directions, got {len(items)}."
        )

    seen: set[Direction] = set()
    normalized: list[Direction] = []
    for direction in items:
        if direction not in TRAVERSABLE:
            raise InvalidDirectionError(
                f"{direction!r} cannot be used in a traversal order."
            )
        if direction != NONE and direction in seen:
            direction = NONE
        seen.add(direction)
        normalized.append(direction)

    normalized.extend([NONE] * (ORDER_SLOTS - len(normalized)))
    return tuple(normalized)
