"""
Cursor mapping: discrete directional input -> clamped board coordinate.

When the player sits on the black side the camera faces the other way, so both
axes are inverted before clamping.
"""
from __future__ import annotations

from enum import Enum

from .squares import BOARD_MAX, BOARD_MIN, Coord


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]


_DELTAS = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

KEY_BINDINGS: dict[str, Direction] = {
    "w": Direction.UP,
    "s": Direction.DOWN,
    "a": Direction.LEFT,
    "d": Direction.RIGHT,
    "arrowup": Direction.UP,
    "arrowdown": Direction.DOWN,
    "arrowleft": Direction.LEFT,
    "arrowright": Direction.RIGHT,
}
CONFIRM_KEYS = frozenset({" ", "space", "enter"})


def direction_for_key(key: str) -> Direction | None:
    return KEY_BINDINGS.get(key.lower())


def _clamp(v: int) -> int:
    return max(BOARD_MIN, min(BOARD_MAX, v))


def move_cursor(coord: Coord, direction: Direction, inverted: bool = False) -> Coord:
    dx, dy = direction.delta
    if inverted:
        dx, dy = -dx, -dy
    return Coord(_clamp(coord.x + dx), _clamp(coord.y + dy))
