"""Square name <-> board coordinate conversion.

Squares travel through the session as algebraic names ("e2"). Cursor arithmetic
uses integer (x, y) pairs with x = file index and y = rank index, both in [0, 7].
"""
from __future__ import annotations

from typing import NamedTuple

import chess

BOARD_MIN = 0
BOARD_MAX = 7
# Squares are one unit wide and the board is centred on the world origin.
SQUARE_OFFSET = 3.5


class Coord(NamedTuple):
    x: int
    y: int


def coord_to_square(coord: Coord) -> str:
    return chess.square_name(chess.square(coord.x, coord.y))


def square_to_coord(name: str) -> Coord:
    """Parse 'e4' into Coord(4, 3). Raises ValueError for anything that is not a square."""
    sq = chess.parse_square(name.strip().lower())
    return Coord(chess.square_file(sq), chess.square_rank(sq))


def in_bounds(coord: Coord) -> bool:
    return BOARD_MIN <= coord.x <= BOARD_MAX and BOARD_MIN <= coord.y <= BOARD_MAX


def world_position(coord: Coord) -> tuple[float, float, float]:
    """World-space (x, y, z) of a square centre on the board plane."""
    return (coord.x - SQUARE_OFFSET, 0.0, coord.y - SQUARE_OFFSET)
