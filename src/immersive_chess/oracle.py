"""
Rules oracle: the authoritative legality engine for one mutable chess position.

- RulesOracle is the capability the session consumes; any engine with these methods will do.
- ChessOracle owns a python-chess Board and applies moves given as (from, to, promotion).
- Moves are reported as LegalMove records; uci() yields the token sent to move selectors.

"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import chess

WHITE = "white"
BLACK = "black"


def parse_side(value: str) -> str:
    side = str(value or "").strip().lower()
    if side in {"w", "white"}:
        return WHITE
    if side in {"b", "black"}:
        return BLACK
    raise ValueError(f"Unknown side '{value}'. Expected 'white' or 'black'.")


def opposite(side: str) -> str:
    return BLACK if side == WHITE else WHITE


class IllegalMoveError(ValueError):
    """Raised by apply_move when the requested move is not legal in the current position."""


@dataclass(frozen=True)
class LegalMove:
    from_square: str
    to_square: str
    promotion: Optional[str] = None  # 'q' | 'r' | 'b' | 'n'

    def uci(self) -> str:
        return f"{self.from_square}{self.to_square}{self.promotion or ''}"


@dataclass(frozen=True)
class Piece:
    type: str  # 'p', 'n', 'b', 'r', 'q', 'k'
    side: str


class RulesOracle(Protocol):
    """Capability interface for a rules engine over a single position."""

    def reset(self) -> None: ...

    def position(self) -> str: ...

    def turn_to_move(self) -> str: ...

    def is_game_over(self) -> bool: ...

    def result(self) -> str: ...

    def legal_moves(self, origin: Optional[str] = None) -> list[LegalMove]: ...

    def apply_move(self, from_square: str, to_square: str, promotion: Optional[str] = None) -> LegalMove: ...

    def piece_at(self, square: str) -> Optional[Piece]: ...


class ChessOracle:
    """RulesOracle backed by python-chess."""

    def __init__(self, starting_fen: str | None = None):
        self._starting_fen = starting_fen
        self.board = chess.Board(fen=starting_fen) if starting_fen else chess.Board()

    def reset(self) -> None:
        if self._starting_fen:
            self.board.set_fen(self._starting_fen)
        else:
            self.board.reset()

    def position(self) -> str:
        return self.board.fen()

    def turn_to_move(self) -> str:
        return WHITE if self.board.turn == chess.WHITE else BLACK

    def is_game_over(self) -> bool:
        return self.board.is_game_over()

    def result(self) -> str:
        if self.board.is_game_over():
            return self.board.result()
        return "*"

    def legal_moves(self, origin: Optional[str] = None) -> list[LegalMove]:
        moves = self.board.legal_moves
        if origin is not None:
            from_sq = chess.parse_square(origin)
            moves = (m for m in moves if m.from_square == from_sq)
        return [_to_legal_move(m) for m in moves]

    def apply_move(self, from_square: str, to_square: str, promotion: Optional[str] = None) -> LegalMove:
        try:
            mv = chess.Move.from_uci(f"{from_square}{to_square}{promotion or ''}")
        except ValueError as e:
            raise IllegalMoveError(f"Malformed move {from_square}{to_square}{promotion or ''}") from e
        if mv not in self.board.legal_moves:
            raise IllegalMoveError(f"Illegal move {mv.uci()} in {self.board.fen()}")
        self.board.push(mv)
        return _to_legal_move(mv)

    def piece_at(self, square: str) -> Optional[Piece]:
        piece = self.board.piece_at(chess.parse_square(square))
        if piece is None:
            return None
        return Piece(type=piece.symbol().lower(), side=WHITE if piece.color == chess.WHITE else BLACK)


def _to_legal_move(mv: chess.Move) -> LegalMove:
    promo = chess.piece_symbol(mv.promotion) if mv.promotion else None
    return LegalMove(chess.square_name(mv.from_square), chess.square_name(mv.to_square), promo)
