"""
Matching helpers for move tokens returned by a move selector.

A token is accepted only if it names a move in the legal list captured when the
request was dispatched. Accepted textual forms:
- "uci": long algebraic (e2e4, e7e8q); a bare from-to for a promotion means queen.
- "san": standard algebraic (e4, Nf3, exd5, e8=Q) resolved against the dispatched FEN.
- castling written as O-O / 0-0 / o-o-o, and trailing check/mate marks.
"""
from __future__ import annotations

import re
from typing import Optional, Sequence

import chess

from .oracle import LegalMove

UCI_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$", re.I)
CASTLE_ZERO = {"0-0": "O-O", "0-0-0": "O-O-O", "o-o": "O-O", "o-o-o": "O-O-O"}


def _strip_code_fence(text: str) -> str:
    """Remove simple ``` fences if present."""
    text = text.strip()
    if text.startswith("```") and text.endswith("```"):
        inner = text.split("\n", 1)
        if len(inner) == 2:
            return inner[1].rsplit("\n", 1)[0].strip()
    return text


def _primary_token(text: str) -> str:
    text = _strip_code_fence(text).strip().strip("`\"'")
    tokens = text.replace("\n", " ").split()
    return tokens[0].rstrip(".,;:!?") if tokens else ""


def _match_uci(token: str, legal: Sequence[LegalMove]) -> Optional[LegalMove]:
    token = token.lower().replace("-", "")
    if not UCI_RE.fullmatch(token):
        return None
    for mv in legal:
        if mv.uci() == token:
            return mv
    if len(token) == 4:
        # Bare from-to for a promotion: take the queen, as the player's own promotions do.
        for mv in legal:
            if mv.promotion == "q" and mv.uci()[:4] == token:
                return mv
    return None


def _match_san(token: str, fen: str, legal: Sequence[LegalMove]) -> Optional[LegalMove]:
    token = CASTLE_ZERO.get(token.lower(), token)
    try:
        board = chess.Board(fen=fen)
        mv = board.parse_san(token)
    except ValueError:
        return None
    uci = mv.uci()
    for candidate in legal:
        if candidate.uci() == uci:
            return candidate
    return None


def match_move_token(raw: str, legal: Sequence[LegalMove], fen: str | None = None) -> Optional[LegalMove]:
    """Return the legal move the token names, or None when it names none of them."""
    token = _primary_token(raw or "").rstrip("+#")
    if not token or not legal:
        return None
    found = _match_uci(token, legal)
    if found is None and fen:
        found = _match_san(token, fen, legal)
    return found


def legal_tokens(legal: Sequence[LegalMove]) -> list[str]:
    """Tokens sent to a selector for the given legal list, in engine order."""
    return [mv.uci() for mv in legal]


__all__ = ["match_move_token", "legal_tokens", "UCI_RE"]
