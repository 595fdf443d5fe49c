"""Move selector abstraction.

A selector is handed the position and its legal-move tokens and answers with one
token plus a line of narrative. It may return a token that is not in the list;
the session treats that as an invalid choice rather than an error.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


class MoveSelectorError(RuntimeError):
    """The selector could not produce a reply (transport, quota, or parse failure)."""


@dataclass(frozen=True)
class SelectorReply:
    move: str
    narrative: str = ""


class MoveSelector(Protocol):
    name: str

    async def request_move(self, fen: str, legal_moves: Sequence[str]) -> SelectorReply: ...

    async def close(self) -> None: ...
