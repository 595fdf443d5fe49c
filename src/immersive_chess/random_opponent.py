"""
RandomMoveSelector: picks a uniformly random legal move.

- Stands in for the LLM when no API key is configured, and is handy for local play and tests.
- No remote resources; request_move() samples from the supplied token list; close() is a no-op.

"""
from __future__ import annotations
import random
from typing import Sequence

from .opponent import MoveSelectorError, SelectorReply

NO_KEY_NARRATIVE = "I am playing randomly because the API Key is missing."


class RandomMoveSelector:
    """Selector that picks a uniformly random token from the legal list."""
    name: str = "Random"

    def __init__(self, narrative: str = "", rng: random.Random | None = None):
        self.narrative = narrative
        self.rng = rng or random.Random()

    async def request_move(self, fen: str, legal_moves: Sequence[str]) -> SelectorReply:
        if not legal_moves:
            raise MoveSelectorError("No legal moves to choose from")
        return SelectorReply(move=self.rng.choice(list(legal_moves)), narrative=self.narrative)

    async def close(self) -> None:
        # No remote resources to release
        return
