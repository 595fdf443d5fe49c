"""
Game session controller.

- GameSession: the turn-taking state machine between the human and a move selector.
  - Owns selection, last move, cursor and narrative; the only caller of the oracle and selector.
  - Player input arrives as explicit events (MoveCursor, Confirm, ResetSession) via dispatch().
  - Opponent turns run as one asyncio task per turn, tagged with a generation counter so a
    reset discards any late result. Invalid or failed replies fall back to a uniformly random
    legal move; a turn is never left uncommitted.
- SessionView: the read-only projection the presentation layer renders.

"""
from __future__ import annotations
import asyncio, logging, random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from .config import SETTINGS
from .cursor import Direction, move_cursor
from .move_validator import legal_tokens, match_move_token
from .opponent import MoveSelector, SelectorReply
from .oracle import BLACK, WHITE, IllegalMoveError, LegalMove, RulesOracle, parse_side
from .squares import Coord, coord_to_square

GREETING_PLAYER_FIRST = "Game started. Your move."
GREETING_OPPONENT_FIRST = "Game started. I shall move first."
THINKING_NARRATIVE = "Thinking..."
FALLBACK_NARRATIVE = "I decided to move quickly."
GAME_OVER_NARRATIVE = "Game Over."

DEFAULT_CURSOR = {WHITE: Coord(4, 1), BLACK: Coord(4, 6)}  # e2 / e7


class SessionState(str, Enum):
    PLAYER_TURN = "player_turn"
    AWAITING_OPPONENT = "awaiting_opponent"
    GAME_OVER = "game_over"


# ---------------- Events -----------------
@dataclass(frozen=True)
class MoveCursor:
    direction: Direction


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class ResetSession:
    player_side: Optional[str] = None


@dataclass
class SessionConfig:
    player_side: str = WHITE
    # Whether the cursor may move while the opponent is thinking (confirm is always ignored then).
    cursor_live_while_thinking: bool = field(default_factory=lambda: SETTINGS.cursor_live_while_thinking)
    selector_timeout_s: float = field(default_factory=lambda: SETTINGS.selector_timeout_s)


@dataclass(frozen=True)
class SessionView:
    state: SessionState
    player_side: str
    turn: str
    fen: str
    cursor: Coord
    cursor_square: str
    selection: Optional[str]
    destinations: frozenset[str]
    last_move: Optional[tuple[str, str]]
    is_awaiting_opponent: bool
    narrative: str
    generation: int

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "player_side": self.player_side,
            "turn": self.turn,
            "fen": self.fen,
            "cursor": {"x": self.cursor.x, "y": self.cursor.y, "square": self.cursor_square},
            "selection": self.selection,
            "destinations": sorted(self.destinations),
            "last_move": {"from": self.last_move[0], "to": self.last_move[1]} if self.last_move else None,
            "is_awaiting_opponent": self.is_awaiting_opponent,
            "narrative": self.narrative,
            "generation": self.generation,
        }


class GameSession:
    def __init__(self, oracle: RulesOracle, selector: MoveSelector, cfg: SessionConfig | None = None, rng: random.Random | None = None):
        self.log = logging.getLogger("GameSession")
        self.oracle = oracle
        self.selector = selector
        self.cfg = cfg or SessionConfig()
        self.rng = rng or random.Random()
        self.player_side = parse_side(self.cfg.player_side)
        self.cursor = DEFAULT_CURSOR[self.player_side]
        self.selection: Optional[str] = None
        self.destinations: frozenset[str] = frozenset()
        self.last_move: Optional[tuple[str, str]] = None
        self.fen = oracle.position()
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None
        # Describes the starting position only; reset() on the running loop begins play.
        self.narrative = self._greeting()
        self.state = self._resting_state()

    # ---------------- Projection -----------------
    @property
    def generation(self) -> int:
        return self._generation

    @property
    def turn_owner(self) -> str:
        return self.oracle.turn_to_move()

    @property
    def is_awaiting_opponent(self) -> bool:
        return self.state is SessionState.AWAITING_OPPONENT

    @property
    def cursor_square(self) -> str:
        return coord_to_square(self.cursor)

    def view(self) -> SessionView:
        return SessionView(
            state=self.state,
            player_side=self.player_side,
            turn=self.turn_owner,
            fen=self.fen,
            cursor=self.cursor,
            cursor_square=self.cursor_square,
            selection=self.selection,
            destinations=self.destinations,
            last_move=self.last_move,
            is_awaiting_opponent=self.is_awaiting_opponent,
            narrative=self.narrative,
            generation=self._generation,
        )

    # ---------------- Event dispatch -----------------
    def dispatch(self, event) -> SessionView:
        if isinstance(event, MoveCursor):
            self.move_cursor(event.direction)
        elif isinstance(event, Confirm):
            self.confirm()
        elif isinstance(event, ResetSession):
            self.reset(event.player_side)
        else:
            raise TypeError(f"Unsupported session event: {event!r}")
        return self.view()

    def reset(self, player_side: Optional[str] = None) -> None:
        """Start a new game, superseding any opponent request still in flight.

        Must run on the session's event loop; raises RuntimeError before touching any state otherwise.
        """
        self._running_loop()
        if player_side is not None:
            self.player_side = parse_side(player_side)
        self._generation += 1
        if self._pending is not None and not self._pending.done():
            self.log.info("Reset supersedes pending opponent request (generation %d)", self._generation - 1)
            self._pending.cancel()
        self._pending = None
        self.oracle.reset()
        self.fen = self.oracle.position()
        self._clear_selection()
        self.last_move = None
        self.cursor = DEFAULT_CURSOR[self.player_side]
        self.narrative = self._greeting()
        self.log.info("New game: player=%s generation=%d", self.player_side, self._generation)
        self._advance()

    def move_cursor(self, direction: Direction) -> None:
        if self.is_awaiting_opponent and not self.cfg.cursor_live_while_thinking:
            return
        self.cursor = move_cursor(self.cursor, direction, inverted=self.player_side == BLACK)

    def confirm(self) -> None:
        if self.state is not SessionState.PLAYER_TURN:
            self.log.debug("Confirm ignored in state %s", self.state.value)
            return
        target = self.cursor_square
        if self.selection is not None:
            if target in self.destinations:
                self._commit_player_move(self.selection, target)
            elif self._owns(target):
                self._select(target)
            else:
                self._clear_selection()
            return
        if self._owns(target):
            self._select(target)

    async def wait_for_opponent(self) -> None:
        """Wait until the in-flight opponent request (if any) has resolved or been superseded."""
        while self._pending is not None and not self._pending.done():
            task = self._pending
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    async def close(self) -> None:
        self._generation += 1
        task, self._pending = self._pending, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        await self.selector.close()

    # ---------------- Selection -----------------
    def _owns(self, square: str) -> bool:
        piece = self.oracle.piece_at(square)
        return piece is not None and piece.side == self.player_side

    def _select(self, square: str) -> None:
        destinations = frozenset(m.to_square for m in self.oracle.legal_moves(square))
        if not destinations:
            # A piece with nowhere to go cannot be a move origin.
            self._clear_selection()
            return
        self.selection = square
        self.destinations = destinations

    def _clear_selection(self) -> None:
        self.selection = None
        self.destinations = frozenset()

    # ---------------- Commits -----------------
    def _commit_player_move(self, from_square: str, to_square: str) -> None:
        candidates = [m for m in self.oracle.legal_moves(from_square) if m.to_square == to_square]
        promotion = None
        if any(m.promotion for m in candidates):
            promotion = "q"
        self._running_loop()
        try:
            self.oracle.apply_move(from_square, to_square, promotion)
        except IllegalMoveError:
            self.log.warning("Oracle rejected %s%s; re-deriving selection", from_square, to_square)
            self._clear_selection()
            if self._owns(from_square):
                self._select(from_square)
            return
        self._clear_selection()
        self._record_commit(from_square, to_square)
        self.log.info("Player move %s%s", from_square, to_square)
        if self.oracle.is_game_over():
            self.narrative = self._game_over_text()
        self._advance()

    def _record_commit(self, from_square: str, to_square: str) -> None:
        self.last_move = (from_square, to_square)
        self.fen = self.oracle.position()

    def _game_over_text(self, prefix: str = "") -> str:
        line = f"{GAME_OVER_NARRATIVE} {self.oracle.result()}"
        return f"{prefix} {line}".strip()

    # ---------------- Turn handoff -----------------
    def _greeting(self) -> str:
        return GREETING_PLAYER_FIRST if self.turn_owner == self.player_side else GREETING_OPPONENT_FIRST

    def _resting_state(self) -> SessionState:
        if self.oracle.is_game_over():
            return SessionState.GAME_OVER
        if self.turn_owner != self.player_side:
            return SessionState.AWAITING_OPPONENT
        return SessionState.PLAYER_TURN

    def _running_loop(self) -> asyncio.AbstractEventLoop:
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise RuntimeError("GameSession transitions that may hand the turn over must run on an event loop") from e

    def _advance(self) -> None:
        """Re-derive the state from the oracle; never assumes the turn alternated."""
        state = self._resting_state()
        if state is SessionState.AWAITING_OPPONENT:
            self._enter_awaiting_opponent()
            return
        if state is SessionState.GAME_OVER:
            self.log.info("Game over: %s", self.oracle.result())
        self.state = state

    def _enter_awaiting_opponent(self) -> None:
        loop = self._running_loop()
        fen = self.oracle.position()
        legal = self.oracle.legal_moves()
        generation = self._generation
        self._pending = loop.create_task(
            self._request_opponent_move(generation, fen, legal),
            name=f"opponent-move-{generation}",
        )
        self.state = SessionState.AWAITING_OPPONENT
        self.narrative = THINKING_NARRATIVE

    async def _request_opponent_move(self, generation: int, fen: str, legal: Sequence[LegalMove]) -> None:
        reply: Optional[SelectorReply] = None
        try:
            reply = await asyncio.wait_for(
                self.selector.request_move(fen, legal_tokens(legal)),
                timeout=self.cfg.selector_timeout_s,
            )
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            self.log.warning("Move selector timed out after %.1fs", self.cfg.selector_timeout_s)
        except Exception:
            self.log.exception("Move selector failed")
        self._resolve_opponent_move(generation, fen, legal, reply)

    def _resolve_opponent_move(self, generation: int, fen: str, legal: Sequence[LegalMove], reply: Optional[SelectorReply]) -> None:
        if generation != self._generation:
            self.log.info("Discarding stale opponent reply (generation %d, current %d)", generation, self._generation)
            return
        chosen = match_move_token(reply.move, legal, fen) if reply is not None else None
        narrative = reply.narrative if reply is not None else ""
        if chosen is not None:
            try:
                self.oracle.apply_move(chosen.from_square, chosen.to_square, chosen.promotion)
            except IllegalMoveError:
                self.log.warning("Oracle rejected selector move %s", chosen.uci())
                chosen = None
        elif reply is not None:
            self.log.warning("Selector move %r is not in the legal list", reply.move)
        if chosen is None:
            if not legal:
                self.log.error("No legal moves available for fallback; ending the game")
                self.state = SessionState.GAME_OVER
                self.narrative = GAME_OVER_NARRATIVE
                return
            chosen = self.rng.choice(list(legal))
            self.oracle.apply_move(chosen.from_square, chosen.to_square, chosen.promotion)
            narrative = FALLBACK_NARRATIVE
            self.log.info("Fallback move %s", chosen.uci())
        else:
            self.log.info("Opponent move %s", chosen.uci())
        self._record_commit(chosen.from_square, chosen.to_square)
        self.narrative = narrative
        if self.oracle.is_game_over():
            self.narrative = self._game_over_text(narrative)
        self._advance()
