import argparse
import logging

import chess

from immersive_chess.cursor import CONFIRM_KEYS, direction_for_key
from immersive_chess.host import SessionHost, SetCameraMode
from immersive_chess.camera import CameraMode
from immersive_chess.llm_opponent import LLMMoveSelector
from immersive_chess.oracle import BLACK, ChessOracle, parse_side
from immersive_chess.random_opponent import RandomMoveSelector
from immersive_chess.session import Confirm, GameSession, MoveCursor, ResetSession, SessionConfig

HELP = "Keys: w/a/s/d move the cursor, space/enter (or 'x') confirms, 'new [white|black]' resets, 'cam centered|follow', 'q' quits."


def render(snapshot: dict) -> str:
    """Text board from the player's side: cursor in brackets, selection in <>, destinations marked '*'."""
    s = snapshot["session"]
    board = chess.Board(s["fen"])
    cursor = s["cursor"]["square"]
    dests = set(s["destinations"])
    ranks = range(8) if s["player_side"] == BLACK else range(7, -1, -1)
    files = range(7, -1, -1) if s["player_side"] == BLACK else range(8)
    lines = []
    for r in ranks:
        cells = []
        for f in files:
            name = chess.square_name(chess.square(f, r))
            piece = board.piece_at(chess.square(f, r))
            sym = piece.symbol() if piece else ("*" if name in dests else ".")
            if name == cursor:
                cells.append(f"[{sym}]")
            elif name == s["selection"]:
                cells.append(f"<{sym}>")
            else:
                cells.append(f" {sym} ")
        lines.append(f"{r + 1} " + "".join(cells))
    lines.append("  " + "".join(f" {chess.FILE_NAMES[f]} " for f in files))
    last = s["last_move"]
    lines.append(f"state={s['state']} turn={s['turn']} last={last['from'] + last['to'] if last else '-'} camera={snapshot['camera']['mode']}")
    lines.append(f"Opponent: {s['narrative']}")
    return "\n".join(lines)


def parse_command(line: str):
    raw = line.rstrip("\n")
    cmd = raw.strip().lower()
    if raw == " " or cmd in CONFIRM_KEYS or cmd == "x":
        return Confirm()
    if cmd.startswith("new"):
        parts = cmd.split()
        return ResetSession(parse_side(parts[1]) if len(parts) > 1 else None)
    if cmd.startswith("cam"):
        parts = cmd.split()
        return SetCameraMode(CameraMode.parse(parts[1] if len(parts) > 1 else ""))
    direction = direction_for_key(cmd)
    return MoveCursor(direction) if direction else None


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--side", choices=["white", "black"], default="white", help="Which side the human plays")
    ap.add_argument("--model", default=None, help="Selector model name (overrides CHESS_LLM_MODEL)")
    ap.add_argument("--random", action="store_true", help="Play against the uniform-random selector instead of the LLM")
    ap.add_argument("--cursor-live", action="store_true", help="Allow cursor movement while the opponent is thinking")
    ap.add_argument("--log-level", default="WARNING", help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("play")

    if args.random:
        selector = RandomMoveSelector()
    else:
        selector = LLMMoveSelector(model=args.model) if args.model else LLMMoveSelector()
    cfg = SessionConfig(player_side=args.side)
    if args.cursor_live:
        cfg.cursor_live_while_thinking = True
    host = SessionHost(GameSession(ChessOracle(), selector, cfg)).start()
    log.info("Starting game: side=%s selector=%s", args.side, selector.name or "LLM")

    print(HELP)
    try:
        while True:
            print(render(host.snapshot()))
            try:
                line = input("> ")
            except EOFError:
                break
            if line.strip().lower() in {"q", "quit", "exit"}:
                break
            try:
                event = parse_command(line)
            except ValueError as e:
                print(e)
                continue
            if event is None:
                # Empty line just redraws (the opponent may have moved meanwhile).
                if line.strip():
                    print(HELP)
                continue
            try:
                host.dispatch(event)
            except ValueError as e:
                print(e)
    finally:
        host.stop()
