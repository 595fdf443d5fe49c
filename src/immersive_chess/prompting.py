"""
Prompt builders and config for opponent move requests.

The selector is told the position and the full legal-move list and must answer
with a JSON object holding the chosen move and one line of table talk.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

DEFAULT_SYSTEM = (
    "You are a chess engine playing against a human in an immersive 3D board. "
    "Choose moves only from the list you are given."
)
DEFAULT_TEMPLATE = """The board state is: {FEN}
Side to move: {SIDE_TO_MOVE}
The valid moves (in UCI format) are: {LEGAL_MOVES}
Select the best strategic move from the list.
Return ONLY a JSON object with 'move' (the chosen move string from the list) and 'commentary' (a short, witty, immersive sentence about why you made that move)."""


@dataclass
class PromptConfig:
    """Configuration for shaping move prompts using a custom template."""

    system_instructions: str = DEFAULT_SYSTEM
    template: str = DEFAULT_TEMPLATE


def render_custom_prompt(template: str, values: Dict[str, str]) -> str:
    """Replace known placeholders in the template. Unknown tokens are left intact."""
    rendered = template or ""
    for key, val in values.items():
        rendered = rendered.replace(f"{{{key}}}", val)
    return rendered


def side_from_fen(fen: str) -> str:
    parts = fen.split()
    return "black" if len(parts) > 1 and parts[1] == "b" else "white"


def build_move_request_messages(fen: str, legal_moves: Sequence[str], cfg: PromptConfig | None = None) -> list[dict]:
    cfg = cfg or PromptConfig()
    values = {
        "FEN": fen,
        "SIDE_TO_MOVE": side_from_fen(fen),
        "LEGAL_MOVES": ", ".join(legal_moves),
    }
    return [
        {"role": "system", "content": cfg.system_instructions},
        {"role": "user", "content": render_custom_prompt(cfg.template, values)},
    ]
