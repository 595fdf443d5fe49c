from __future__ import annotations
"""LLM-backed move selector: asks the model for a JSON {move, commentary} reply."""
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .agent_normalizer import normalize_with_agent
from .config import SETTINGS
from .llm_client import ask_for_move_conversation, has_api_key
from .opponent import MoveSelectorError, SelectorReply
from .prompting import PromptConfig, build_move_request_messages
from .random_opponent import NO_KEY_NARRATIVE, RandomMoveSelector

log = logging.getLogger("llm_opponent")


def parse_selector_reply(raw: str) -> tuple[Optional[str], str]:
    """Pull (move, commentary) out of a JSON reply; (None, '') when it is not a JSON object."""
    text = (raw or "").strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return None, ""
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None, ""
    if not isinstance(data, dict):
        return None, ""
    move = data.get("move")
    commentary = data.get("commentary")
    return (str(move).strip() if move is not None else None), (str(commentary).strip() if commentary else "")


@dataclass
class LLMMoveSelector:
    model: str = field(default_factory=lambda: SETTINGS.model)
    prompt_cfg: PromptConfig = field(default_factory=PromptConfig)
    name: Optional[str] = None
    use_guard_agent: Optional[bool] = None

    def __post_init__(self):
        self._no_key_fallback = RandomMoveSelector(narrative=NO_KEY_NARRATIVE)

    def label(self) -> str:
        return self.name or self.model

    async def request_move(self, fen: str, legal_moves: Sequence[str]) -> SelectorReply:
        if not has_api_key():
            return await self._no_key_fallback.request_move(fen, legal_moves)
        messages = build_move_request_messages(fen, legal_moves, self.prompt_cfg)
        t0 = time.time()
        raw = await ask_for_move_conversation(messages, model=self.model)
        latency_ms = int((time.time() - t0) * 1000)
        move, commentary = parse_selector_reply(raw)
        if not move:
            log.info("Reply from %s was not JSON; normalizing raw text", self.label())
            move = await normalize_with_agent(raw, use_guard_agent=self.use_guard_agent)
        if not move:
            raise MoveSelectorError(f"No move found in reply from {self.label()}")
        log.debug("%s chose %s in %d ms", self.label(), move, latency_ms)
        return SelectorReply(move=move, narrative=commentary)

    async def close(self) -> None:
        # Nothing to release for API-based selectors
        return
