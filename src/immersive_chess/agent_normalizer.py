"""
Agent-backed normalizer for selector replies that are not the expected JSON.

Flow:
1) Quick regex to extract UCI from free-form text.
2) If not found and CHESS_USE_GUARD_AGENT is on, ask a tiny guard Agent (Agents SDK) to return UCI or NONE.
3) Fallback: first word-like token.

Returns lowercase UCI (with promotion letter) when possible; otherwise a best-effort token or empty string.
The caller still matches the result against the legal list.
"""
from __future__ import annotations
import logging, re
from agents import Agent, ModelSettings, OpenAIChatCompletionsModel, Runner, set_tracing_disabled
from .config import SETTINGS
from .llm_client import get_client

log = logging.getLogger("agent_normalizer")

INSTRUCTIONS = (
    "You receive a raw reply.\n"
    "Ensure it is a chess move and avoid any other text.\n"
    "Output ONLY the move in UCI (lowercase, include promotion letter if any). If no move is present, output the single word NONE."
)

_move_guard: Agent | None = None


def _guard_agent() -> Agent:
    global _move_guard
    if _move_guard is None:
        set_tracing_disabled(True)
        _move_guard = Agent(
            name="MoveGuard",
            instructions=INSTRUCTIONS,
            model=OpenAIChatCompletionsModel(model=SETTINGS.model, openai_client=get_client()),
            model_settings=ModelSettings(temperature=0.0),
        )
    return _move_guard


async def _agent_suggest(raw_reply: str) -> str:
    user = f"RAW REPLY: {raw_reply}\nReturn only the move in UCI or NONE:"
    result = await Runner.run(_guard_agent(), user)
    return (result.final_output or "").strip()

UCI_RE = re.compile(r"\b([a-h][1-8][a-h][1-8][qrbnQRBN]?)\b")

def _quick_regex(raw: str) -> str | None:
    m = UCI_RE.search(raw)
    if m:
        return m.group(1).lower()
    return None

async def normalize_with_agent(raw_reply: str, use_guard_agent: bool | None = None) -> str:
    """Extract a move token from a free-form reply.

    1. Try fast regex for UCI in raw reply.
    2. If guard agent enabled, ask it for a UCI candidate.
    3. Fallback: first token that looks like a move (letters/numbers) else empty.
    """
    cand = _quick_regex(raw_reply)
    if cand:
        return cand

    if use_guard_agent is None:
        use_guard_agent = SETTINGS.use_guard_agent
    agent_uci = None
    if use_guard_agent:
        try:
            agent_uci = await _agent_suggest(raw_reply)
            agent_uci = ((agent_uci or "").split() or [""])[0].strip().lower()
        except Exception:
            log.exception("Guard agent failed")

    if agent_uci and agent_uci != "none":
        return agent_uci

    tokens = re.findall(r"[A-Za-z0-9=+-]+", raw_reply)
    return tokens[0] if tokens else ""
