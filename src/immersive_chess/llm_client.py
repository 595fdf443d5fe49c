from __future__ import annotations
"""
LLM client facade over an OpenAI-compatible chat endpoint (Gemini's by default; base URL configurable).

The rest of the code should not care which SDK is in use. This module sends
`model` + `messages` and returns the raw reply text, raising MoveSelectorError
once every retry is spent.
"""
from typing import Optional, List, Dict
import asyncio
import logging
import random

from openai import AsyncOpenAI

from .config import SETTINGS
from .opponent import MoveSelectorError

log = logging.getLogger("llm_client")

_CLIENT: Optional[AsyncOpenAI] = None


def has_api_key() -> bool:
    return bool(SETTINGS.llm_api_key)


def get_client() -> AsyncOpenAI:
    """Create the shared client on first use so a missing key never breaks import."""
    global _CLIENT
    if _CLIENT is None:
        if not has_api_key():
            raise MoveSelectorError("No API key configured (set CHESS_LLM_API_KEY or API_KEY).")
        _CLIENT = AsyncOpenAI(api_key=SETTINGS.llm_api_key, base_url=SETTINGS.api_base or None)
    return _CLIENT


# ------------------------- Chat wrappers -------------------------
async def ask_for_move_conversation(messages: List[Dict[str, str]], model: Optional[str] = None, json_mode: bool = True) -> str:
    """Given a chat-style conversation (including system message), request the next move."""
    model = model or SETTINGS.model
    if not model:
        raise ValueError("Model is required; set CHESS_LLM_MODEL in settings.yml or the environment.")
    client = get_client()
    extra = {"response_format": {"type": "json_object"}} if json_mode else {}
    delay = 0.5
    for attempt in range(SETTINGS.responses_retries + 1):
        try:
            rsp = await client.chat.completions.create(
                model=model,
                messages=messages,
                timeout=SETTINGS.responses_timeout_s,
                **extra,
            )
            text = _extract_text(rsp)
            if text:
                return text.strip()
            log.warning("Empty reply from %s (attempt %d)", model, attempt + 1)
        except Exception as e:
            if attempt >= SETTINGS.responses_retries:
                log.exception("Chat request failed after %d attempts", attempt + 1)
                raise MoveSelectorError(f"Chat request failed: {e}") from e
        if attempt < SETTINGS.responses_retries:
            sleep_s = delay * (2 ** attempt) * (0.8 + 0.4 * random.random())
            await asyncio.sleep(min(sleep_s, 10.0))
    raise MoveSelectorError(f"No reply from {model} after {SETTINGS.responses_retries + 1} attempts")


def _extract_text(rsp) -> str:
    if not getattr(rsp, "choices", None):
        return ""
    content = getattr(rsp.choices[0].message, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for c in content:
            if isinstance(c, dict):
                if c.get("type") == "text" and isinstance(c.get("text"), str):
                    parts.append(c["text"])
                continue
            t = getattr(c, "text", None)
            if isinstance(t, str):
                parts.append(t)
        return "\n".join(parts)
    return ""
