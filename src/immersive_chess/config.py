"""
Configuration and environment loading for Immersive Chess.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables (.env honoured).
- Exposes SETTINGS with keys used across the project (LLM endpoint, selector timeouts, cursor and camera knobs).
"""
from dataclasses import dataclass
import logging
import os
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger("config")


def _repo_root() -> str:
    # this file: src/immersive_chess/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        log.exception("Failed to read %s; using environment only", path)
        return {}
    if isinstance(data, dict):
        return data
    return {}


_cfg = _load_yaml(os.path.join(_repo_root(), "settings.yml"))


def _as_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    if name in _cfg:
        val = _cfg[name]
        return cast(val) if cast else val
    env = os.environ.get(name)
    if env is not None:
        return cast(env) if cast else env
    return default


@dataclass(frozen=True)
class Settings:
    # Move selector endpoint (OpenAI-compatible wire format)
    llm_api_key: str
    api_base: str
    model: str

    # Transport tuning
    responses_timeout_s: float
    responses_retries: int
    selector_timeout_s: float
    use_guard_agent: bool

    # Input and camera
    cursor_live_while_thinking: bool
    camera_k_center: float
    camera_k_follow: float
    frame_rate: float


SETTINGS = Settings(
    llm_api_key=_get("CHESS_LLM_API_KEY", _get("API_KEY", "")),
    api_base=_get("CHESS_LLM_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/"),
    model=_get("CHESS_LLM_MODEL", "gemini-2.5-flash"),
    responses_timeout_s=float(_get("CHESS_RESPONSES_TIMEOUT_S", 30.0, cast=float)),
    responses_retries=int(_get("CHESS_RESPONSES_RETRIES", 2, cast=int)),
    selector_timeout_s=float(_get("CHESS_SELECTOR_TIMEOUT_S", 90.0, cast=float)),
    use_guard_agent=_get("CHESS_USE_GUARD_AGENT", False, cast=_as_bool),
    cursor_live_while_thinking=_get("CHESS_CURSOR_LIVE_WHILE_THINKING", False, cast=_as_bool),
    camera_k_center=float(_get("CHESS_CAMERA_K_CENTER", 2.0, cast=float)),
    camera_k_follow=float(_get("CHESS_CAMERA_K_FOLLOW", 5.0, cast=float)),
    frame_rate=float(_get("CHESS_FRAME_RATE", 60.0, cast=float)),
)
