"""
Immersive Chess package.

Components:
- session: turn-taking controller between the human and a move selector
- cursor/squares: directional cursor input and square conversion
- oracle/move_validator: python-chess rules oracle and selector token matching
- llm_opponent/random_opponent: move selectors (LLM over an OpenAI-compatible API, uniform random)
- camera: per-frame camera focus model
- host: asyncio loop + frame ticker shared by the Flask server and the terminal client
"""
# Package exports are intentionally minimal; import modules directly as needed.
