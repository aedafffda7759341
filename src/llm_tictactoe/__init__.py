"""
LLM Tic-Tac-Toe package.

Components:
- board/referee/win_detector: 3x3 game state, move application and terminal checks
- move_validator/prompting: legality checks, oracle reply parsing and prompt/template rendering
- llm_opponent: turns free-form oracle text into a legal move (retry + random fallback)
- game: GameController turn cycle, undo, abort and finalization
- bridge/console_bridge/llm_client: host and oracle collaborators (interfaces, terminal host, OpenAI transport)
"""
# Package exports are intentionally minimal; import modules directly as needed.
