"""
Configuration and environment loading for LLM Tic-Tac-Toe.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables.
- Exposes SETTINGS with keys used across the project (API access, oracle retry/timeout knobs, pacing).
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
    # this file: src/llm_tictactoe/config.py → repo root is two levels up
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
    return data if isinstance(data, dict) else {}


_cfg = _load_yaml(os.environ.get("LLMTTT_SETTINGS_PATH") or os.path.join(_repo_root(), "settings.yml"))


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
    # Auth / endpoint (OpenAI-compatible chat completions)
    llm_api_key: str
    api_base: str
    model: str

    # Oracle negotiation
    oracle_max_attempts: int
    oracle_max_output_length: int
    oracle_timeout_s: float  # 0 disables the per-call timeout

    # Pacing
    thinking_delay_s: float


SETTINGS = Settings(
    llm_api_key=_get("LLMTTT_LLM_API_KEY", _get("OPENAI_API_KEY", "")),
    api_base=_get("LLMTTT_LLM_BASE_URL", ""),
    model=_get("LLMTTT_MODEL", "gpt-4o-mini"),
    oracle_max_attempts=int(_get("LLMTTT_ORACLE_MAX_ATTEMPTS", 3, cast=int)),
    oracle_max_output_length=int(_get("LLMTTT_ORACLE_MAX_OUTPUT_LENGTH", 16, cast=int)),
    oracle_timeout_s=float(_get("LLMTTT_ORACLE_TIMEOUT_S", 0.0, cast=float)),
    thinking_delay_s=float(_get("LLMTTT_THINKING_DELAY_S", 1.0, cast=float)),
)
