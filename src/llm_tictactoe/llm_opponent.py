from __future__ import annotations
"""LLM-backed opponent: negotiates a legal move out of free-form oracle text."""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .board import Game
from .bridge import GenerationOracle
from .config import SETTINGS
from .move_validator import parse_oracle_reply
from .prompting import PromptConfig, build_move_prompt
from .random_opponent import RandomOpponent

log = logging.getLogger("OpponentMoveResolver")


class ResolutionInFlight(RuntimeError):
    """A second resolution was requested while one is still pending."""


@dataclass
class ResolvedMove:
    row: int
    col: int
    fallback: bool = False
    attempts: int = 0
    meta: Dict[str, Any] = field(default_factory=dict)


class OpponentMoveResolver:
    """Prompt the oracle, parse/validate its reply, retry, and fall back to a random legal move."""

    def __init__(
        self,
        oracle: GenerationOracle,
        prompt_cfg: Optional[PromptConfig] = None,
        chooser: Optional[RandomOpponent] = None,
        max_attempts: Optional[int] = None,
        timeout_s: Optional[float] = None,
        api_override: Optional[str] = None,
    ):
        self.oracle = oracle
        self.prompt_cfg = prompt_cfg or PromptConfig()
        self.chooser = chooser or RandomOpponent()
        self.max_attempts = max(1, max_attempts if max_attempts is not None else SETTINGS.oracle_max_attempts)
        self.timeout_s = SETTINGS.oracle_timeout_s if timeout_s is None else timeout_s
        self.api_override = api_override
        self._pending: set[str] = set()

    def in_flight(self, game_id: str) -> bool:
        return game_id in self._pending

    async def _ask(self, prompt: str) -> str:
        call = self.oracle(
            prompt,
            api_override=self.api_override,
            instruct_override=True,
            quiet_to_loud=False,
            system_prompt_override=self.prompt_cfg.system_instructions,
            max_output_length=self.prompt_cfg.max_output_length,
        )
        if self.timeout_s and self.timeout_s > 0:
            return await asyncio.wait_for(call, timeout=self.timeout_s)
        return await call

    async def resolve(self, game: Game) -> ResolvedMove:
        """Return a legal move for the oracle's side. Never raises for oracle faults."""
        if game.id in self._pending:
            raise ResolutionInFlight(f"resolution already pending for game {game.id}")
        legal = game.legal_moves()
        if not legal:
            raise ValueError("no legal moves to resolve")
        self._pending.add(game.id)
        try:
            prompt = build_move_prompt(game, self.prompt_cfg)
            replies: List[Dict[str, Any]] = []
            t0 = time.time()
            for attempt in range(1, self.max_attempts + 1):
                try:
                    raw = await self._ask(prompt)
                except Exception as e:
                    log.warning("Oracle call failed (attempt %d/%d): %s", attempt, self.max_attempts, e)
                    replies.append({"attempt": attempt, "error": repr(e)})
                    continue
                if not isinstance(raw, str):
                    log.warning("Oracle returned %s instead of text (attempt %d/%d)", type(raw).__name__, attempt, self.max_attempts)
                    replies.append({"attempt": attempt, "raw": repr(raw), "validator": {"ok": False, "reason": "non_text_reply"}})
                    continue
                parsed = parse_oracle_reply(raw, legal)
                replies.append({"attempt": attempt, "raw": raw, "validator": parsed})
                if parsed.get("ok"):
                    log.debug("Oracle move (%d, %d) via %s on attempt %d", parsed["row"], parsed["col"], parsed["via"], attempt)
                    return ResolvedMove(
                        row=parsed["row"],
                        col=parsed["col"],
                        attempts=attempt,
                        meta={"prompt": prompt, "replies": replies, "latency_ms": int((time.time() - t0) * 1000)},
                    )
                log.debug("Unusable oracle reply (attempt %d): %s raw=%r", attempt, parsed.get("reason"), raw)

            row, col = self.chooser.choose(legal)
            log.info("Oracle gave no usable move after %d attempts; random fallback (%d, %d)", self.max_attempts, row, col)
            return ResolvedMove(
                row=row,
                col=col,
                fallback=True,
                attempts=self.max_attempts,
                meta={"prompt": prompt, "replies": replies, "latency_ms": int((time.time() - t0) * 1000)},
            )
        finally:
            self._pending.discard(game.id)
