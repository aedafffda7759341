"""
Single-game controller and config.

- GameConfig: knobs for display names, oracle pacing/retries, prompting and post-game commentary.
- GameController: orchestrates one game between a human and a text-generation oracle.
  - Validates player clicks via move_validator and applies them through Referee.
  - Schedules the oracle turn on the event loop; OpponentMoveResolver turns the oracle's text
    into a legal move (retry + random fallback).
  - Re-checks turn/status/pending flags at every entry point and after every await, so a click
    never races an in-flight resolution and an abort discards whatever the oracle returns.
  - Finalizes exactly once: summary line through the ChatBridge, plus an ephemeral commentary
    prompt for decisive results.
  - Exposes records, metrics() and export_structured_history() for inspection.

All methods must be called from the event loop that runs the game.
"""
from __future__ import annotations

import asyncio
import logging
import statistics
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .board import Game, Move, Status, Symbol
from .bridge import ChatBridge, GenerationOracle, HostBindError
from .config import SETTINGS
from .llm_opponent import OpponentMoveResolver, ResolvedMove
from .move_validator import is_legal
from .prompting import DEFAULT_COMMENTARY_TEMPLATE, PromptConfig, render_template
from .random_opponent import RandomOpponent
from .referee import Referee


@dataclass
class GameConfig:
    player_name: str = "User"
    oracle_name: str = "Assistant"
    # Pause before the oracle starts its turn (UI pacing only)
    thinking_delay_s: float = field(default_factory=lambda: SETTINGS.thinking_delay_s)
    max_attempts: int | None = None  # None -> SETTINGS.oracle_max_attempts
    oracle_timeout_s: float | None = None  # None -> SETTINGS.oracle_timeout_s
    api_override: str | None = None
    prompt_cfg: PromptConfig = field(default_factory=PromptConfig)
    commentary_enabled: bool = True
    commentary_template: str = DEFAULT_COMMENTARY_TEMPLATE
    # Console logging of moves as they happen
    game_log: bool = False


class GameController:
    def __init__(
        self,
        oracle: GenerationOracle,
        bridge: ChatBridge,
        cfg: GameConfig | None = None,
        seed: Union[int, RandomOpponent, None] = None,
    ):
        self.log = logging.getLogger("GameController")
        self.cfg = cfg or GameConfig()
        self.bridge = bridge
        self.chooser = seed if isinstance(seed, RandomOpponent) else RandomOpponent(seed)
        self.resolver = OpponentMoveResolver(
            oracle,
            prompt_cfg=self.cfg.prompt_cfg,
            chooser=self.chooser,
            max_attempts=self.cfg.max_attempts,
            timeout_s=self.cfg.oracle_timeout_s,
            api_override=self.cfg.api_override,
        )
        self.game: Game | None = None
        self.ref: Referee | None = None
        self.handle: Any = None
        self.records: list[dict] = []
        self.final_message: str | None = None
        self._resolving = False
        self._finalized = False
        self._tasks: set[asyncio.Task] = set()
        self.start_ts = time.time()

    # ---------------- State helpers -----------------
    @property
    def status(self) -> Status:
        return self.game.status if self.game else Status.NOT_STARTED

    @property
    def resolving(self) -> bool:
        return self._resolving

    def _symbol_for(self, choice: Union[str, Symbol]) -> Symbol:
        if isinstance(choice, Symbol):
            return choice
        key = str(choice or "random").strip().upper()
        if key == "RANDOM":
            return self.chooser.pick_symbol()
        if key in ("X", "O"):
            return Symbol(key)
        raise ValueError(f"player symbol must be 'X', 'O' or 'random', got {choice!r}")

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ---------------- Lifecycle -----------------
    async def start(self, player_symbol_choice: Union[str, Symbol] = "random") -> Game:
        """Bind to the host, set up an empty board and hand the first move to X."""
        if self.game is not None:
            raise RuntimeError("game already started")
        symbol = self._symbol_for(player_symbol_choice)
        game = Game(player_symbol=symbol)
        try:
            handle = self.bridge.bind(game.id)
        except HostBindError:
            raise
        except Exception as e:
            raise HostBindError(f"failed to bind to host: {e}") from e
        if handle is None:
            raise HostBindError("failed to bind to host")
        self.handle = handle
        self.game = game
        self.ref = Referee(game, player_name=self.cfg.player_name, oracle_name=self.cfg.oracle_name)
        self.log.info("Starting game %s: %s plays %s, %s plays %s", game.id, self.cfg.player_name, symbol.value, self.cfg.oracle_name, game.oracle_symbol.value)
        self._refresh()
        if game.current_turn == game.oracle_symbol:
            self._schedule_oracle_turn()
        return game

    def close(self):
        """Cancel pending work when the host tears the game down."""
        for task in list(self._tasks):
            task.cancel()

    async def wait_idle(self):
        """Wait until no oracle turn or commentary request is pending."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ---------------- Player Turn -----------------
    def submit_player_move(self, row: int, col: int) -> bool:
        """Apply a click if legal; illegal or out-of-turn clicks are ignored."""
        game = self.game
        if game is None or self._resolving:
            return False
        if not is_legal(game, row, col):
            self.log.debug("Ignoring click on (%s, %s)", row, col)
            return False
        mv = self.ref.apply(row, col)
        self._record("PLAYER", mv)
        self._after_move()
        if game.status == Status.IN_PROGRESS:
            self._schedule_oracle_turn()
        return True

    def undo_last_two_moves(self) -> bool:
        game = self.game
        if game is None or self._resolving:
            return False
        if game.status != Status.IN_PROGRESS or game.current_turn != game.player_symbol:
            return False
        if len(game.history) < 2:
            return False
        popped = self.ref.undo_pair()
        self.records.append({"actor": "UNDO", "moves": [(m.row, m.col, m.symbol.value) for m in popped]})
        self.log.debug("Undid moves %s", [m.cell() for m in popped])
        self._refresh()
        return True

    def abort(self) -> bool:
        if self.game is None or not self.ref.abort():
            return False
        self.log.info("Game %s aborted", self.game.id)
        self._refresh()
        self.finalize()
        return True

    # ---------------- Oracle Turn -----------------
    def _schedule_oracle_turn(self):
        # Flag is raised before the task runs so clicks during the delay are rejected.
        self._resolving = True
        self._spawn(self._oracle_turn())

    async def _oracle_turn(self) -> Optional[Move]:
        try:
            if self.cfg.thinking_delay_s > 0:
                await asyncio.sleep(self.cfg.thinking_delay_s)
            return await self._resolve_and_apply()
        finally:
            self._resolving = False

    async def resolve_oracle_move(self) -> Optional[Move]:
        """Run the oracle's turn now, if it is the oracle's turn and nothing is pending."""
        if self._resolving:
            return None
        self._resolving = True
        try:
            return await self._resolve_and_apply()
        finally:
            self._resolving = False

    def _oracle_may_move(self) -> bool:
        game = self.game
        return game is not None and game.status == Status.IN_PROGRESS and game.current_turn == game.oracle_symbol

    async def _resolve_and_apply(self) -> Optional[Move]:
        if not self._oracle_may_move():
            return None
        game = self.game
        self.bridge.update_status(f"{self.cfg.oracle_name} is thinking...", self._players_line())
        resolved = await self.resolver.resolve(game)
        # The game may have been aborted while the oracle was answering.
        if not self._oracle_may_move() or not is_legal(game, resolved.row, resolved.col, for_player=False):
            self.log.info("Discarding oracle move (%d, %d); game is %s", resolved.row, resolved.col, game.status.value)
            return None
        mv = self.ref.apply(resolved.row, resolved.col)
        self._record("ORACLE", mv, resolved)
        self._after_move()
        return mv

    # ---------------- Shared move bookkeeping -----------------
    def _record(self, actor: str, mv: Move, resolved: ResolvedMove | None = None):
        rec: Dict[str, Any] = {"actor": actor, "row": mv.row, "col": mv.col, "symbol": mv.symbol.value, "seq": mv.seq}
        if resolved is not None:
            rec.update({
                "attempts": resolved.attempts,
                "fallback": resolved.fallback,
                "ms": resolved.meta.get("latency_ms"),
                "meta": resolved.meta,
            })
        self.records.append(rec)
        if self.cfg.game_log:
            self.log.info("[move %d] %s: %s at (%d, %d)%s", mv.seq, actor, mv.symbol.value, mv.row, mv.col, " (fallback)" if rec.get("fallback") else "")
        else:
            self.log.debug("Move %d %s %s (%d, %d)", mv.seq, actor, mv.symbol.value, mv.row, mv.col)

    def _after_move(self):
        self._refresh()
        if self.game.status.terminal:
            self.finalize()

    def _players_line(self) -> str:
        game = self.game
        return f"{self.cfg.player_name}: {game.player_symbol.value} | {self.cfg.oracle_name}: {game.oracle_symbol.value}"

    def _refresh(self):
        game = self.game
        self.bridge.render_board(self.handle, game.board, self.submit_player_move)
        if game.status.terminal:
            outcome = self.ref.outcome_text()
            top = outcome[:1].upper() + outcome[1:]
        elif game.current_turn == game.player_symbol:
            top = "Your turn"
        else:
            top = f"{self.cfg.oracle_name}'s turn"
        self.bridge.update_status(top, self._players_line())

    # ---------------- Finalization -----------------
    def finalize(self):
        """Write the summary line once; request commentary for decisive results."""
        game = self.game
        if self._finalized or game is None or not game.status.terminal:
            return
        self._finalized = True
        self.final_message = self.ref.final_message()
        self.bridge.set_final_message(self.final_message)
        self.log.info("Game %s finished: %s", game.id, self.ref.outcome_text())
        if self.cfg.commentary_enabled and game.status in (Status.WON, Status.DRAW):
            self._spawn(self._request_commentary())

    def commentary_prompt(self) -> str:
        game = self.game
        variables = {
            "char": self.cfg.oracle_name,
            "user": self.cfg.player_name,
            "playerSymbol": game.player_symbol.value,
            "aiSymbol": game.oracle_symbol.value,
            "outcome": self.ref.outcome_text(),
        }
        return render_template(self.cfg.commentary_template, variables, self.chooser.pick)

    async def _request_commentary(self):
        prompt_id = f"tictactoe-{self.game.id}"
        try:
            await self.bridge.inject_ephemeral_prompt(prompt_id, self.commentary_prompt())
        except Exception:
            self.log.exception("Commentary request failed for game %s", self.game.id)
        try:
            self.bridge.retract_ephemeral_prompt(prompt_id)
        except Exception:
            self.log.exception("Failed to retract commentary prompt %s", prompt_id)

    # ---------------- Export / Metrics -----------------
    def export_structured_history(self) -> dict:
        """JSON-serialisable snapshot of the game for logs and viewers."""
        game = self.game
        if game is None:
            return {"status": Status.NOT_STARTED.value, "moves": []}
        winner = game.winner.value if isinstance(game.winner, Symbol) else game.winner
        return {
            "id": game.id,
            "players": {
                "player": {"name": self.cfg.player_name, "symbol": game.player_symbol.value},
                "oracle": {"name": self.cfg.oracle_name, "symbol": game.oracle_symbol.value},
            },
            "status": game.status.value,
            "winner": winner,
            "outcome": self.ref.outcome_text(),
            "board": game.board.render_ascii(),
            "moves": [
                {"seq": m.seq, "row": m.row, "col": m.col, "symbol": m.symbol.value}
                for m in game.history
            ],
            "final_message": self.final_message,
        }

    def metrics(self) -> dict:
        oracle_moves = [r for r in self.records if r["actor"] == "ORACLE"]
        latencies = [r["ms"] for r in oracle_moves if r.get("ms") is not None]
        failed_attempts = sum(
            1 for r in oracle_moves for rep in r.get("meta", {}).get("replies", [])
            if not (rep.get("validator") or {}).get("ok")
        )
        return {
            "moves_total": len(self.game.history) if self.game else 0,
            "moves_player": sum(1 for r in self.records if r["actor"] == "PLAYER"),
            "moves_oracle": len(oracle_moves),
            "undos": sum(1 for r in self.records if r["actor"] == "UNDO"),
            "oracle_attempts": sum(r.get("attempts", 0) for r in oracle_moves),
            "oracle_failed_attempts": failed_attempts,
            "oracle_fallbacks": sum(1 for r in oracle_moves if r.get("fallback")),
            "latency_ms_avg": statistics.mean(latencies) if latencies else 0,
            "status": self.status.value,
            "duration_s": round(time.time() - self.start_ts, 2),
        }
