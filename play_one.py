import argparse
import asyncio
import json
import logging

from src.llm_tictactoe.board import Status
from src.llm_tictactoe.console_bridge import ConsoleChatBridge
from src.llm_tictactoe.game import GameConfig, GameController
from src.llm_tictactoe.llm_client import OpenAIGenerationOracle
from src.llm_tictactoe.user_opponent import UserOpponent


def load_json_config(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logging.getLogger("play_one").error("Failed to read config %s: %s", path, e)
        return {}


async def run_game(ctl: GameController, symbol: str, human: UserOpponent) -> str:
    await ctl.start(symbol)
    try:
        while not ctl.status.terminal:
            await ctl.wait_idle()
            if ctl.status.terminal:
                break
            choice = await human.choose()
            if choice == "quit":
                ctl.abort()
            elif choice == "undo":
                if not ctl.undo_last_two_moves():
                    print("Nothing to undo right now.")
            elif not ctl.submit_player_move(*choice):
                print("That cell is not available.")
        await ctl.wait_idle()
    finally:
        ctl.close()
    return ctl.ref.outcome_text()


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default=None, help="Optional JSON config file to load defaults from.")
    ap.add_argument("--model", default=None, help="Oracle model name (overrides settings)")
    ap.add_argument("--symbol", choices=["X", "O", "random"], default=None, help="Which symbol you play")
    ap.add_argument("--name", default=None, help="Your display name")
    ap.add_argument("--oracle-name", default=None, help="Display name of the AI player")
    ap.add_argument("--thinking-delay", type=float, default=None, help="Seconds to pause before each AI move")
    ap.add_argument("--max-attempts", type=int, default=None, help="Oracle attempts per move before the random fallback")
    ap.add_argument("--timeout", type=float, default=None, help="Per-call oracle timeout in seconds (0 disables)")
    ap.add_argument("--seed", type=int, default=None, help="Seed for symbol assignment and fallback moves")
    ap.add_argument("--no-commentary", action="store_true", help="Skip the post-game commentary request")
    ap.add_argument("--game-log", action="store_true", help="Log every move at INFO level")
    ap.add_argument("--history-out", default=None, help="Optional path to write the structured game history JSON")
    ap.add_argument("--log-level", default=None, help="Python logging level (e.g., INFO, DEBUG)")

    args = ap.parse_args()

    cfg_dict = load_json_config(args.config) if args.config else {}

    # Resolve values with precedence: CLI arg if provided -> config -> default
    def pick(*keys, default=None):
        for k in keys:
            v = getattr(args, k, None)
            if v is not None:
                return v
            if k in cfg_dict and cfg_dict[k] is not None:
                return cfg_dict[k]
        return default

    log_level = pick("log_level", default="WARNING").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.WARNING), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("play_one")

    oracle = OpenAIGenerationOracle(model=pick("model"))
    gcfg = GameConfig(
        player_name=pick("name", default="User"),
        oracle_name=pick("oracle_name", default="Assistant"),
        max_attempts=pick("max_attempts"),
        oracle_timeout_s=pick("timeout"),
        commentary_enabled=not (args.no_commentary or cfg_dict.get("no_commentary", False)),
        game_log=args.game_log or bool(cfg_dict.get("game_log", False)),
    )
    delay = pick("thinking_delay")
    if delay is not None:
        gcfg.thinking_delay_s = float(delay)

    ctl = GameController(oracle, ConsoleChatBridge(oracle), cfg=gcfg, seed=pick("seed"))
    symbol = pick("symbol", default="random")
    log.info("Starting game: model=%s symbol=%s", oracle.model, symbol)
    outcome = asyncio.run(run_game(ctl, symbol, UserOpponent()))

    print("Outcome:", outcome)
    print("Metrics:", ctl.metrics())

    if args.history_out:
        with open(args.history_out, "w", encoding="utf-8") as f:
            json.dump(ctl.export_structured_history(), f, ensure_ascii=False, indent=2)
        log.info("Wrote history to %s", args.history_out)

    if ctl.status == Status.ABORTED:
        log.info("Game aborted by user")
