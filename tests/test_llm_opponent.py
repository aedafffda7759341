import asyncio
import unittest
from unittest.mock import AsyncMock

from src.llm_tictactoe.board import Game, Symbol
from src.llm_tictactoe.config import SETTINGS
from src.llm_tictactoe.llm_opponent import OpponentMoveResolver, ResolutionInFlight
from src.llm_tictactoe.random_opponent import RandomOpponent


def game_with(cells):
    """Game (player X) with the given (row, col, symbol) cells already filled."""
    game = Game(player_symbol=Symbol.X)
    for row, col, sym in cells:
        game.board.place(row, col, sym)
    game.current_turn = Symbol.O
    return game


ONLY_CENTER_FREE = game_with([
    (0, 0, Symbol.X), (0, 1, Symbol.O), (0, 2, Symbol.X),
    (1, 0, Symbol.X), (1, 2, Symbol.O),
    (2, 0, Symbol.O), (2, 1, Symbol.X), (2, 2, Symbol.O),
])


class OpponentMoveResolverTests(unittest.IsolatedAsyncioTestCase):
    def resolver(self, oracle, **kw):
        kw.setdefault("max_attempts", 3)
        kw.setdefault("timeout_s", 0)
        kw.setdefault("chooser", RandomOpponent(7))
        return OpponentMoveResolver(oracle, **kw)

    async def test_parenthesised_reply(self):
        oracle = AsyncMock(return_value="(1, 2)")
        res = await self.resolver(oracle).resolve(Game(player_symbol=Symbol.X))
        self.assertEqual((res.row, res.col), (1, 2))
        self.assertFalse(res.fallback)
        self.assertEqual(res.attempts, 1)
        oracle.assert_awaited_once()
        args, kwargs = oracle.call_args
        self.assertIn("You are playing Tic-Tac-Toe as O.", args[0])
        self.assertEqual(kwargs["max_output_length"], SETTINGS.oracle_max_output_length)

    async def test_substring_reply(self):
        oracle = AsyncMock(return_value="I'll go with 2,0 this time")
        res = await self.resolver(oracle).resolve(Game(player_symbol=Symbol.X))
        self.assertEqual((res.row, res.col), (2, 0))

    async def test_unparseable_reply_uses_all_attempts_then_falls_back(self):
        game = game_with([(0, 0, Symbol.X)])
        oracle = AsyncMock(return_value="I pass")
        res = await self.resolver(oracle).resolve(game)
        self.assertEqual(oracle.await_count, 3)
        self.assertTrue(res.fallback)
        self.assertIn((res.row, res.col), game.legal_moves())
        self.assertEqual(len(res.meta["replies"]), 3)

    async def test_same_prompt_on_every_attempt(self):
        oracle = AsyncMock(side_effect=["nope", "still no", "(2, 2)"])
        res = await self.resolver(oracle).resolve(Game(player_symbol=Symbol.X))
        self.assertEqual((res.row, res.col, res.attempts), (2, 2, 3))
        prompts = {call.args[0] for call in oracle.call_args_list}
        self.assertEqual(len(prompts), 1)

    async def test_oracle_exceptions_count_as_attempts(self):
        oracle = AsyncMock(side_effect=[RuntimeError("network down"), "(0, 1)"])
        res = await self.resolver(oracle).resolve(Game(player_symbol=Symbol.X))
        self.assertEqual((res.row, res.col), (0, 1))
        self.assertEqual(res.attempts, 2)
        self.assertIn("error", res.meta["replies"][0])

    async def test_exceptions_on_every_attempt_never_propagate(self):
        oracle = AsyncMock(side_effect=RuntimeError("boom"))
        game = Game(player_symbol=Symbol.X)
        res = await self.resolver(oracle).resolve(game)
        self.assertTrue(res.fallback)
        self.assertIn((res.row, res.col), game.legal_moves())

    async def test_non_text_replies_count_as_failed_attempts(self):
        for bad in (b"(1, 1)", {"move": "(1, 1)"}, 11, None):
            with self.subTest(reply=bad):
                game = Game(player_symbol=Symbol.X)
                oracle = AsyncMock(return_value=bad)
                res = await self.resolver(oracle).resolve(game)
                self.assertEqual(oracle.await_count, 3)
                self.assertTrue(res.fallback)
                self.assertIn((res.row, res.col), game.legal_moves())

    async def test_non_text_reply_then_text_reply(self):
        oracle = AsyncMock(side_effect=[b"(0, 0)", "(2, 1)"])
        res = await self.resolver(oracle).resolve(Game(player_symbol=Symbol.X))
        self.assertEqual((res.row, res.col, res.attempts), (2, 1, 2))
        self.assertEqual(res.meta["replies"][0]["validator"]["reason"], "non_text_reply")

    async def test_single_legal_move_fallback_is_forced(self):
        for seed in range(5):
            res = await self.resolver(AsyncMock(return_value="I pass"), chooser=RandomOpponent(seed)).resolve(ONLY_CENTER_FREE)
            self.assertEqual((res.row, res.col), (1, 1))

    async def test_never_returns_occupied_cell(self):
        game = game_with([(0, 0, Symbol.X), (1, 1, Symbol.O), (2, 2, Symbol.X)])
        oracle = AsyncMock(return_value="(0, 0) or maybe 1,1 or (2, 2)")
        for seed in range(5):
            res = await self.resolver(oracle, chooser=RandomOpponent(seed)).resolve(game)
            self.assertTrue(game.board.is_empty(res.row, res.col))

    async def test_timeout_counts_as_failed_attempt(self):
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)
            return "(0, 0)"

        game = Game(player_symbol=Symbol.X)
        res = await self.resolver(slow, max_attempts=2, timeout_s=0.01).resolve(game)
        self.assertTrue(res.fallback)
        self.assertEqual(len(res.meta["replies"]), 2)

    async def test_single_flight_per_game(self):
        release = asyncio.Event()

        async def gated(*args, **kwargs):
            await release.wait()
            return "(1, 1)"

        resolver = self.resolver(gated)
        game = Game(player_symbol=Symbol.X)
        first = asyncio.create_task(resolver.resolve(game))
        await asyncio.sleep(0)
        self.assertTrue(resolver.in_flight(game.id))
        with self.assertRaises(ResolutionInFlight):
            await resolver.resolve(game)
        release.set()
        res = await first
        self.assertEqual((res.row, res.col), (1, 1))
        self.assertFalse(resolver.in_flight(game.id))


if __name__ == "__main__":
    unittest.main()
