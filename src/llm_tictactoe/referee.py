"""
Referee: centralized game state and result bookkeeping.

- Owns the Game and applies already-validated moves, running the win detector after each one.
- Undoes the last player/oracle pair and records aborts.
- outcome_text()/final_message() build the one-line summary written back to the host chat.

Used by GameController, which validates input before calling into the referee.

"""
from __future__ import annotations

from typing import List, Optional

from .board import DRAW, Game, Move, Status, Symbol
from .win_detector import evaluate


class Referee:
    """Plain Tic-Tac-Toe referee around a Game."""

    def __init__(self, game: Game, player_name: str = "User", oracle_name: str = "Assistant"):
        self.game = game
        self.player_name = player_name
        self.oracle_name = oracle_name

    # ---------------- Move Application -----------------
    def apply(self, row: int, col: int) -> Move:
        """Place the side-to-move's symbol, flip the turn and update status/winner."""
        game = self.game
        if game.status != Status.IN_PROGRESS:
            raise ValueError(f"game is {game.status.value}, no moves accepted")
        mv = game.board.place(row, col, game.current_turn)
        game.current_turn = mv.symbol.other
        result = evaluate(game.board)
        if result.winner is not None:
            game.status = Status.WON
            game.winner = result.winner
        elif result.draw:
            game.status = Status.DRAW
            game.winner = DRAW
        return mv

    def undo_pair(self) -> List[Move]:
        """Pop the oracle's move then the player's move; hand the turn back to the player."""
        game = self.game
        if len(game.history) < 2:
            raise ValueError("need at least two moves to undo")
        popped = [game.board.pop(), game.board.pop()]
        game.current_turn = game.player_symbol
        game.status = Status.IN_PROGRESS
        game.winner = None
        return popped

    def abort(self) -> bool:
        if self.game.status != Status.IN_PROGRESS:
            return False
        self.game.status = Status.ABORTED
        self.game.winner = None
        return True

    # ---------------- Result / Summary -----------------
    def label_for(self, symbol: Optional[Symbol]) -> str:
        if symbol == self.game.player_symbol:
            return self.player_name
        return self.oracle_name

    def outcome_text(self) -> str:
        game = self.game
        if game.status == Status.WON:
            return f"{self.label_for(game.winner)} wins"
        if game.status == Status.DRAW:
            return "the game is a draw"
        if game.status == Status.ABORTED:
            return "the game was inconclusive"
        return "the game is in progress"

    def final_message(self) -> str:
        game = self.game
        return (
            f"[{self.player_name} ({game.player_symbol.value}) played Tic-Tac-Toe against "
            f"{self.oracle_name} ({game.oracle_symbol.value}). Outcome: {self.outcome_text()}]"
        )
