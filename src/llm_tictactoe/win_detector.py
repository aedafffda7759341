"""Terminal-condition check for a 3x3 board."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .board import Board, Symbol

LINES = (
    # rows
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    # columns
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    # diagonals
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)


@dataclass(frozen=True)
class Evaluation:
    """Won (winner set), Draw (draw=True) or Undetermined (neither)."""

    winner: Optional[Symbol] = None
    draw: bool = False

    @property
    def undetermined(self) -> bool:
        return self.winner is None and not self.draw


UNDETERMINED = Evaluation()


def evaluate(board: Board) -> Evaluation:
    # Lines first: filling the last cell while completing a line is a win.
    for a, b, c in LINES:
        first = board[a]
        if first is not None and first == board[b] == board[c]:
            return Evaluation(winner=first)
    if board.is_full():
        return Evaluation(draw=True)
    return UNDETERMINED
