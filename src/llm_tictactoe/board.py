"""
Board and game state for Tic-Tac-Toe.

- Symbol/Status enums, the immutable Move record and the 3x3 Board with its move history.
- Game bundles the board with the symbol assignment, turn, status and winner.
- render_ascii() produces the grid used in oracle prompts ('-' for empty cells).

"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

SIZE = 3
EMPTY = "-"


class Symbol(str, Enum):
    X = "X"
    O = "O"

    @property
    def other(self) -> "Symbol":
        return Symbol.O if self is Symbol.X else Symbol.X


class Status(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAW = "draw"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self in (Status.WON, Status.DRAW, Status.ABORTED)


DRAW = "draw"  # winner marker for drawn games
Winner = Union[Symbol, str, None]
Cell = Optional[Symbol]


@dataclass(frozen=True)
class Move:
    row: int
    col: int
    symbol: Symbol
    seq: int

    def cell(self) -> Tuple[int, int]:
        return self.row, self.col


class Board:
    """3x3 grid plus chronological move history."""

    def __init__(self):
        self._cells: List[List[Cell]] = [[None] * SIZE for _ in range(SIZE)]
        self.history: List[Move] = []

    def __getitem__(self, pos: Tuple[int, int]) -> Cell:
        row, col = pos
        return self._cells[row][col]

    def rows(self) -> List[List[Cell]]:
        return [list(r) for r in self._cells]

    @staticmethod
    def in_range(row: int, col: int) -> bool:
        return 0 <= row < SIZE and 0 <= col < SIZE

    def is_empty(self, row: int, col: int) -> bool:
        return self._cells[row][col] is None

    def empty_cells(self) -> List[Tuple[int, int]]:
        """Empty cells in row-major order."""
        return [(r, c) for r in range(SIZE) for c in range(SIZE) if self._cells[r][c] is None]

    def is_full(self) -> bool:
        return not self.empty_cells()

    def place(self, row: int, col: int, symbol: Symbol) -> Move:
        if not self.in_range(row, col):
            raise ValueError(f"cell ({row}, {col}) is off the board")
        if self._cells[row][col] is not None:
            raise ValueError(f"cell ({row}, {col}) is already taken")
        mv = Move(row=row, col=col, symbol=symbol, seq=len(self.history) + 1)
        self._cells[row][col] = symbol
        self.history.append(mv)
        return mv

    def pop(self) -> Move:
        mv = self.history.pop()
        self._cells[mv.row][mv.col] = None
        return mv

    def render_ascii(self) -> str:
        return "\n".join(
            " ".join(cell.value if cell else EMPTY for cell in row) for row in self._cells
        )

    def __str__(self) -> str:
        return self.render_ascii()


@dataclass
class Game:
    player_symbol: Symbol
    board: Board = field(default_factory=Board)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    current_turn: Symbol = Symbol.X
    status: Status = Status.IN_PROGRESS
    winner: Winner = None

    @property
    def oracle_symbol(self) -> Symbol:
        return self.player_symbol.other

    @property
    def history(self) -> List[Move]:
        return self.board.history

    def legal_moves(self) -> List[Tuple[int, int]]:
        if self.status != Status.IN_PROGRESS:
            return []
        return self.board.empty_cells()
