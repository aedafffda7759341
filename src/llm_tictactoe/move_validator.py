"""
Move legality and parsing helpers for oracle replies.

- is_legal(): legality of a proposed cell against the current game state.
- parse_oracle_reply(): turn free-form text into one of the legal cells.
  1. regex "(r, c)" / "r,c" anywhere in the trimmed reply, accepted only if legal;
  2. otherwise the first legal move whose literal "(r, c)" or "r,c" appears in the reply;
  3. otherwise no move.
"""
from __future__ import annotations

import re
from typing import Iterable, Tuple, TypedDict

from .board import Game, Status

CELL_RE = re.compile(r"\(?(\d)\s*,\s*(\d)\)?")


class ParsedMove(TypedDict, total=False):
    ok: bool
    row: int
    col: int
    via: str  # "regex" | "substring"
    reason: str


def is_legal(game: Game, row: int, col: int, for_player: bool = True) -> bool:
    if game.status != Status.IN_PROGRESS:
        return False
    if not isinstance(row, int) or not isinstance(col, int):
        return False
    if isinstance(row, bool) or isinstance(col, bool):
        return False
    if not game.board.in_range(row, col):
        return False
    if not game.board.is_empty(row, col):
        return False
    if for_player and game.current_turn != game.player_symbol:
        return False
    return True


def format_cell(row: int, col: int) -> str:
    return f"({row}, {col})"


def parse_oracle_reply(raw_text: str, legal: Iterable[Tuple[int, int]]) -> ParsedMove:
    """Match a reply against the legal moves. Never returns an occupied cell."""
    legal = list(legal)
    if raw_text is not None and not isinstance(raw_text, str):
        return {"ok": False, "reason": "non_text_reply"}
    text = (raw_text or "").strip()
    if not text:
        return {"ok": False, "reason": "empty_reply"}
    if not legal:
        return {"ok": False, "reason": "no_legal_moves"}

    m = CELL_RE.search(text)
    if m:
        pair = (int(m.group(1)), int(m.group(2)))
        if pair in legal:
            return {"ok": True, "row": pair[0], "col": pair[1], "via": "regex"}

    for row, col in legal:
        if format_cell(row, col) in text or f"{row},{col}" in text:
            return {"ok": True, "row": row, "col": col, "via": "substring"}

    return {"ok": False, "reason": "illegal_move" if m else "no_move_found"}


__all__ = [
    "is_legal",
    "parse_oracle_reply",
    "format_cell",
    "ParsedMove",
]
