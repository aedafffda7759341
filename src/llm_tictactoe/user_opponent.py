from __future__ import annotations
"""Interactive human input for the console host."""
import asyncio
import re
from typing import Optional, Tuple, Union

CELL_INPUT_RE = re.compile(r"^\(?\s*([0-2])\s*[, ]\s*([0-2])\s*\)?$")
COMMANDS = {"undo", "quit"}


def parse_cell_input(raw: str) -> Union[Tuple[int, int], str, None]:
    """Return (row, col), a command name, or None for unrecognized input."""
    text = (raw or "").strip().lower()
    if text in COMMANDS:
        return text
    if text == "q":
        return "quit"
    m = CELL_INPUT_RE.match(text)
    if m:
        return int(m.group(1)), int(m.group(2))
    if len(text) == 1 and text in "123456789":
        idx = int(text) - 1
        return idx // 3, idx % 3
    return None


class UserOpponent:
    name = "Human"

    async def choose(self, prompt: str = "Your move (row col, 1-9, undo, quit): ") -> Union[Tuple[int, int], str]:
        """Prompt on stdin until the input is a cell or a command."""
        while True:
            raw: Optional[str] = await asyncio.to_thread(input, prompt)
            parsed = parse_cell_input(raw)
            if parsed is not None:
                return parsed
            print("Unrecognized input. Enter 'row col' (e.g. 1 2), a number 1-9, 'undo' or 'quit'.")
