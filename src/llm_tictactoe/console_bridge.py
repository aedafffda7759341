"""
ConsoleChatBridge: terminal stand-in for the host chat.

Prints the board and status lines, keeps the final summary in `final_message`, and
answers the ephemeral commentary prompt by sending it to the oracle and printing the reply.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .board import Board
from .bridge import CellClick, ChatBridge, GenerationOracle


class ConsoleChatBridge(ChatBridge):
    def __init__(self, oracle: Optional[GenerationOracle] = None, out=print):
        self.oracle = oracle
        self.out = out
        self.log = logging.getLogger("ConsoleChatBridge")
        self.final_message: Optional[str] = None
        self.on_cell_click: Optional[CellClick] = None
        self._ephemeral: Dict[str, str] = {}

    def bind(self, game_id: str) -> Any:
        return f"console-{game_id}"

    def render_board(self, handle: Any, board: Board, on_cell_click: CellClick) -> None:
        self.on_cell_click = on_cell_click
        self.out("")
        self.out("    0 1 2")
        for idx, line in enumerate(board.render_ascii().splitlines()):
            self.out(f"  {idx} {line}")

    def update_status(self, top_text: str, bottom_text: str = "") -> None:
        self.out(f"{top_text}  ({bottom_text})" if bottom_text else top_text)

    def set_final_message(self, text: str) -> None:
        self.final_message = text
        self.out(text)

    async def inject_ephemeral_prompt(self, prompt_id: str, text: str) -> None:
        self._ephemeral[prompt_id] = text
        if self.oracle is None:
            return
        reply = await self.oracle(text, max_output_length=200)
        self.out(reply)

    def retract_ephemeral_prompt(self, prompt_id: str) -> None:
        if self._ephemeral.pop(prompt_id, None) is None:
            self.log.debug("No ephemeral prompt %s to retract", prompt_id)
