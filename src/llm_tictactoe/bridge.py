"""
Collaborator interfaces consumed by GameController.

- GenerationOracle: async text generator standing in for the non-human player.
- ChatBridge: host surface that renders the board, shows status text, stores the
  final summary line and runs one-shot ephemeral prompts for post-game commentary.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Protocol

from .board import Board

CellClick = Callable[[int, int], Any]


class HostBindError(RuntimeError):
    """The host could not locate or create the surface for a new game."""


class GenerationOracle(Protocol):
    def __call__(
        self,
        prompt: str,
        api_override: Optional[str] = None,
        instruct_override: bool = False,
        quiet_to_loud: bool = False,
        system_prompt_override: Optional[str] = None,
        max_output_length: Optional[int] = None,
    ) -> Awaitable[str]: ...


class ChatBridge:
    """Interface for the host UI/persistence surface of one game."""

    def bind(self, game_id: str) -> Any:
        """Create or locate the host surface for game_id and return its handle.

        Raise HostBindError (or return None) when no surface is available.
        """
        raise NotImplementedError

    def render_board(self, handle: Any, board: Board, on_cell_click: CellClick) -> None:
        raise NotImplementedError

    def update_status(self, top_text: str, bottom_text: str = "") -> None:
        raise NotImplementedError

    def set_final_message(self, text: str) -> None:
        raise NotImplementedError

    async def inject_ephemeral_prompt(self, prompt_id: str, text: str) -> None:
        raise NotImplementedError

    def retract_ephemeral_prompt(self, prompt_id: str) -> None:
        raise NotImplementedError
