"""
Prompt builders and config for oracle move requests and post-game commentary.

Move prompts use a modular template with single-brace placeholders ({SYMBOL}, {BOARD},
{LEGAL_MOVES}) that are substituted per turn. Commentary prompts use the host chat's
double-brace syntax, rendered by render_template() over a fixed variable set.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Sequence

from .board import Game
from .config import SETTINGS
from .move_validator import format_cell

DEFAULT_MOVE_SYSTEM = (
    "You are playing Tic-Tac-Toe. When asked for a move, reply with only the cell you choose."
)
DEFAULT_MOVE_TEMPLATE = """You are playing Tic-Tac-Toe as {SYMBOL}.
Current board ('-' is an empty cell):
{BOARD}
Legal moves (row, col):
{LEGAL_MOVES}
Reply with only your chosen move in the form (row, col)."""

DEFAULT_COMMENTARY_TEMPLATE = (
    "[{{user}} ({{playerSymbol}}) just finished a game of Tic-Tac-Toe against {{char}} ({{aiSymbol}}). "
    "Outcome: {{outcome}}. Write {{char}}'s {{random:playful,smug,gracious,dramatic,competitive}} "
    "reaction to the result, staying in character.]"
)

# Variables the commentary template may reference; anything else is left as written.
TEMPLATE_VARIABLES = ("char", "user", "playerSymbol", "aiSymbol", "outcome")
PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z]+)\s*(?::([^{}]*))?\}\}")


@dataclass
class PromptConfig:
    """Configuration for shaping move prompts using a custom template."""

    system_instructions: str = DEFAULT_MOVE_SYSTEM
    template: str = DEFAULT_MOVE_TEMPLATE
    max_output_length: int = field(default_factory=lambda: SETTINGS.oracle_max_output_length)


def render_custom_prompt(template: str, values: Dict[str, str]) -> str:
    """Replace known placeholders in the template. Unknown tokens are left intact."""
    rendered = template or ""
    for key, val in values.items():
        rendered = rendered.replace(f"{{{key}}}", val)
    return rendered


def build_move_prompt(game: Game, prompt_cfg: Optional[PromptConfig] = None) -> str:
    """Deterministic move request for the oracle's side of the given game."""
    cfg = prompt_cfg or PromptConfig()
    values = {
        "SYMBOL": game.oracle_symbol.value,
        "BOARD": game.board.render_ascii(),
        "LEGAL_MOVES": "\n".join(format_cell(r, c) for r, c in game.legal_moves()),
    }
    return render_custom_prompt(cfg.template, values)


def render_template(
    template: str,
    variables: Mapping[str, str],
    pick: Callable[[Sequence[str]], str],
) -> str:
    """Render {{name}} and {{random:a,b,c}} placeholders.

    Only names in TEMPLATE_VARIABLES are substituted, and only when a value is supplied.
    `pick` chooses one option for random placeholders.
    """

    def _sub(m: re.Match) -> str:
        name, arg = m.group(1), m.group(2)
        if name == "random":
            options = [o.strip() for o in (arg or "").split(",") if o.strip()]
            return pick(options) if options else m.group(0)
        if arg is None and name in TEMPLATE_VARIABLES and name in variables:
            return str(variables[name])
        return m.group(0)

    return PLACEHOLDER_RE.sub(_sub, template or "")
