import dataclasses
import unittest
from unittest.mock import patch

from src.llm_tictactoe.board import Game, Symbol
from src.llm_tictactoe.prompting import (
    DEFAULT_COMMENTARY_TEMPLATE,
    PromptConfig,
    build_move_prompt,
    render_custom_prompt,
    render_template,
)


def last_option(options):
    return options[-1]


class MovePromptTests(unittest.TestCase):
    def test_prompt_lists_symbol_board_and_legal_moves(self):
        game = Game(player_symbol=Symbol.X)
        game.board.place(0, 0, Symbol.X)
        game.board.place(1, 1, Symbol.O)
        expected = (
            "You are playing Tic-Tac-Toe as O.\n"
            "Current board ('-' is an empty cell):\n"
            "X - -\n"
            "- O -\n"
            "- - -\n"
            "Legal moves (row, col):\n"
            "(0, 1)\n(0, 2)\n(1, 0)\n(1, 2)\n(2, 0)\n(2, 1)\n(2, 2)\n"
            "Reply with only your chosen move in the form (row, col)."
        )
        self.assertEqual(build_move_prompt(game), expected)

    def test_prompt_is_deterministic(self):
        game = Game(player_symbol=Symbol.O)
        self.assertEqual(build_move_prompt(game), build_move_prompt(game))
        self.assertIn("as X.", build_move_prompt(game))

    def test_custom_template(self):
        game = Game(player_symbol=Symbol.X)
        cfg = PromptConfig(template="{SYMBOL}|{UNKNOWN}")
        self.assertEqual(build_move_prompt(game, cfg), "O|{UNKNOWN}")

    def test_output_budget_comes_from_settings(self):
        from src.llm_tictactoe import prompting

        self.assertEqual(PromptConfig().max_output_length, prompting.SETTINGS.oracle_max_output_length)
        custom = dataclasses.replace(prompting.SETTINGS, oracle_max_output_length=64)
        with patch.object(prompting, "SETTINGS", custom):
            self.assertEqual(PromptConfig().max_output_length, 64)
        self.assertEqual(PromptConfig(max_output_length=8).max_output_length, 8)

    def test_render_custom_prompt_leaves_unknown_tokens(self):
        self.assertEqual(render_custom_prompt("{A} {B}", {"A": "1"}), "1 {B}")


class RenderTemplateTests(unittest.TestCase):
    VARS = {"char": "Bot", "user": "Ann", "playerSymbol": "X", "aiSymbol": "O", "outcome": "Ann wins"}

    def test_named_placeholders(self):
        text = render_template("{{user}} ({{playerSymbol}}) vs {{char}} ({{aiSymbol}}): {{outcome}}", self.VARS, last_option)
        self.assertEqual(text, "Ann (X) vs Bot (O): Ann wins")

    def test_random_placeholder_uses_picker(self):
        text = render_template("{{random: calm, loud ,smug}}!", self.VARS, last_option)
        self.assertEqual(text, "smug!")

    def test_unknown_and_missing_placeholders_left_intact(self):
        text = render_template("{{mood}} {{char}} {{random:}}", {}, last_option)
        self.assertEqual(text, "{{mood}} {{char}} {{random:}}")

    def test_default_commentary_template_renders_fully(self):
        text = render_template(DEFAULT_COMMENTARY_TEMPLATE, self.VARS, last_option)
        self.assertNotIn("{{", text)
        self.assertIn("Ann (X)", text)
        self.assertIn("Bot (O)", text)
        self.assertIn("Outcome: Ann wins", text)
        self.assertIn("competitive", text)


if __name__ == "__main__":
    unittest.main()
