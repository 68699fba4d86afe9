"""
Tests for the text layout of the board.
"""
from unittest import TestCase, main

import core
from render import BOARD_HEIGHT, BOARD_WIDTH, format_tile, render_lines


class TestFormatTile(TestCase):
    def test_empty_tile_is_blank(self):
        self.assertEqual(format_tile(0), " " * 8)

    def test_values_are_right_aligned(self):
        self.assertEqual(format_tile(1), "     2  ")
        self.assertEqual(format_tile(7), "   128  ")
        self.assertEqual(format_tile(11), "  2048  ")


class TestRenderLines(TestCase):
    def setUp(self):
        self.grid = core.grid_from_rows([
            [1, 0, 0, 11],
            [0, 0, 0, 0],
            [0, 3, 0, 0],
            [0, 0, 0, 0],
        ])

    def test_board_dimensions(self):
        self.assertEqual(BOARD_WIDTH, 37)
        self.assertEqual(BOARD_HEIGHT, 17)

    def test_centered_layout(self):
        lines = render_lines(self.grid, 36, width=80, height=24)
        # (24 - 17) // 2 - 3 == 0 blank lines, then the score and a spacer.
        self.assertEqual(lines[0], " " * 35 + "Score: 36")
        self.assertEqual(lines[1], "")
        board = lines[2:]
        self.assertEqual(len(board), BOARD_HEIGHT)
        self.assertEqual(board[0], " " * 21 + "+--------" * 4 + "+")
        self.assertEqual(board[1], " " * 21 + "|        " * 4 + "|")
        self.assertEqual(board[2], " " * 21 + "|     2  |        |        |  2048  |")
        self.assertEqual(board[10], " " * 21 + "|        |     8  |        |        |")
        self.assertEqual(board[-1], board[0])

    def test_top_margin_on_tall_screen(self):
        lines = render_lines(self.grid, 0, width=37, height=40)
        tspace = (40 - 17) // 2 - 3
        self.assertEqual(lines[:tspace], [""] * tspace)
        self.assertTrue(lines[tspace].endswith("Score: 0"))
        self.assertTrue(lines[tspace + 2].startswith("+"))

    def test_small_screen_has_no_margins(self):
        lines = render_lines(self.grid, 4, width=10, height=5)
        self.assertEqual(lines[0], "Score: 4")
        self.assertEqual(lines[2], "+--------" * 4 + "+")
        self.assertEqual(len(lines), 2 + BOARD_HEIGHT)


if __name__ == "__main__":
    main()
