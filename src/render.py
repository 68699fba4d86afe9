# render.py
# Lays out a grid and score as plain text lines centered in a screen of a given size.

from typing import List

from core import BOARD_SIZE, Grid

TILE_WIDTH = 8
TILE_HEIGHT = 3
BOARD_WIDTH = (1 + TILE_WIDTH) * BOARD_SIZE + 1
BOARD_HEIGHT = (1 + TILE_HEIGHT) * BOARD_SIZE + 1


def format_tile(exponent: int) -> str:
    """Returns the tile's value right-aligned in four digits and padded to TILE_WIDTH; blank if empty."""
    digits = f"{2 ** exponent:>4}" if exponent else " " * 4
    hspace = TILE_WIDTH - 4
    left = hspace // 2
    return " " * left + digits + " " * (hspace - left)


def _h_line(v_edge: str, h_edge: str, lspace: int) -> str:
    return " " * lspace + (v_edge + h_edge * TILE_WIDTH) * BOARD_SIZE + v_edge


def render_lines(grid: Grid, score: int, width: int, height: int) -> List[str]:
    """
    Draws the board and score for a screen of width x height characters.
    Args:
        grid (Grid): The grid to draw.
        score (int): The accumulated score, shown above the board.
        width (int): Screen width in columns.
        height (int): Screen height in rows.
    Returns:
        List[str]: Lines to print from the top of the screen. Margins that would be
                   negative on a small screen are dropped.
    """
    lspace = max(0, (width - BOARD_WIDTH) // 2)
    tspace = max(0, (height - BOARD_HEIGHT) // 2 - 3)
    top_vspace = (TILE_HEIGHT - 1) // 2
    bot_vspace = (TILE_HEIGHT - 1) - top_vspace

    lines = [""] * tspace
    lines.append(" " * max(0, width // 2 - 5) + f"Score: {score}")
    lines.append("")
    for row in grid:
        lines.append(_h_line("+", "-", lspace))
        lines.extend(_h_line("|", " ", lspace) for _ in range(top_vspace))
        lines.append(" " * lspace + "|" + "|".join(format_tile(e) for e in row) + "|")
        lines.extend(_h_line("|", " ", lspace) for _ in range(bot_vspace))
    lines.append(_h_line("+", "-", lspace))
    return lines
