# cli_driver.py
# This file is intended to be run to play the 2048 game in a terminal.

import argparse
import curses
import logging
import sys
from typing import Callable, Dict, List, Optional, Tuple

from core import (
    DIRECTION,
    Grid,
    GameProgressState,
    apply_move,
    determine_game_status,
    new_grid,
)
from randomness import RandRStream, seed_from_clock
from render import render_lines

logger = logging.getLogger(__name__)

QUIT_KEYS = (ord('q'), ord('Q'))

KEY_TO_DIRECTION: Dict[int, DIRECTION] = {
    curses.KEY_UP: DIRECTION.UP,
    curses.KEY_DOWN: DIRECTION.DOWN,
    curses.KEY_LEFT: DIRECTION.LEFT,
    curses.KEY_RIGHT: DIRECTION.RIGHT,
    ord('w'): DIRECTION.UP,
    ord('s'): DIRECTION.DOWN,
    ord('a'): DIRECTION.LEFT,
    ord('d'): DIRECTION.RIGHT,
}


def direction_for_key(key: int) -> Optional[DIRECTION]:
    """Decodes a curses key code; unknown keys are a no-op and map to None."""
    return KEY_TO_DIRECTION.get(key)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play 2048 in the terminal")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed (defaults to the current time)")
    parser.add_argument("--log-file", type=str, default=None,
                        help="Write logs to this file (the terminal is owned by the game)")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    return parser.parse_args(argv)


def configure_logging(log_file: Optional[str], level: str) -> None:
    handlers: List[logging.Handler] = [
        logging.FileHandler(log_file) if log_file else logging.NullHandler()
    ]
    logging.basicConfig(
        level=getattr(logging, level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def play(
    read_key: Callable[[], int],
    draw: Callable[[Grid, int], None],
    rng: RandRStream,
) -> Tuple[Grid, int, GameProgressState]:
    """
    Runs the game loop until the game is won, lost, or the player quits.
    Args:
        read_key (Callable[[], int]): Blocks until a key code is available.
        draw (Callable[[Grid, int], None]): Shows the grid and score.
        rng (RandRStream): The session's random stream.
    Returns:
        Tuple[Grid, int, GameProgressState]: The final grid, score and progress.
        The progress is IN_PROGRESS if the player quit.
    """
    grid = new_grid(rng)
    score = 0
    progress = determine_game_status(grid)

    while progress == GameProgressState.IN_PROGRESS:
        draw(grid, score)
        key = read_key()
        if key in QUIT_KEYS:
            logger.info("Player quit with score %d", score)
            break
        direction = direction_for_key(key)
        if direction is None:
            continue
        grid, points = apply_move(grid, direction, rng)
        score += points
        progress = determine_game_status(grid)

    return grid, score, progress


def _run_curses(stdscr, rng: RandRStream) -> Tuple[Grid, int, GameProgressState]:
    curses.curs_set(0)
    curses.cbreak()
    curses.noecho()
    stdscr.keypad(True)

    def draw(grid: Grid, score: int) -> None:
        height, width = stdscr.getmaxyx()
        stdscr.erase()
        for y, line in enumerate(render_lines(grid, score, width, height)):
            if y >= height:
                break
            # Writing the bottom-right cell raises, so stay one column short.
            stdscr.addnstr(y, 0, line, max(0, width - 1))
        stdscr.refresh()

    return play(stdscr.getch, draw, rng)


def final_message(score: int, progress: GameProgressState) -> str:
    if progress == GameProgressState.GAME_WON:
        return f"You WIN, with score {score}!"
    if progress == GameProgressState.GAME_OVER:
        return f"You LOSE, with score {score}!"
    return f"Quit with score {score}."


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_file, args.log_level)

    seed = args.seed if args.seed is not None else seed_from_clock()
    logger.info("Starting game with seed %d", seed)
    rng = RandRStream(seed)

    try:
        _, score, progress = curses.wrapper(_run_curses, rng)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0

    logger.info("Game ended: %s with score %d", progress.name, score)
    print(final_message(score, progress))
    return 0


if __name__ == "__main__":
    sys.exit(main())
