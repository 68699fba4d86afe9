"""
Tests for the terminal driver's input decoding and game loop.
"""
import curses
from unittest import TestCase, main

import core
from cli_driver import direction_for_key, final_message, parse_args, play
from core import DIRECTION, GameProgressState
from randomness import RandRStream


class TestKeyMapping(TestCase):
    def test_arrow_keys(self):
        self.assertEqual(direction_for_key(curses.KEY_LEFT), DIRECTION.LEFT)
        self.assertEqual(direction_for_key(curses.KEY_RIGHT), DIRECTION.RIGHT)
        self.assertEqual(direction_for_key(curses.KEY_UP), DIRECTION.UP)
        self.assertEqual(direction_for_key(curses.KEY_DOWN), DIRECTION.DOWN)

    def test_wasd(self):
        self.assertEqual(direction_for_key(ord('w')), DIRECTION.UP)
        self.assertEqual(direction_for_key(ord('a')), DIRECTION.LEFT)
        self.assertEqual(direction_for_key(ord('s')), DIRECTION.DOWN)
        self.assertEqual(direction_for_key(ord('d')), DIRECTION.RIGHT)

    def test_unknown_key_is_no_op(self):
        self.assertIsNone(direction_for_key(ord('x')))
        self.assertIsNone(direction_for_key(-1))


class TestPlay(TestCase):
    def run_keys(self, keys, seed=3):
        frames = []
        result = play(iter(keys).__next__, lambda grid, score: frames.append((grid, score)), RandRStream(seed))
        return result, frames

    def test_quit_immediately(self):
        (grid, score, progress), frames = self.run_keys([ord('q')])
        self.assertEqual(score, 0)
        self.assertEqual(progress, GameProgressState.IN_PROGRESS)
        self.assertEqual(len(frames), 1)
        self.assertEqual(len(core.get_empty_cells(grid)), 16 - core.INITIAL_TILES)

    def test_unknown_keys_redraw_without_moving(self):
        (grid, score, _), frames = self.run_keys([ord('x'), ord('z'), ord('Q')])
        self.assertEqual(len(frames), 3)
        self.assertEqual(frames[0][0], grid)
        self.assertEqual(score, 0)

    def test_matches_engine_replay(self):
        moves = [DIRECTION.LEFT, DIRECTION.UP, DIRECTION.RIGHT, DIRECTION.DOWN] * 3
        keys = {
            DIRECTION.LEFT: curses.KEY_LEFT,
            DIRECTION.RIGHT: curses.KEY_RIGHT,
            DIRECTION.UP: curses.KEY_UP,
            DIRECTION.DOWN: curses.KEY_DOWN,
        }
        (grid, score, _), _ = self.run_keys([keys[m] for m in moves] + [ord('q')], seed=8)

        rng = RandRStream(8)
        steps = core.replay(core.new_grid(rng), moves, rng)
        self.assertEqual(grid, steps[-1][0])
        self.assertEqual(score, sum(points for _, points in steps))


class TestFinalMessage(TestCase):
    def test_messages(self):
        self.assertEqual(final_message(20, GameProgressState.GAME_WON), "You WIN, with score 20!")
        self.assertEqual(final_message(8, GameProgressState.GAME_OVER), "You LOSE, with score 8!")
        self.assertEqual(final_message(0, GameProgressState.IN_PROGRESS), "Quit with score 0.")


class TestArgs(TestCase):
    def test_defaults(self):
        args = parse_args([])
        self.assertIsNone(args.seed)
        self.assertIsNone(args.log_file)
        self.assertEqual(args.log_level, "INFO")

    def test_seed(self):
        self.assertEqual(parse_args(["--seed", "12"]).seed, 12)


if __name__ == "__main__":
    main()
