# core.py
# This file is the stateless board-transition engine for the 2048 game.
# Tiles are stored as exponents: 0 is an empty cell, e >= 1 is a tile of value 2**e.

import logging
from collections import Counter
from enum import Enum
from typing import Iterable, Iterator, List, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

BOARD_SIZE = 4
TARGET_EXPONENT = 11  # 2**11 = 2048
INITIAL_TILES = 2
FOUR_TILE_ODDS = 10  # one draw in ten spawns a 4

Row = Tuple[int, ...]
Grid = Tuple[Row, ...]


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3


class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


# Clockwise quarter turns that bring each direction to face left.
_CW_ROTATIONS = {
    DIRECTION.LEFT: 0,
    DIRECTION.DOWN: 1,
    DIRECTION.RIGHT: 2,
    DIRECTION.UP: 3,
}


class FullGridError(RuntimeError):
    """Raised when a tile is spawned into a grid with no empty cell; a sequencing defect, not bad input."""


class RandomStream(Protocol):
    """Anything that can draw a uniform integer in [0, n). random.Random qualifies."""

    def randrange(self, n: int) -> int:
        ...


# --- Grid Helper Functions ---

def empty_grid() -> Grid:
    """Returns a grid with every cell empty."""
    return tuple((0,) * BOARD_SIZE for _ in range(BOARD_SIZE))


def grid_from_rows(rows: Sequence[Sequence[int]]) -> Grid:
    """
    Builds a grid from nested sequences of exponents, validating its shape and contents.
    Args:
        rows (Sequence[Sequence[int]]): Four rows of four exponents each.
    Returns:
        Grid: An immutable copy of the rows.
    Raises:
        ValueError: If the board is not 4x4 or holds an exponent outside [0, 11].
    """
    if len(rows) != BOARD_SIZE or not all(len(row) == BOARD_SIZE for row in rows):
        raise ValueError(f"Board must be a {BOARD_SIZE}x{BOARD_SIZE} matrix.")
    for row in rows:
        for value in row:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Board cells must be integers, got {value!r}.")
            if not 0 <= value <= TARGET_EXPONENT:
                raise ValueError(
                    f"Tile exponent {value} is outside the range [0, {TARGET_EXPONENT}]."
                )
    return tuple(tuple(row) for row in rows)


def get_cell(grid: Grid, row: int, col: int) -> int:
    """Returns the exponent stored at (row, col)."""
    return grid[row][col]


def iter_cells(grid: Grid) -> Iterator[Tuple[int, int, int]]:
    """
    Enumerates all cells in row-major order.
    Args:
        grid (Grid): The grid to walk.
    Returns:
        Iterator[Tuple[int, int, int]]: (row, col, exponent) for each of the 16 cells.
    """
    for r, row in enumerate(grid):
        for c, value in enumerate(row):
            yield r, c, value


def get_empty_cells(grid: Grid) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty cells in row-major order.
    Args:
        grid (Grid): The grid to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    return [(r, c) for r, c, value in iter_cells(grid) if value == 0]


def _with_cell(grid: Grid, row: int, col: int, value: int) -> Grid:
    rows = [list(r) for r in grid]
    rows[row][col] = value
    return tuple(tuple(r) for r in rows)


# --- Rotation ---

def rotate_cw(grid: Grid) -> Grid:
    """Rotates the grid 90 degrees clockwise: result[i][j] = grid[3 - j][i]."""
    n = BOARD_SIZE
    return tuple(tuple(grid[n - 1 - j][i] for j in range(n)) for i in range(n))


def rotate_cw_times(grid: Grid, turns: int) -> Grid:
    """Applies rotate_cw `turns` times (taken modulo 4)."""
    for _ in range(turns % 4):
        grid = rotate_cw(grid)
    return grid


# --- Line Manipulation ---

def _compact(line: List[int]) -> List[int]:
    packed = [value for value in line if value != 0]
    return packed + [0] * (len(line) - len(packed))


def merge_row_left(row: Sequence[int]) -> Row:
    """
    Slides a single row to the left, merging equal neighbours once.
    Args:
        row (Sequence[int]): Four exponents.
    Returns:
        Row: The row after compact, merge, compact.

    A tile takes part in at most one merge per move, so [a, a, a, 0] becomes
    [a + 1, a, 0, 0] rather than collapsing further.
    """
    line = _compact(list(row))
    for i in range(len(line) - 1):
        if line[i] == 0 or line[i] != line[i + 1]:
            continue
        line[i] += 1
        line[i + 1] = 0
    return tuple(_compact(line))


def merge_left(grid: Grid) -> Grid:
    """Applies merge_row_left to each row independently."""
    return tuple(merge_row_left(row) for row in grid)


# --- Scoring ---

def score_delta(grid_before: Grid, grid_after_merge: Grid) -> int:
    """
    Computes the points earned by a merge step from the change in tile counts.
    Args:
        grid_before (Grid): The grid before the move.
        grid_after_merge (Grid): The grid after merging, in the same orientation
            or any rotation of it (only the multiset of exponents matters).
    Returns:
        int: The sum of the values of every tile created by a merge.

    Each pair of tiles consumed at exponent v produced one tile at v + 1, which is
    worth 2**(v + 1) points and is carried up so it is not mistaken for a tile
    that disappeared at v + 1.
    """
    dcount = Counter(value for _, _, value in iter_cells(grid_before))
    dcount.subtract(value for _, _, value in iter_cells(grid_after_merge))
    top = max(dcount) if dcount else 0
    score = 0
    for v in range(1, top + 1):
        if dcount[v] < 2:
            continue
        upgrades = dcount[v] // 2
        score += upgrades << (v + 1)
        dcount[v + 1] += upgrades
    return score


# --- Tile Spawning ---

def spawn(grid: Grid, rng: RandomStream) -> Grid:
    """
    Places a new tile (90% a 2, 10% a 4) in a uniformly chosen empty cell.
    Args:
        grid (Grid): A grid with at least one empty cell.
        rng (RandomStream): The session's random stream; two draws are taken from it.
    Returns:
        Grid: A new grid with one more tile.
    Raises:
        FullGridError: If the grid is full. Callers only spawn after a move changed
            the grid, so this signals broken sequencing.
    """
    empty_cells = get_empty_cells(grid)
    if not empty_cells:
        raise FullGridError("Cannot spawn a tile into a full grid.")
    row, col = empty_cells[rng.randrange(len(empty_cells))]
    exponent = 2 if rng.randrange(FOUR_TILE_ODDS) < 1 else 1
    logger.debug("Spawned exponent %d at (%d, %d)", exponent, row, col)
    return _with_cell(grid, row, col, exponent)


def spawn_initial(grid: Grid, rng: RandomStream) -> Grid:
    """Adds one of the starting tiles; called INITIAL_TILES times per session."""
    return spawn(grid, rng)


def new_grid(rng: RandomStream) -> Grid:
    """Returns an empty grid populated with the initial random tiles."""
    grid = empty_grid()
    for _ in range(INITIAL_TILES):
        grid = spawn_initial(grid, rng)
    return grid


# --- Game State Checks ---

def is_victory(grid: Grid) -> bool:
    """True if any tile has reached the target exponent."""
    return any(value >= TARGET_EXPONENT for _, _, value in iter_cells(grid))


def is_loss(grid: Grid) -> bool:
    """
    Checks whether no direction can change the grid.
    Args:
        grid (Grid): The grid to check.
    Returns:
        bool: True if merging the grid and each of its three clockwise rotations
              leaves every one of them unchanged.
    """
    rotated = grid
    for _ in range(4):
        if merge_left(rotated) != rotated:
            return False
        rotated = rotate_cw(rotated)
    return True


def determine_game_status(grid: Grid) -> GameProgressState:
    """
    Determines the current progress state of the game based on the grid.
    Args:
        grid (Grid): The current grid.
    Returns:
        GameProgressState: GAME_WON takes precedence over GAME_OVER.
    """
    if is_victory(grid):
        return GameProgressState.GAME_WON
    if is_loss(grid):
        return GameProgressState.GAME_OVER
    return GameProgressState.IN_PROGRESS


# --- Core Game Move Processing ---

def apply_move(grid: Grid, direction: DIRECTION, rng: RandomStream) -> Tuple[Grid, int]:
    """
    Processes a move in the specified direction.
    Args:
        grid (Grid): The current grid.
        direction (DIRECTION): The direction to move.
        rng (RandomStream): The session's random stream, advanced only if the move
            changes the grid.
    Returns:
        Tuple[Grid, int]:
            - The new grid, including the freshly spawned tile.
            - The score gained from this move.
        A move that changes nothing returns the input grid and 0.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    if not isinstance(direction, DIRECTION):
        raise ValueError(f"Invalid direction specified for apply_move: {direction!r}.")
    rotations = _CW_ROTATIONS[direction]

    merged = merge_left(rotate_cw_times(grid, rotations))
    points = score_delta(grid, merged)
    moved = rotate_cw_times(merged, 4 - rotations)

    if moved == grid:
        logger.debug("Move %s left the grid unchanged", direction.name)
        return grid, 0

    logger.debug("Move %s scored %d", direction.name, points)
    return spawn(moved, rng), points


def replay(
    grid: Grid, directions: Iterable[DIRECTION], rng: RandomStream
) -> List[Tuple[Grid, int]]:
    """
    Applies a sequence of moves, stopping as soon as the game is won or lost.
    Args:
        grid (Grid): The starting grid.
        directions (Iterable[DIRECTION]): Moves to apply in order.
        rng (RandomStream): The session's random stream.
    Returns:
        List[Tuple[Grid, int]]: (grid, score_delta) after each applied move.
    """
    steps: List[Tuple[Grid, int]] = []
    for direction in directions:
        if is_victory(grid) or is_loss(grid):
            break
        grid, points = apply_move(grid, direction, rng)
        steps.append((grid, points))
    return steps
