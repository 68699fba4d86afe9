import argparse
import logging
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import core
from randomness import RandRStream, seed_from_clock

logger = logging.getLogger(__name__)

SEED_MAX = 2 ** 32 - 1

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="A stateless API for playing the 2048 game. "\
                "The client keeps the game state (board, score and random seed) "\
                "and sends it back with every move. Boards hold tile exponents: "\
                "0 is empty and e is a tile of value 2**e.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    seed: Optional[int] = Field(
        default=None,
        ge=0,
        le=SEED_MAX,
        description="Initial random seed. Defaults to the server clock."
    )

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[int]] = Field(..., description="The 4x4 board of tile exponents.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    progress: core.GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    seed: int = Field(..., ge=0, le=SEED_MAX, description="Random seed to send with the next move.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[int]] = Field(..., description="Current 4x4 board of tile exponents.")
    score: int = Field(..., ge=0, description="Current score before the move.")
    seed: int = Field(..., ge=0, le=SEED_MAX, description="Random seed returned by the previous call.")
    direction: core.DIRECTION = Field(
        ...,
        description="Direction of the move (UP, DOWN, LEFT, RIGHT)."
    )

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )

class NewGameResponseData(GameStateData):
    """Initial state of a new game, including the seed to replay it from."""
    initial_seed: int = Field(
        ...,
        ge=0,
        le=SEED_MAX,
        description="Seed the game was started with; send it to /game/replay."
    )

class ReplayRequestData(BaseModel):
    """A seed and the moves to play from a fresh game."""
    seed: int = Field(..., ge=0, le=SEED_MAX, description="Seed the game was started with.")
    directions: List[core.DIRECTION] = Field(..., description="Moves to apply in order.")

class ReplayResponseData(GameStateData):
    """Final state after replaying a sequence of moves."""
    moves_applied: int = Field(
        ...,
        ge=0,
        description="Number of moves applied before the input ran out or the game ended."
    )


def _board_to_lists(grid: core.Grid) -> List[List[int]]:
    return [list(row) for row in grid]


def _status_message(progress: core.GameProgressState) -> Optional[str]:
    if progress == core.GameProgressState.GAME_WON:
        return "Congratulations! You won!"
    if progress == core.GameProgressState.GAME_OVER:
        return "Game Over. No more valid moves."
    return None

# --- API Endpoints ---

@app.post("/game/new", response_model=NewGameResponseData, summary="Start a New 2048 Game")
@limiter.limit("100/minute")
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Initializes a new 2048 game with two random tiles.

    - **seed**: Initial random seed. Omit it to seed from the server clock.

    Returns the initial board, score (0), progress status (IN_PROGRESS), the
    advanced seed to send with the first move and the initial seed to replay from.
    """
    seed = settings.seed if settings.seed is not None else seed_from_clock()
    rng = RandRStream(seed)
    try:
        initial_board = core.new_grid(rng)
    except Exception as e:
        logger.error("Unexpected error in /game/new: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")

    logger.info("New game started with seed %d", seed)
    return NewGameResponseData(
        board=_board_to_lists(initial_board),
        score=0,
        progress=core.determine_game_status(initial_board),
        seed=rng.seed,
        initial_seed=seed,
    )


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit("100/minute")
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    Requires the current `board`, `score`, `seed` and the `direction` of the move.

    The API will:
    1. Slide and merge the tiles.
    2. If the move changed the board, add a new random tile (2 or 4) and advance the seed.
    3. Determine the new game status (IN_PROGRESS, GAME_WON, GAME_OVER).

    A finished game accepts no further moves.
    """
    try:
        current_board = core.grid_from_rows(request_data.board)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")

    current_progress = core.determine_game_status(current_board)
    if current_progress != core.GameProgressState.IN_PROGRESS:
        raise HTTPException(status_code=409, detail=f"Game already finished: {current_progress.name}.")

    rng = RandRStream(request_data.seed)
    try:
        final_board, score_increase = core.apply_move(current_board, request_data.direction, rng)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.error("Unexpected error in /game/move: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    move_was_effective = final_board != current_board
    current_progress = core.determine_game_status(final_board)
    message_for_client = _status_message(current_progress)
    if not move_was_effective:
        message_for_client = "Move was not effective; board state unchanged by slide."

    return MoveResponseData(
        board=_board_to_lists(final_board),
        score=request_data.score + score_increase,
        progress=current_progress,
        seed=rng.seed,
        move_was_effective=move_was_effective,
        message=message_for_client
    )


@app.post("/game/replay", response_model=ReplayResponseData, summary="Replay a Game from its Seed")
@limiter.limit("100/minute")
async def replay_game(request: Request, request_data: ReplayRequestData):
    """
    Starts a new game from `seed` and applies `directions` in order, stopping
    early if the game is won or lost. The same seed and moves always give the
    same result.
    """
    rng = RandRStream(request_data.seed)
    try:
        board = core.new_grid(rng)
        steps = core.replay(board, request_data.directions, rng)
    except Exception as e:
        logger.error("Unexpected error in /game/replay: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred during replay: {str(e)}")

    if steps:
        board = steps[-1][0]
    return ReplayResponseData(
        board=_board_to_lists(board),
        score=sum(points for _, points in steps),
        progress=core.determine_game_status(board),
        seed=rng.seed,
        moves_applied=len(steps),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="2048 Game API server")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
