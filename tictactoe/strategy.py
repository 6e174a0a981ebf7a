"""
Computer opponent strategies.

  - easy: uniform random choice among empty cells
  - hard: exhaustive minimax, never loses

Both take the grid as a value and return a cell index; the caller's grid is
never modified.
"""

import logging
import random
from typing import Dict, Optional, Tuple

from .board import Grid, apply_move, empty_cells
from .outcome import evaluate

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "hard")

# Cache: (grid, bot_mark, human_mark, bot_to_move) -> score
_MINIMAX_CACHE: Dict[Tuple[Grid, str, str, bool], int] = {}


class NoMovesError(ValueError):
    """Raised when a strategy is asked to move on a full grid."""


def random_move(grid: Grid, rng: Optional[random.Random] = None) -> int:
    moves = empty_cells(grid)
    if not moves:
        raise NoMovesError("no empty cell to play")
    return (rng or random).choice(moves)


def _minimax(grid: Grid, bot_mark: str, human_mark: str, bot_to_move: bool) -> int:
    """
    Score `grid` from the bot's point of view.

    Returns:
        +1 if the bot wins with best play, -1 if the human does, 0 for a draw.
    """
    key = (grid, bot_mark, human_mark, bot_to_move)
    if key in _MINIMAX_CACHE:
        return _MINIMAX_CACHE[key]

    outcome = evaluate(grid)
    if outcome.kind == "win":
        score = 1 if outcome.mark == bot_mark else -1
    elif outcome.kind == "draw":
        score = 0
    else:
        mark = bot_mark if bot_to_move else human_mark
        scores = [
            _minimax(apply_move(grid, i, mark), bot_mark, human_mark, not bot_to_move)
            for i in empty_cells(grid)
        ]
        score = max(scores) if bot_to_move else min(scores)

    _MINIMAX_CACHE[key] = score
    return score


def best_move(grid: Grid, bot_mark: str, human_mark: str) -> int:
    """Optimal move for `bot_mark`; ties go to the lowest index."""
    grid = tuple(grid)
    best_score = -2
    move = None
    for i in empty_cells(grid):
        score = _minimax(apply_move(grid, i, bot_mark), bot_mark, human_mark, False)
        if score > best_score:
            best_score = score
            move = i
    if move is None:
        logger.debug("minimax found no move, falling back to random")
        return random_move(grid)
    return move


def choose_move(
    difficulty: str,
    grid: Grid,
    bot_mark: str,
    human_mark: str,
    rng: Optional[random.Random] = None,
) -> int:
    if difficulty == "easy":
        return random_move(grid, rng)
    if difficulty == "hard":
        return best_move(grid, bot_mark, human_mark)
    raise ValueError(f"unknown difficulty: {difficulty!r}")


def clear_cache():
    """Clear minimax cache."""
    _MINIMAX_CACHE.clear()


def cache_size() -> int:
    return len(_MINIMAX_CACHE)
