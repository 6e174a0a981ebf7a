"""
Browser Tic-Tac-Toe.

The game core (board, outcome, strategy, session) is plain Python and does not
import Flask; the blueprint lives in `tictactoe.views`.
"""

from .board import EMPTY_GRID, FIRST_MARK, SECOND_MARK, apply_move, empty_cells, is_full
from .outcome import NO_OUTCOME, WIN_LINES, Outcome, evaluate
from .strategy import DIFFICULTIES, NoMovesError, best_move, choose_move, random_move
from .session import (
    MODES,
    InvalidAction,
    Session,
    Transition,
    computer_move,
    dispatch,
    jump_to,
    new_session,
    rename_mark,
    reset,
    select,
    set_difficulty,
    set_mode,
    status_text,
)

__all__ = [
    "EMPTY_GRID",
    "FIRST_MARK",
    "SECOND_MARK",
    "apply_move",
    "empty_cells",
    "is_full",
    "NO_OUTCOME",
    "WIN_LINES",
    "Outcome",
    "evaluate",
    "DIFFICULTIES",
    "NoMovesError",
    "best_move",
    "choose_move",
    "random_move",
    "MODES",
    "InvalidAction",
    "Session",
    "Transition",
    "computer_move",
    "dispatch",
    "jump_to",
    "new_session",
    "rename_mark",
    "reset",
    "select",
    "set_difficulty",
    "set_mode",
    "status_text",
]
