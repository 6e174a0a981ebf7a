"""
Game session state and its transitions.

A Session is an immutable value. Every transition is a pure function that takes
the current session and returns a Transition(session, applied); a rejected
transition hands back the very same session with applied=False.

Whose turn it is always follows from the viewed step: X moves on even steps,
O on odd ones. In bot mode the computer plays O.

`generation` is bumped by every applied transition that changes the grid, the
view or the turn. A computer move scheduled for an older generation is stale
and gets discarded.
"""

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Dict, NamedTuple, Optional, Tuple

from .board import (
    EMPTY_GRID,
    FIRST_MARK,
    MARKS,
    SECOND_MARK,
    Grid,
    apply_move,
    mark_for_step,
)
from .outcome import Outcome, evaluate
from .strategy import DIFFICULTIES, choose_move

logger = logging.getLogger(__name__)

MODES = ("human", "bot")
COMPUTER_MARK = SECOND_MARK
NAME_MAX_LENGTH = 12
DEFAULT_NAMES = {FIRST_MARK: "Player X", SECOND_MARK: "Player O"}
DRAW_KEY = "Draw"


def _new_scores() -> Dict[str, int]:
    return {FIRST_MARK: 0, SECOND_MARK: 0, DRAW_KEY: 0}


@dataclass(frozen=True)
class Session:
    history: Tuple[Grid, ...] = (EMPTY_GRID,)
    step: int = 0
    mode: str = "human"
    difficulty: str = "easy"
    names: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_NAMES))
    scores: Dict[str, int] = field(default_factory=_new_scores)
    generation: int = 0

    @property
    def grid(self) -> Grid:
        return self.history[self.step]

    @property
    def turn(self) -> str:
        return mark_for_step(self.step)

    @property
    def outcome(self) -> Outcome:
        return evaluate(self.grid)

    @property
    def is_latest(self) -> bool:
        return self.step == len(self.history) - 1


class Transition(NamedTuple):
    session: Session
    applied: bool


class PendingMove(NamedTuple):
    generation: int
    delay_ms: int


class InvalidAction(ValueError):
    """Raised for malformed actions (not for illegal moves)."""


def new_session(mode: str = "human", difficulty: str = "easy", names: Optional[Mapping[str, str]] = None) -> Session:
    if mode not in MODES:
        raise ValueError(f"unknown mode: {mode!r}")
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"unknown difficulty: {difficulty!r}")
    merged = dict(DEFAULT_NAMES)
    if names:
        merged.update({m: n[:NAME_MAX_LENGTH] for m, n in names.items() if m in MARKS})
    return Session(mode=mode, difficulty=difficulty, names=merged)


def _rejected(session: Session, reason: str) -> Transition:
    logger.debug("rejected transition: %s", reason)
    return Transition(session, False)


def _fresh_board(session: Session, **changes: Any) -> Session:
    return replace(
        session,
        history=(EMPTY_GRID,),
        step=0,
        generation=session.generation + 1,
        **changes,
    )


def is_computer_turn(session: Session) -> bool:
    return (
        session.mode == "bot"
        and session.is_latest
        and not session.outcome.is_terminal
        and session.turn == COMPUTER_MARK
    )


def select(session: Session, index: int, by_computer: bool = False) -> Transition:
    """Place the mark to move at `index` on the viewed grid."""
    if session.outcome.is_terminal:
        return _rejected(session, "game is over")
    if session.mode == "bot" and session.turn == COMPUTER_MARK and not by_computer:
        return _rejected(session, "computer's turn")

    grid = apply_move(session.grid, index, session.turn)
    if grid is None:
        return _rejected(session, f"cell {index} is not playable")

    history = session.history[: session.step + 1] + (grid,)
    scores = session.scores
    outcome = evaluate(grid)
    if outcome.is_terminal:
        key = outcome.mark if outcome.kind == "win" else DRAW_KEY
        scores = dict(scores)
        scores[key] += 1
        logger.debug("game finished: %s %s", outcome.kind, outcome.mark or "")

    return Transition(
        replace(
            session,
            history=history,
            step=len(history) - 1,
            scores=scores,
            generation=session.generation + 1,
        ),
        True,
    )


def jump_to(session: Session, step: int) -> Transition:
    """View an earlier (or later) grid of the history without changing it."""
    if not 0 <= step < len(session.history):
        return _rejected(session, f"step {step} out of range")
    if step == session.step:
        return _rejected(session, f"already at step {step}")
    return Transition(replace(session, step=step, generation=session.generation + 1), True)


def reset(session: Session) -> Transition:
    return Transition(_fresh_board(session), True)


def set_mode(session: Session, mode: str) -> Transition:
    if mode not in MODES:
        return _rejected(session, f"unknown mode {mode!r}")
    if mode == session.mode:
        return _rejected(session, f"mode is already {mode!r}")
    return Transition(_fresh_board(session, mode=mode), True)


def set_difficulty(session: Session, difficulty: str) -> Transition:
    if difficulty not in DIFFICULTIES:
        return _rejected(session, f"unknown difficulty {difficulty!r}")
    if difficulty == session.difficulty:
        return _rejected(session, f"difficulty is already {difficulty!r}")
    return Transition(_fresh_board(session, difficulty=difficulty), True)


def rename_mark(session: Session, mark: str, name: str) -> Transition:
    if mark not in MARKS:
        return _rejected(session, f"unknown mark {mark!r}")
    names = dict(session.names)
    names[mark] = name[:NAME_MAX_LENGTH]
    return Transition(replace(session, names=names), True)


def pending_computer_move(session: Session, delay_ms: int) -> Optional[PendingMove]:
    if not is_computer_turn(session):
        return None
    return PendingMove(session.generation, delay_ms)


def computer_move(session: Session, generation: int, rng: Optional[random.Random] = None) -> Transition:
    """Play the computer's move scheduled at `generation`, unless it went stale."""
    if generation != session.generation:
        return _rejected(session, f"stale computer move ({generation} != {session.generation})")
    if not is_computer_turn(session):
        return _rejected(session, "not the computer's turn")
    index = choose_move(session.difficulty, session.grid, COMPUTER_MARK, FIRST_MARK, rng)
    return select(session, index, by_computer=True)


def status_text(session: Session) -> str:
    outcome = session.outcome
    if outcome.kind == "win":
        return f"Winner: {session.names[outcome.mark]}"
    if outcome.kind == "draw":
        return "Draw!"
    if session.mode == "bot" and session.turn == COMPUTER_MARK:
        return f"Next: Bot ({COMPUTER_MARK})"
    return f"Next: {session.names[session.turn]}"


def _int_field(action: Mapping[str, Any], key: str) -> int:
    value = action.get(key)
    # bool is an int subclass; true/false is never a cell or step
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAction(f"'{key}' must be an integer")
    return value


def _str_field(action: Mapping[str, Any], key: str) -> str:
    value = action.get(key)
    if not isinstance(value, str):
        raise InvalidAction(f"'{key}' must be a string")
    return value


def dispatch(session: Session, action: Mapping[str, Any], rng: Optional[random.Random] = None) -> Transition:
    """Apply one action mapping, e.g. {"type": "select", "index": 4}."""
    if not isinstance(action, Mapping):
        raise InvalidAction("action must be an object")
    kind = action.get("type")
    if kind == "select":
        return select(session, _int_field(action, "index"))
    if kind == "jump":
        return jump_to(session, _int_field(action, "step"))
    if kind == "reset":
        return reset(session)
    if kind == "mode":
        return set_mode(session, _str_field(action, "mode"))
    if kind == "difficulty":
        return set_difficulty(session, _str_field(action, "difficulty"))
    if kind == "rename":
        return rename_mark(session, _str_field(action, "mark"), _str_field(action, "name"))
    if kind == "computer":
        return computer_move(session, _int_field(action, "generation"), rng)
    raise InvalidAction(f"unknown action type: {kind!r}")
