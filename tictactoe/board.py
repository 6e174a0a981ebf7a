"""
Board model.

A grid is a tuple of 9 cells, read left to right and top to bottom:
  - None: empty
  - "X": first mover
  - "O": second mover

Grids are values; every move produces a new tuple.
"""

from typing import List, Optional, Tuple

FIRST_MARK = "X"
SECOND_MARK = "O"
MARKS = (FIRST_MARK, SECOND_MARK)

Grid = Tuple[Optional[str], ...]

EMPTY_GRID: Grid = (None,) * 9


def apply_move(grid: Grid, index: int, mark: str) -> Optional[Grid]:
    """Return a new grid with `mark` at `index`, or None if the cell can't take it."""
    if not 0 <= index < 9 or grid[index] is not None:
        return None
    cells = list(grid)
    cells[index] = mark
    return tuple(cells)


def empty_cells(grid: Grid) -> List[int]:
    return [i for i, v in enumerate(grid) if v is None]


def is_full(grid: Grid) -> bool:
    return all(v is not None for v in grid)


def other_mark(mark: str) -> str:
    return SECOND_MARK if mark == FIRST_MARK else FIRST_MARK


def mark_for_step(step: int) -> str:
    """Mark to move after `step` plies (X moves on even plies)."""
    return FIRST_MARK if step % 2 == 0 else SECOND_MARK
