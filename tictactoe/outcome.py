"""Win/draw detection."""

from dataclasses import dataclass
from typing import Optional, Tuple

from .board import Grid, is_full

# Winning lines (rows, columns, diagonals)
WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),              # diagonals
)


@dataclass(frozen=True)
class Outcome:
    kind: str  # "none", "win" or "draw"
    mark: Optional[str] = None
    line: Optional[Tuple[int, int, int]] = None

    @classmethod
    def win(cls, mark: str, line: Tuple[int, int, int]) -> "Outcome":
        return cls("win", mark, line)

    @classmethod
    def draw(cls) -> "Outcome":
        return cls("draw")

    @property
    def is_terminal(self) -> bool:
        return self.kind != "none"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "mark": self.mark,
            "line": list(self.line) if self.line else [],
        }


NO_OUTCOME = Outcome("none")


def evaluate(grid: Grid) -> Outcome:
    """Return the first winning line in scan order, else draw on a full grid."""
    for a, b, c in WIN_LINES:
        if grid[a] is not None and grid[a] == grid[b] == grid[c]:
            return Outcome.win(grid[a], (a, b, c))
    if is_full(grid):
        return Outcome.draw()
    return NO_OUTCOME
