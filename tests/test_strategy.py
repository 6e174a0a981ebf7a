import random
import unittest

from tictactoe.board import EMPTY_GRID, apply_move, empty_cells, other_mark
from tictactoe.outcome import evaluate
from tictactoe.strategy import NoMovesError, best_move, cache_size, choose_move, clear_cache, random_move


def grid_from(text: str):
    return tuple(None if ch == "." else ch for ch in text)


def losses_against_every_line(grid, to_move: str, bot_mark: str) -> int:
    """Count games the bot loses when the other side tries every legal move."""
    outcome = evaluate(grid)
    if outcome.is_terminal:
        return int(outcome.kind == "win" and outcome.mark != bot_mark)
    if to_move == bot_mark:
        move = best_move(grid, bot_mark, other_mark(bot_mark))
        return losses_against_every_line(apply_move(grid, move, bot_mark), other_mark(to_move), bot_mark)
    return sum(
        losses_against_every_line(apply_move(grid, i, to_move), other_mark(to_move), bot_mark)
        for i in empty_cells(grid)
    )


class TestRandomMove(unittest.TestCase):
    def test_only_picks_empty_cells(self) -> None:
        rng = random.Random(7)
        grid = grid_from("XO.X.O.XO")
        picks = {random_move(grid, rng) for _ in range(200)}
        self.assertEqual(picks, {2, 4, 6})

    def test_full_grid_raises(self) -> None:
        with self.assertRaises(NoMovesError):
            random_move(grid_from("XOXXOOOXX"))


class TestBestMove(unittest.TestCase):
    def setUp(self) -> None:
        clear_cache()

    def test_search_fills_the_cache(self) -> None:
        self.assertEqual(cache_size(), 0)
        best_move(grid_from("X........"), "O", "X")
        filled = cache_size()
        self.assertGreater(filled, 0)

        # a second search over the same subtree reuses the stored scores
        best_move(grid_from("X........"), "O", "X")
        self.assertEqual(cache_size(), filled)

        clear_cache()
        self.assertEqual(cache_size(), 0)

    def test_takes_the_win(self) -> None:
        self.assertEqual(best_move(grid_from("OO.XX.X.."), "O", "X"), 2)

    def test_blocks_the_human(self) -> None:
        self.assertEqual(best_move(grid_from("XX..O...."), "O", "X"), 2)

    def test_ties_go_to_lowest_index(self) -> None:
        # Every opening reply to a corner except the center loses; the center is the only draw.
        self.assertEqual(best_move(grid_from("X........"), "O", "X"), 4)
        # On the empty board every cell draws, so the first one is chosen.
        self.assertEqual(best_move(EMPTY_GRID, "X", "O"), 0)

    def test_does_not_modify_callers_grid(self) -> None:
        cells = [None, "X", None, None, "O", None, None, None, None]
        best_move(cells, "X", "O")
        self.assertEqual(cells, [None, "X", None, None, "O", None, None, None, None])

    def test_never_loses_as_second_mover(self) -> None:
        self.assertEqual(losses_against_every_line(EMPTY_GRID, "X", "O"), 0)

    def test_never_loses_as_first_mover(self) -> None:
        self.assertEqual(losses_against_every_line(EMPTY_GRID, "X", "X"), 0)

    def test_self_play_is_a_draw(self) -> None:
        grid = EMPTY_GRID
        mark = "X"
        while not evaluate(grid).is_terminal:
            grid = apply_move(grid, best_move(grid, mark, other_mark(mark)), mark)
            mark = other_mark(mark)
        self.assertEqual(evaluate(grid).kind, "draw")


class TestChooseMove(unittest.TestCase):
    def test_difficulty_selects_strategy(self) -> None:
        grid = grid_from("XX..O....")
        self.assertEqual(choose_move("hard", grid, "O", "X"), 2)
        self.assertIn(choose_move("easy", grid, "O", "X", random.Random(1)), empty_cells(grid))

    def test_unknown_difficulty(self) -> None:
        with self.assertRaises(ValueError):
            choose_move("impossible", EMPTY_GRID, "O", "X")


if __name__ == "__main__":
    unittest.main()
