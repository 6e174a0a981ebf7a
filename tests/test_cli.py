import random
import unittest

from app import app, play_selfplay_game


class TestSelfplayCommand(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = app.test_cli_runner()

    def test_hard_vs_hard_always_draws(self) -> None:
        result = self.runner.invoke(args=["selfplay", "--rounds", "3"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("X wins: 0  O wins: 0  Draws: 3", result.output)

    def test_easy_vs_hard_never_loses_for_hard(self) -> None:
        result = self.runner.invoke(
            args=["selfplay", "--rounds", "20", "--difficulty-x", "easy", "--seed", "11"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("X wins: 0", result.output)

    def test_rejects_unknown_difficulty(self) -> None:
        result = self.runner.invoke(args=["selfplay", "--difficulty-o", "expert"])
        self.assertNotEqual(result.exit_code, 0)

    def test_play_selfplay_game(self) -> None:
        self.assertEqual(play_selfplay_game("hard", "hard", random.Random(0)), "Draw")
        self.assertIn(play_selfplay_game("easy", "easy", random.Random(0)), {"X", "O", "Draw"})


if __name__ == "__main__":
    unittest.main()
