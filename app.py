import logging
import os
import random
import secrets

import click
from flask import Flask, redirect, url_for

from tictactoe.board import EMPTY_GRID, FIRST_MARK, apply_move, mark_for_step, other_mark
from tictactoe.outcome import evaluate
from tictactoe.strategy import DIFFICULTIES, choose_move
from tictactoe.views import tictactoe_bp

app = Flask(__name__)

# --- Configuration ---
DEBUG = os.environ.get("TICTACTOE_DEBUG", "0") not in {"0", "false", "False", ""}
BOT_DELAY_MS = int(os.environ.get("TICTACTOE_BOT_DELAY_MS", 600))
MAX_GAMES = int(os.environ.get("TICTACTOE_MAX_GAMES", 1000))
PORT = int(os.environ.get("PORT", 5050))

# Random per process unless SECRET_KEY is set.
app.secret_key = os.environ.get("SECRET_KEY") or secrets.token_hex(32)
app.config["TICTACTOE_BOT_DELAY_MS"] = BOT_DELAY_MS
app.config["TICTACTOE_MAX_GAMES"] = MAX_GAMES

if DEBUG:
    logging.basicConfig(level=logging.DEBUG)
    app.logger.setLevel(logging.DEBUG)


@app.route("/")
def landing():
    return redirect(url_for("tictactoe.tictactoe"))


app.register_blueprint(tictactoe_bp)


def play_selfplay_game(difficulty_x: str, difficulty_o: str, rng: random.Random) -> str:
    """Computer vs computer; returns the winning mark or "Draw"."""
    grid = EMPTY_GRID
    difficulties = {FIRST_MARK: difficulty_x, other_mark(FIRST_MARK): difficulty_o}
    for step in range(9):
        mark = mark_for_step(step)
        move = choose_move(difficulties[mark], grid, mark, other_mark(mark), rng)
        grid = apply_move(grid, move, mark)
        outcome = evaluate(grid)
        if outcome.kind == "win":
            return outcome.mark
        if outcome.kind == "draw":
            break
    return "Draw"


@app.cli.command("selfplay")
@click.option("--rounds", default=10, show_default=True, type=click.IntRange(min=1))
@click.option("--difficulty-x", type=click.Choice(DIFFICULTIES), default="hard", show_default=True)
@click.option("--difficulty-o", type=click.Choice(DIFFICULTIES), default="hard", show_default=True)
@click.option("--seed", type=int, default=None, help="Seed for the easy strategy.")
def selfplay(rounds, difficulty_x, difficulty_o, seed):
    """Let the computer play itself and report the results."""
    rng = random.Random(seed)
    results = {"X": 0, "O": 0, "Draw": 0}
    for _ in range(rounds):
        results[play_selfplay_game(difficulty_x, difficulty_o, rng)] += 1
    click.echo(f"X wins: {results['X']}  O wins: {results['O']}  Draws: {results['Draw']}")

    if difficulty_x == difficulty_o == "hard" and results["Draw"] != rounds:
        app.logger.error("hard vs hard produced %d decisive games", rounds - results["Draw"])
        raise click.exceptions.Exit(1)


if __name__ == "__main__":
    app.run(
        debug=DEBUG,
        host="0.0.0.0",
        port=PORT,
    )
