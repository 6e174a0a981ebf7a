import secrets
import threading
from collections import OrderedDict

from flask import Blueprint, current_app, jsonify, render_template_string, request, session

from .session import (
    COMPUTER_MARK,
    NAME_MAX_LENGTH,
    InvalidAction,
    Session,
    Transition,
    dispatch,
    is_computer_turn,
    new_session,
    pending_computer_move,
    status_text,
)

tictactoe_bp = Blueprint("tictactoe", __name__, url_prefix="/tictactoe")

DEFAULT_BOT_DELAY_MS = 600
DEFAULT_MAX_GAMES = 1000
GAME_ID_KEY = "tictactoe_game"


class SessionStore:
    """
    In-memory game sessions, one per browser, gone when the process exits.

    Holds at most `max_size` games; the least recently used one is dropped
    when a new game would go past the cap.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_GAMES):
        self.max_size = max_size
        self._sessions = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, game_id: str) -> Session:
        with self._lock:
            game = self._sessions.get(game_id)
            if game is None:
                return new_session()
            self._sessions.move_to_end(game_id)
            return game

    def update(self, game_id: str, action) -> Transition:
        # read, dispatch and write back under one lock
        with self._lock:
            current = self._sessions.get(game_id) or new_session()
            result = dispatch(current, action)
            self._sessions[game_id] = result.session
            self._sessions.move_to_end(game_id)
            while len(self._sessions) > self.max_size:
                self._sessions.popitem(last=False)
            return result

    def clear(self):
        with self._lock:
            self._sessions.clear()


store = SessionStore()


@tictactoe_bp.record_once
def _configure_store(state):
    store.max_size = int(state.app.config.get("TICTACTOE_MAX_GAMES", DEFAULT_MAX_GAMES))



def _game_id() -> str:
    game_id = session.get(GAME_ID_KEY)
    if not game_id:
        game_id = secrets.token_urlsafe(16)
        session[GAME_ID_KEY] = game_id
    return game_id


def _bot_delay_ms() -> int:
    return int(current_app.config.get("TICTACTOE_BOT_DELAY_MS", DEFAULT_BOT_DELAY_MS))


def render_state(game: Session, delay_ms: int) -> dict:
    """Everything the page needs to draw the game."""
    outcome = game.outcome
    pending = pending_computer_move(game, delay_ms)
    return {
        "grid": list(game.grid),
        "turn": game.turn,
        "outcome": outcome.to_dict(),
        "status": status_text(game),
        "step": game.step,
        "history_length": len(game.history),
        "moves": ["Start" if i == 0 else f"Move #{i}" for i in range(len(game.history))],
        "names": dict(game.names),
        "scores": dict(game.scores),
        "mode": game.mode,
        "difficulty": game.difficulty,
        "generation": game.generation,
        "pending": pending._asdict() if pending else None,
        "locked": outcome.is_terminal or (game.mode == "bot" and game.turn == COMPUTER_MARK),
    }


TICTACTOE_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Tic-Tac-Toe</title>
<style>
  * { margin: 0; padding: 0; box-sizing: border-box; }
  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
    background: #f5f0eb; color: #2c2c2c;
    min-height: 100vh; display: flex;
    align-items: center; justify-content: center;
  }
  .container { max-width: 420px; width: 90%; text-align: center; padding: 24px 0; }
  h1 { font-size: 1.8em; font-weight: 600; color: #3a3a3a; margin-bottom: 14px; }
  .names { display: flex; gap: 14px; justify-content: center; align-items: center; margin-bottom: 14px; }
  .names label { font-size: 0.8em; color: #9a8f85; display: flex; flex-direction: column; gap: 4px; }
  .names input {
    font-family: inherit; font-size: 0.9em; text-align: center; width: 110px;
    padding: 4px 6px; border: 1px solid #e8e2dc; border-radius: 8px;
  }
  .row { display: flex; gap: 8px; justify-content: center; margin-bottom: 14px; flex-wrap: wrap; }
  .status {
    font-size: 1em; color: #9a8f85; margin-bottom: 14px;
    min-height: 1.4em; font-weight: 600;
  }
  .status.win { color: #5a9a6a; }
  .status.draw { color: #b08d57; }
  .board {
    display: grid; grid-template-columns: repeat(3, 1fr);
    gap: 8px; margin: 0 auto 18px; max-width: 300px;
  }
  .cell {
    aspect-ratio: 1; background: #fff;
    border: 1px solid #e8e2dc; border-radius: 12px;
    font-size: 2.4em; font-weight: 600;
    cursor: pointer; display: flex;
    align-items: center; justify-content: center;
    transition: all 0.15s;
    box-shadow: 0 1px 3px rgba(0,0,0,0.04);
  }
  .cell:hover:not(.taken):not(.locked) {
    border-color: #c9bfb4;
    box-shadow: 0 4px 16px rgba(0,0,0,0.07);
    transform: translateY(-2px);
  }
  .cell.taken, .cell.locked { cursor: default; }
  .cell.x { color: #3a3a3a; }
  .cell.o { color: #9a8f85; }
  .cell.winner { background: #edf7f0; border-color: #5a9a6a; }
  .scores {
    display: flex; justify-content: center; gap: 24px;
    margin-bottom: 18px; font-size: 0.9em; color: #9a8f85;
  }
  .scores span { font-weight: 600; color: #3a3a3a; }
  .btn {
    font-family: inherit; font-weight: 500; font-size: 0.85em;
    padding: 8px 20px; border: 1px solid #e8e2dc;
    border-radius: 10px; cursor: pointer;
    color: #9a8f85; background: #fff;
    box-shadow: 0 1px 3px rgba(0,0,0,0.04);
    transition: all 0.2s;
  }
  .btn:hover:not(:disabled) { color: #6b5f53; border-color: #c9bfb4; }
  .btn:disabled { color: #3a3a3a; border-color: #c9bfb4; cursor: default; }
  .btn.small { padding: 4px 12px; font-size: 0.78em; }
  select.btn { padding: 8px 12px; }
</style>
</head>
<body>
<div class="container">
  <h1>Tic-Tac-Toe</h1>
  <div class="names">
    <label>X <input id="name-X" maxlength="{{ name_max_length }}"></label>
    <label>O <input id="name-O" maxlength="{{ name_max_length }}"></label>
  </div>
  <div class="row">
    <button class="btn" id="mode-human" onclick="send({type: 'mode', mode: 'human'})">vs Human</button>
    <button class="btn" id="mode-bot" onclick="send({type: 'mode', mode: 'bot'})">vs Bot</button>
    <select class="btn" id="difficulty" onchange="send({type: 'difficulty', difficulty: this.value})">
      <option value="easy">Easy</option>
      <option value="hard">Hard</option>
    </select>
  </div>
  <div class="status" id="status"></div>
  <div class="board" id="board"></div>
  <div class="row" id="moves"></div>
  <div class="scores" id="scores"></div>
  <div class="row">
    <a href="/" class="btn">Home</a>
    <button class="btn" onclick="send({type: 'reset'})">Reset</button>
  </div>
</div>
<script>
const API = "{{ url_for('tictactoe.action') }}";
const STATE = "{{ url_for('tictactoe.state') }}";
let state = null, timer = null;

function init() {
  const el = document.getElementById('board');
  for (let i = 0; i < 9; i++) {
    const cell = document.createElement('div');
    cell.className = 'cell';
    cell.addEventListener('click', () => send({type: 'select', index: i}));
    el.appendChild(cell);
  }
  ['X', 'O'].forEach(mark => {
    document.getElementById('name-' + mark).addEventListener('change', e =>
      send({type: 'rename', mark: mark, name: e.target.value}));
  });
  fetch(STATE).then(r => r.json()).then(render);
}

async function send(action) {
  const res = await fetch(API, {
    method: 'POST',
    headers: { 'Content-Type': 'application/json' },
    body: JSON.stringify(action)
  });
  const body = await res.json();
  if (!res.ok) { console.error(body.error); return; }
  render(body.state);
}

function schedule(pending) {
  if (timer) { clearTimeout(timer); timer = null; }
  if (!pending) return;
  timer = setTimeout(() => {
    timer = null;
    send({type: 'computer', generation: pending.generation});
  }, pending.delay_ms);
}

function render(s) {
  state = s;
  const line = s.outcome.line;
  document.querySelectorAll('.cell').forEach((cell, i) => {
    const v = s.grid[i];
    cell.textContent = v || '';
    cell.classList.toggle('taken', !!v);
    cell.classList.toggle('x', v === 'X');
    cell.classList.toggle('o', v === 'O');
    cell.classList.toggle('locked', s.locked);
    cell.classList.toggle('winner', line.includes(i));
  });
  const status = document.getElementById('status');
  status.textContent = s.status;
  status.className = 'status' + (s.outcome.kind !== 'none' ? ' ' + s.outcome.kind : '');

  ['X', 'O'].forEach(mark => {
    const input = document.getElementById('name-' + mark);
    if (document.activeElement !== input) input.value = s.names[mark];
  });
  document.getElementById('mode-human').disabled = s.mode === 'human';
  document.getElementById('mode-bot').disabled = s.mode === 'bot';
  document.getElementById('difficulty').value = s.difficulty;

  const moves = document.getElementById('moves');
  moves.innerHTML = '';
  s.moves.forEach((label, i) => {
    const b = document.createElement('button');
    b.className = 'btn small';
    b.textContent = label;
    b.disabled = i === s.step;
    b.addEventListener('click', () => send({type: 'jump', step: i}));
    moves.appendChild(b);
  });

  const scores = document.getElementById('scores');
  scores.innerHTML = '';
  [[s.names.X, s.scores.X], [s.names.O, s.scores.O], ['Draw', s.scores.Draw]].forEach(([label, n]) => {
    const div = document.createElement('div');
    div.textContent = label + ': ';
    const span = document.createElement('span');
    span.textContent = n;
    div.appendChild(span);
    scores.appendChild(div);
  });
  schedule(s.pending);
}

init();
</script>
</body>
</html>
"""


@tictactoe_bp.route("/")
def tictactoe():
    return render_template_string(TICTACTOE_TEMPLATE, name_max_length=NAME_MAX_LENGTH)


@tictactoe_bp.route("/api/state")
def state():
    game = store.get(_game_id())
    return jsonify(render_state(game, _bot_delay_ms()))


@tictactoe_bp.route("/api/action", methods=["POST"])
def action():
    body = request.get_json(silent=True)
    if body is None:
        return jsonify({"error": "Expected a JSON action."}), 400

    game_id = _game_id()
    try:
        result = store.update(game_id, body)
    except InvalidAction as e:
        return jsonify({"error": str(e)}), 400

    if not result.applied:
        current_app.logger.debug("ignored %s action for game %s", body.get("type"), game_id)
    elif is_computer_turn(result.session):
        current_app.logger.debug("computer to move in game %s", game_id)

    return jsonify({
        "applied": result.applied,
        "state": render_state(result.session, _bot_delay_ms()),
    })
