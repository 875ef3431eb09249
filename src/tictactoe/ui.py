"""FastAPI-powered web UI for playing tic-tac-toe against a person or the AI."""

from __future__ import annotations

import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import CacheKey, MinimaxAI, Move, best_move
from .board import O, Player, validate_board
from .game import TicTacToeGame

logger = logging.getLogger(__name__)

GameMode = Literal["human", "ai"]


@dataclass
class GameSession:
    """Container for an active game and, in AI mode, its automated opponent."""

    game: TicTacToeGame
    mode: GameMode
    ai: Optional[MinimaxAI]
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe with a minimax opponent")

# Seconds the AI waits before answering a human move.
AI_THINK_DELAY: float = float(os.environ.get("TICTACTOE_AI_DELAY", "0.4"))

# Positions searched by /api/best-move, shared across requests.
_ENGINE_CACHE: Dict[CacheKey, Move] = {}


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    mode: GameMode = Field(
        default="human", description="Play another person or the AI"
    )


class ModeRequest(BaseModel):
    mode: GameMode


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


class BestMoveRequest(BaseModel):
    """A board snapshot and the player who must move on it."""

    board: List[str] = Field(min_length=9, max_length=9)
    player: Literal["X", "O"]

    @field_validator("board")
    @classmethod
    def ensure_known_marks(cls, value: List[str]) -> List[str]:
        return validate_board(value)


def _make_ai(mode: GameMode) -> Optional[MinimaxAI]:
    return MinimaxAI(player=O) if mode == "ai" else None


def _create_session(mode: GameMode) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(game=TicTacToeGame(), mode=mode, ai=_make_ai(mode))
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("created game %s in %s mode", session_id, mode)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        try:
            if not session.ai:
                return
            game = session.game
            if game.is_over or game.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(game)
            game.play_move(cell_index)
            session.move_log.append(
                {"player": session.ai.player, "cellIndex": cell_index}
            )
            logger.info("game %s: AI plays %s", game_id, cell_index)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode,
            "board": list(game.board),
            "currentPlayer": game.current_player,
            "winner": game.winner,
            "drawn": game.drawn,
            "winningLine": list(game.winning_line) if game.winning_line else None,
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if game.is_over:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if session.ai and game.current_player == session.ai.player:
            raise HTTPException(status_code=400, detail="It is the AI's turn")

        player: Player = game.current_player
        try:
            game.play_move(cell_index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": player, "cellIndex": cell_index})

        should_schedule_ai = bool(
            session.ai
            and not game.is_over
            and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


def _reset_session(
    game_id: str, session: GameSession, mode: Optional[GameMode] = None
) -> None:
    with session.lock:
        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")
        if mode is not None and mode != session.mode:
            session.mode = mode
            session.ai = _make_ai(mode)
        session.game.reset()
        session.move_log.clear()
    logger.info("reset game %s in %s mode", game_id, session.mode)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_session(game_id, session)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/mode")
def set_game_mode(game_id: str, request: ModeRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_session(game_id, session, request.mode)
    return _serialize_session(game_id, session)


@app.post("/api/best-move")
def compute_best_move(request: BestMoveRequest) -> Dict[str, object]:
    """Run the engine on an arbitrary board without creating a session."""
    try:
        move = best_move(request.board, request.player, _ENGINE_CACHE)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"index": move.index, "score": move.score}


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic-Tac-Toe</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        justify-content: center;
        align-items: flex-start;
        padding: 2rem 1rem;
        background: radial-gradient(circle at top, #f2f5ff, #cfd8ff 70%);
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: 2rem;
        text-align: center;
      }
      .controls {
        display: flex;
        gap: 0.75rem;
        justify-content: center;
        margin-bottom: 1rem;
      }
      button {
        font-size: 1rem;
        padding: 0.5rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
      }
      button.active {
        background: #dbe4ff;
        font-weight: 600;
      }
      .container {
        display: grid;
        grid-template-columns: repeat(3, 5.5rem);
        grid-template-rows: repeat(3, 5.5rem);
        gap: 0.4rem;
        justify-content: center;
        margin: 1rem auto;
      }
      .tile {
        display: flex;
        align-items: center;
        justify-content: center;
        font-size: 2.6rem;
        font-weight: 700;
        border-radius: 12px;
        background: #eef2ff;
        cursor: pointer;
      }
      .playerX {
        color: #2f6bff;
      }
      .playerO {
        color: #ff4f6d;
      }
      .win-tile {
        background: #ffe9a8;
      }
      .hide {
        display: none;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>Tic-Tac-Toe</h1>
      <div class=\"controls\">
        <button id=\"mode-human\">Human vs Human</button>
        <button id=\"mode-ai\">Human vs AI</button>
      </div>
      <p class=\"display\">Player <span class=\"display-player playerX\">X</span>'s turn</p>
      <div class=\"container\">
        <div class=\"tile\"></div><div class=\"tile\"></div><div class=\"tile\"></div>
        <div class=\"tile\"></div><div class=\"tile\"></div><div class=\"tile\"></div>
        <div class=\"tile\"></div><div class=\"tile\"></div><div class=\"tile\"></div>
      </div>
      <p class=\"announcer hide\"></p>
      <button id=\"reset\">Reset</button>
    </main>
    <script>
      const tiles = Array.from(document.querySelectorAll('.tile'));
      const playerDisplay = document.querySelector('.display-player');
      const announcer = document.querySelector('.announcer');
      const modeButtons = {
        human: document.getElementById('mode-human'),
        ai: document.getElementById('mode-ai'),
      };
      let gameId = null;
      let state = null;
      let pollTimer = null;

      const post = async (url, body) => {
        const response = await fetch(url, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body || {}),
        });
        const payload = await response.json();
        if (!response.ok) {
          throw new Error(payload.detail || 'Request failed');
        }
        return payload;
      };

      const render = (next) => {
        state = next;
        tiles.forEach((tile, index) => {
          const mark = state.board[index];
          tile.innerText = mark;
          tile.classList.toggle('playerX', mark === 'X');
          tile.classList.toggle('playerO', mark === 'O');
          const winning = (state.winningLine || []).includes(index);
          tile.classList.toggle('win-tile', winning);
        });
        playerDisplay.innerText = state.currentPlayer;
        playerDisplay.className = `display-player player${state.currentPlayer}`;
        Object.entries(modeButtons).forEach(([mode, button]) => {
          button.classList.toggle('active', state.mode === mode);
        });
        if (state.winner) {
          announcer.innerHTML = `Player <span class=\"player${state.winner}\">${state.winner}</span> Won!`;
          announcer.classList.remove('hide');
        } else if (state.drawn) {
          announcer.innerText = "It's a Tie!";
          announcer.classList.remove('hide');
        } else {
          announcer.classList.add('hide');
        }
        clearTimeout(pollTimer);
        if (state.aiPending) {
          pollTimer = setTimeout(refresh, 150);
        }
      };

      const refresh = async () => {
        const response = await fetch(`/api/game/${gameId}`);
        render(await response.json());
      };

      const startGame = async (mode) => {
        const payload = await post('/api/game', { mode });
        gameId = payload.id;
        render(payload);
      };

      tiles.forEach((tile, index) => {
        tile.addEventListener('click', async () => {
          if (!state || state.aiPending || !state.availableMoves.includes(index)) {
            return;
          }
          try {
            render(await post(`/api/game/${gameId}/move`, { cellIndex: index }));
          } catch (error) {
            console.warn(error.message);
          }
        });
      });

      document.getElementById('reset').addEventListener('click', async () => {
        try {
          render(await post(`/api/game/${gameId}/reset`));
        } catch (error) {
          console.warn(error.message);
        }
      });
      Object.entries(modeButtons).forEach(([mode, button]) => {
        button.addEventListener('click', async () => {
          try {
            render(await post(`/api/game/${gameId}/mode`, { mode }));
          } catch (error) {
            console.warn(error.message);
          }
        });
      });

      startGame('human');
    </script>
  </body>
</html>
"""
