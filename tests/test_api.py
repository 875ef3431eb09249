"""Tests for the FastAPI tic-tac-toe interface."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tictactoe import ui
from tictactoe.ui import app


client = TestClient(app)
ui.AI_THINK_DELAY = 0.0


def _new_game(mode: str = "ai") -> dict:
    response = client.post("/api/game", json={"mode": mode})
    assert response.status_code == 200
    return response.json()


def _move(game_id: str, index: int):
    return client.post(f"/api/game/{game_id}/move", json={"cellIndex": index})


def test_create_game_and_ai_reply():
    payload = _new_game()
    assert payload["mode"] == "ai"
    assert payload["currentPlayer"] == "X"
    assert payload["board"] == [""] * 9
    assert payload["moveLog"] == []

    game_id = payload["id"]
    move_response = _move(game_id, 0)
    assert move_response.status_code == 200
    state = move_response.json()
    assert state["board"][0] == "X"
    assert state["currentPlayer"] == "O"
    assert state["aiPending"] is True
    assert state["lastMove"] == {"player": "X", "cellIndex": 0}

    follow_up = client.get(f"/api/game/{game_id}")
    assert follow_up.status_code == 200
    final_state = follow_up.json()
    assert final_state["aiPending"] is False
    assert final_state["currentPlayer"] == "X"
    # The centre is the only reply to a corner opening that does not lose.
    assert final_state["moveLog"][-1] == {"player": "O", "cellIndex": 4}
    assert final_state["board"][4] == "O"


def test_human_mode_alternates_and_detects_win():
    game_id = _new_game("human")["id"]
    for index in (0, 3, 1, 4):
        assert _move(game_id, index).status_code == 200
    state = _move(game_id, 2).json()
    assert state["winner"] == "X"
    assert state["winningLine"] == [0, 1, 2]
    assert state["availableMoves"] == []
    assert len(state["moveLog"]) == 5

    late = _move(game_id, 8)
    assert late.status_code == 400
    assert late.json()["detail"] == "Game already finished"


def test_invalid_move_rejected():
    game_id = _new_game("human")["id"]
    assert _move(game_id, 0).status_code == 200

    duplicate_move = _move(game_id, 0)
    assert duplicate_move.status_code == 400
    assert duplicate_move.json()["detail"]

    off_board = _move(game_id, 9)
    assert off_board.status_code == 422


def test_move_on_ai_turn_rejected():
    game_id = _new_game("ai")["id"]
    ui.SESSIONS[game_id].game.current_player = "O"
    response = _move(game_id, 0)
    assert response.status_code == 400


def test_reset_and_mode_switch():
    game_id = _new_game("ai")["id"]
    _move(game_id, 0)

    reset = client.post(f"/api/game/{game_id}/reset")
    assert reset.status_code == 200
    state = reset.json()
    assert state["board"] == [""] * 9
    assert state["currentPlayer"] == "X"
    assert state["moveLog"] == []
    assert state["mode"] == "ai"

    switched = client.post(f"/api/game/{game_id}/mode", json={"mode": "human"})
    assert switched.status_code == 200
    assert switched.json()["mode"] == "human"
    assert ui.SESSIONS[game_id].ai is None

    state = _move(game_id, 0).json()
    assert state["aiPending"] is False
    assert state["currentPlayer"] == "O"


def test_rejects_unknown_mode():
    response = client.post("/api/game", json={"mode": "robot"})
    assert response.status_code == 422


def test_missing_game_returns_404():
    assert client.get("/api/game/missing").status_code == 404
    assert client.post("/api/game/missing/reset").status_code == 404


def test_best_move_endpoint():
    response = client.post(
        "/api/best-move",
        json={"board": ["X", "X", "", "", "O", "", "", "", "O"], "player": "O"},
    )
    assert response.status_code == 200
    assert response.json() == {"index": 2, "score": 10}


def test_best_move_rejects_bad_boards():
    short = client.post("/api/best-move", json={"board": [""] * 8, "player": "O"})
    assert short.status_code == 422

    bad_mark = client.post(
        "/api/best-move", json={"board": ["Q"] + [""] * 8, "player": "O"}
    )
    assert bad_mark.status_code == 422

    finished = client.post(
        "/api/best-move",
        json={"board": ["X", "X", "X", "O", "O", "", "", "", ""], "player": "O"},
    )
    assert finished.status_code == 400


def test_index_page_served():
    response = client.get("/")
    assert response.status_code == 200
    assert "Tic-Tac-Toe" in response.text


def test_new_game_defaults_to_human_mode():
    response = client.post("/api/game", json={})
    assert response.status_code == 200
    game_id = response.json()["id"]
    assert response.json()["mode"] == "human"
    assert ui.SESSIONS[game_id].ai is None


def test_best_move_reuses_engine_cache():
    body = {"board": [""] * 9, "player": "O"}
    first = client.post("/api/best-move", json=body)
    assert first.status_code == 200
    assert first.json() == {"index": 0, "score": 0}
    assert (("",) * 9, "O") in ui._ENGINE_CACHE

    second = client.post("/api/best-move", json=body)
    assert second.json() == {"index": 0, "score": 0}


def test_requests_rejected_while_ai_is_thinking():
    game_id = _new_game("ai")["id"]
    _move(game_id, 0)
    session = ui.SESSIONS[game_id]
    before = client.get(f"/api/game/{game_id}").json()
    session.ai_pending = True
    try:
        for response in (
            _move(game_id, 8),
            client.post(f"/api/game/{game_id}/reset"),
            client.post(f"/api/game/{game_id}/mode", json={"mode": "human"}),
        ):
            assert response.status_code == 400
            assert response.json()["detail"] == "AI is completing its move"
    finally:
        session.ai_pending = False

    after = client.get(f"/api/game/{game_id}").json()
    assert after["board"] == before["board"]
    assert after["moveLog"] == before["moveLog"]
    assert after["mode"] == "ai"


def test_page_handles_rejected_requests():
    page = client.get("/").text
    # Tile, reset and mode handlers each catch a rejected request.
    assert page.count("console.warn(error.message)") == 3
    assert "startGame('human')" in page
