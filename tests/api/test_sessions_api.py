# tests/api/test_sessions_api.py
from fastapi.testclient import TestClient

from app.core.config import settings

API = settings.API_V1_STR

def _create(client: TestClient, host_id: str = "host", rounds_target: int = 2) -> dict:
    response = client.post(f"{API}/sessions", json={"host_id": host_id, "host_nickname": "Hosty", "rounds_target": rounds_target})
    assert response.status_code == 201, response.text
    return response.json()

def _join(client: TestClient, code: str, player_id: str):
    return client.post(f"{API}/sessions/join", json={"code": code, "player_id": player_id, "nickname": player_id.title()})

def test_health(client: TestClient):
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

def test_create_and_get_session(client: TestClient):
    created = _create(client)
    assert len(created["code"]) == 6

    response = client.get(f"{API}/sessions/{created['session_id']}")
    assert response.status_code == 200
    data = response.json()
    assert data["phase"] == "waiting"
    assert data["rounds_target"] == 2
    assert data["round_duration_seconds"] == settings.ROUND_DURATION_SECONDS
    assert data["all_players_ready"] is False
    assert [p["user_id"] for p in data["players"]] == ["host"]

    by_code = client.get(f"{API}/sessions/code/{created['code']}")
    assert by_code.status_code == 200
    assert by_code.json()["id"] == created["session_id"]

def test_create_session_validation(client: TestClient):
    response = client.post(f"{API}/sessions", json={"host_id": "h", "host_nickname": "x" * 21})
    assert response.status_code == 422
    response = client.post(f"{API}/sessions", json={"host_id": "h", "host_nickname": "H", "rounds_target": 0})
    assert response.status_code == 422

def test_unknown_session_is_404(client: TestClient):
    response = client.get(f"{API}/sessions/nope")
    assert response.status_code == 404
    assert response.json() == {"detail": "Session not found"}

def test_join_errors(client: TestClient):
    assert _join(client, "ZZZZZZ", "p1").status_code == 404
    assert _join(client, "TOOLONGCODE", "p1").status_code == 422

    created = _create(client)
    assert _join(client, created["code"], "p1").status_code == 200
    assert client.post(f"{API}/sessions/{created['session_id']}/start").status_code == 200

    late = _join(client, created["code"], "late")
    assert late.status_code == 409

def test_join_twice_keeps_one_entry(client: TestClient):
    created = _create(client)
    _join(client, created["code"], "p1")
    response = _join(client, created["code"], "p1")
    assert response.status_code == 200
    assert len(response.json()["players"]) == 2

def test_ready_flags(client: TestClient):
    created = _create(client)
    _join(client, created["code"], "p1")
    for player_id in ("host", "p1"):
        response = client.post(f"{API}/sessions/{created['session_id']}/ready", json={"player_id": player_id, "is_ready": True})
        assert response.status_code == 200
    assert response.json()["all_players_ready"] is True

def test_start_with_one_player_is_409(client: TestClient):
    created = _create(client)
    response = client.post(f"{API}/sessions/{created['session_id']}/start")
    assert response.status_code == 409
    assert "at least 2 players" in response.json()["detail"]

def test_full_game_over_http(client: TestClient):
    created = _create(client, rounds_target=2)
    session_id = created["session_id"]
    _join(client, created["code"], "p1")

    started = client.post(f"{API}/sessions/{session_id}/start").json()
    assert started["phase"] == "active"
    assert started["current_round_number"] == 1

    for round_number in (1, 2):
        sub_ids = {}
        for player_id in ("host", "p1"):
            response = client.post(f"{API}/sessions/{session_id}/submissions", json={
                "player_id": player_id,
                "round_number": round_number,
                "first_scene_image": "data:image/png;base64,AAA",
                "second_scene_image": "data:image/png;base64,BBB",
            })
            assert response.status_code == 201, response.text
            sub_ids[player_id] = response.json()["submission_id"]

        progress = client.get(f"{API}/sessions/{session_id}/rounds/{round_number}/submission-progress").json()
        assert progress["is_complete"] is True

        assert client.post(f"{API}/sessions/{session_id}/voting").json()["phase"] == "voting"

        # Both vote for the host's drawing; host cannot, so host votes for p1
        assert client.post(f"{API}/sessions/{session_id}/votes", json={"voter_id": "p1", "submission_id": sub_ids["host"], "round_number": round_number}).status_code == 201
        assert client.post(f"{API}/sessions/{session_id}/votes", json={"voter_id": "host", "submission_id": sub_ids["p1"], "round_number": round_number}).status_code == 201

        voting = client.get(f"{API}/sessions/{session_id}/rounds/{round_number}/voting-progress").json()
        assert voting["completed_count"] == 2

        scored = client.post(f"{API}/sessions/{session_id}/rounds/{round_number}/score").json()
        assert scored["already_calculated"] is False
        again = client.post(f"{API}/sessions/{session_id}/rounds/{round_number}/score").json()
        assert again["already_calculated"] is True

        winner = client.get(f"{API}/sessions/{session_id}/rounds/{round_number}/winner").json()
        closed = client.post(f"{API}/sessions/{session_id}/complete-round", json={"round_winner_id": winner["player_id"]}).json()
        assert closed["rounds_completed"] == round_number

        if round_number == 1:
            assert closed["phase"] == "waiting"
            advanced = client.post(f"{API}/sessions/{session_id}/next-round").json()
            assert advanced["current_round_number"] == 2

    assert closed["phase"] == "completed"
    board = client.get(f"{API}/sessions/{session_id}/leaderboard").json()
    assert [entry["rank"] for entry in board] == [1, 2]
    assert sum(entry["cumulative_score"] for entry in board) == 10 # 3 + 2 per round
    assert sum(entry["round_wins"] for entry in board) == 2

def test_end_game(client: TestClient):
    created = _create(client, rounds_target=5)
    response = client.post(f"{API}/sessions/{created['session_id']}/end")
    assert response.status_code == 200
    assert response.json()["phase"] == "completed"

    # A finished lobby no longer admits players
    assert _join(client, created["code"], "p1").status_code == 409

def test_complete_round_before_start_is_409(client: TestClient):
    created = _create(client)
    response = client.post(f"{API}/sessions/{created['session_id']}/complete-round", json={"round_winner_id": "host"})
    assert response.status_code == 409

def test_exhausted_session_codes_is_503(client: TestClient, mocker):
    mocker.patch("app.services.session_service.generate_session_code", return_value="AAAAAA")
    _create(client)
    response = client.post(f"{API}/sessions", json={"host_id": "h2", "host_nickname": "Two"})
    assert response.status_code == 503
    assert response.json() == {"detail": "Could not allocate a free session code, please retry"}
