# tests/api/test_votes_api.py
from fastapi.testclient import TestClient

from app.core.config import settings

API = settings.API_V1_STR

def _started_session(client: TestClient) -> str:
    created = client.post(f"{API}/sessions", json={"host_id": "host", "host_nickname": "Hosty"}).json()
    client.post(f"{API}/sessions/join", json={"code": created["code"], "player_id": "p1", "nickname": "P1"})
    client.post(f"{API}/sessions/{created['session_id']}/start")
    return created["session_id"]

def _submit(client: TestClient, session_id: str, player_id: str, round_number: int = 1):
    return client.post(f"{API}/sessions/{session_id}/submissions", json={
        "player_id": player_id,
        "round_number": round_number,
        "first_scene_image": "img-1",
        "second_scene_image": "img-2",
    })

def _vote(client: TestClient, session_id: str, voter_id: str, submission_id: int, round_number: int = 1):
    return client.post(f"{API}/sessions/{session_id}/votes", json={
        "voter_id": voter_id, "submission_id": submission_id, "round_number": round_number,
    })

def test_self_vote_is_403(client: TestClient):
    session_id = _started_session(client)
    submission_id = _submit(client, session_id, "host").json()["submission_id"]
    response = _vote(client, session_id, "host", submission_id)
    assert response.status_code == 403
    assert response.json()["detail"] == "Cannot vote for your own submission"

def test_second_vote_is_409(client: TestClient):
    session_id = _started_session(client)
    submission_id = _submit(client, session_id, "host").json()["submission_id"]
    assert _vote(client, session_id, "p1", submission_id).status_code == 201
    response = _vote(client, session_id, "p1", submission_id)
    assert response.status_code == 409
    assert response.json()["detail"] == "Player has already voted in this round"

def test_vote_for_unknown_submission_is_404(client: TestClient):
    session_id = _started_session(client)
    assert _vote(client, session_id, "p1", 4242).status_code == 404

def test_duplicate_submission_is_409(client: TestClient):
    session_id = _started_session(client)
    assert _submit(client, session_id, "p1").status_code == 201
    response = _submit(client, session_id, "p1")
    assert response.status_code == 409
    assert response.json()["detail"] == "Player has already submitted for this round"

def test_vote_results_and_player_vote(client: TestClient):
    session_id = _started_session(client)
    host_sub = _submit(client, session_id, "host").json()["submission_id"]
    _submit(client, session_id, "p1")
    _vote(client, session_id, "p1", host_sub)

    results = client.get(f"{API}/sessions/{session_id}/rounds/1/votes")
    assert results.status_code == 200
    assert results.json() == {str(host_sub): 1} # JSON object keys are strings

    vote = client.get(f"{API}/sessions/{session_id}/rounds/1/votes/p1")
    assert vote.status_code == 200
    assert vote.json()["submission_id"] == host_sub
    assert client.get(f"{API}/sessions/{session_id}/rounds/1/votes/host").status_code == 404

def test_round_winner_without_votes_is_null(client: TestClient):
    session_id = _started_session(client)
    response = client.get(f"{API}/sessions/{session_id}/rounds/1/winner")
    assert response.status_code == 200
    assert response.json() is None

def test_submission_endpoints(client: TestClient):
    session_id = _started_session(client)
    submission_id = _submit(client, session_id, "p1").json()["submission_id"]

    listed = client.get(f"{API}/sessions/{session_id}/rounds/1/submissions").json()
    assert [s["player_id"] for s in listed] == ["p1"]
    assert client.get(f"{API}/sessions/{session_id}/rounds/1/submissions/p1").json()["id"] == submission_id
    assert client.get(f"{API}/sessions/{session_id}/rounds/1/submissions/host").status_code == 404

    single = client.get(f"{API}/submissions/{submission_id}")
    assert single.status_code == 200
    assert single.json()["video_status"] == "pending"
    assert client.get(f"{API}/submissions/999").status_code == 404

def test_video_status_updates(client: TestClient):
    session_id = _started_session(client)
    submission_id = _submit(client, session_id, "p1").json()["submission_id"]

    response = client.patch(f"{API}/submissions/{submission_id}/video", json={"video_status": "processing"})
    assert response.status_code == 200
    response = client.patch(f"{API}/submissions/{submission_id}/video", json={"video_status": "completed", "video_url": "https://cdn.example/v.mp4"})
    assert response.status_code == 200
    assert response.json()["video_url"] == "https://cdn.example/v.mp4"

    response = client.patch(f"{API}/submissions/{submission_id}/video", json={"video_status": "processing"})
    assert response.status_code == 409
    assert client.patch(f"{API}/submissions/{submission_id}/video", json={"video_status": "exploded"}).status_code == 422

def test_vote_for_submission_from_another_round_is_404(client: TestClient):
    session_id = _started_session(client)
    submission_id = _submit(client, session_id, "host").json()["submission_id"]
    response = _vote(client, session_id, "p1", submission_id, round_number=2)
    assert response.status_code == 404
    assert response.json()["detail"] == "Submission not found in this round"
