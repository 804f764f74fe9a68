# tests/api/test_websockets_api.py
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect, WebSocketState

from app.api.websockets import SessionConnectionManager
from app.core.config import settings
from app.services.session_events import SessionEvent

API = settings.API_V1_STR

def _fake_socket(state: WebSocketState = WebSocketState.CONNECTED) -> MagicMock:
    websocket = MagicMock()
    websocket.client_state = state
    websocket.accept = AsyncMock()
    websocket.send_json = AsyncMock()
    return websocket

def test_ws_sends_snapshot_on_connect(client: TestClient):
    created = client.post(f"{API}/sessions", json={"host_id": "host", "host_nickname": "Hosty"}).json()

    with client.websocket_connect(f"/ws/sessions/{created['session_id']}") as websocket:
        data = websocket.receive_json()
        assert data["type"] == "session_snapshot"
        assert data["payload"]["id"] == created["session_id"]
        assert data["payload"]["phase"] == "waiting"

        websocket.send_text("ping")
        assert websocket.receive_json() == {"type": "pong", "payload": {}}

def test_ws_unknown_session_is_closed(client: TestClient):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/sessions/does-not-exist") as websocket:
            websocket.receive_json()

@pytest.mark.asyncio
async def test_manager_broadcasts_to_every_watcher_of_a_session():
    manager = SessionConnectionManager()
    ws_a, ws_b, ws_other = _fake_socket(), _fake_socket(), _fake_socket()
    await manager.connect(ws_a, "s1")
    await manager.connect(ws_b, "s1")
    await manager.connect(ws_other, "s2")
    assert manager.connection_count() == 3

    event = SessionEvent("vote_cast", {"voter_id": "p1"})
    await manager.broadcast("s1", event)

    ws_a.send_json.assert_awaited_once_with(event.to_dict())
    ws_b.send_json.assert_awaited_once_with(event.to_dict())
    ws_other.send_json.assert_not_awaited()

@pytest.mark.asyncio
async def test_manager_drops_closed_and_failing_sockets():
    manager = SessionConnectionManager()
    closed = _fake_socket(WebSocketState.DISCONNECTED)
    failing = _fake_socket()
    failing.send_json.side_effect = RuntimeError("socket gone")
    healthy = _fake_socket()
    for websocket in (closed, failing, healthy):
        await manager.connect(websocket, "s1")

    await manager.broadcast("s1", SessionEvent("session_updated", {}))

    closed.send_json.assert_not_awaited()
    healthy.send_json.assert_awaited_once()
    assert manager.active_connections["s1"] == [healthy]

@pytest.mark.asyncio
async def test_manager_forgets_session_when_last_watcher_leaves():
    manager = SessionConnectionManager()
    websocket = _fake_socket()
    await manager.connect(websocket, "s1")
    manager.disconnect("s1", websocket)
    manager.disconnect("s1", websocket) # Second call is a no-op
    assert manager.active_connections == {}
    await manager.broadcast("s1", SessionEvent("session_updated", {})) # Nobody listening

def test_mutations_are_pushed_to_watchers(client: TestClient, mocker):
    broadcast = mocker.patch("app.api.websockets.session_manager.broadcast", new_callable=AsyncMock)
    created = client.post(f"{API}/sessions", json={"host_id": "host", "host_nickname": "Hosty"}).json()
    client.post(f"{API}/sessions/join", json={"code": created["code"], "player_id": "p1", "nickname": "P1"})

    session_id, event = broadcast.await_args.args
    assert session_id == created["session_id"]
    assert event.type == "session_updated"
    assert [p["user_id"] for p in event.payload["players"]] == ["host", "p1"]
