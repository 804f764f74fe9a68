# app/api/websockets.py
import asyncio
import logging
from typing import Dict, List

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState

from app.core.errors import NotFoundError
from app.db.session import SessionLocal
from app.models.session import GameSessionPublic
from app.services import session_service
from app.services.session_events import SessionEvent

logger = logging.getLogger("app.api.websockets")  # Logger for this module
router = APIRouter()


class SessionConnectionManager:
    """
    Push channel for clients watching a session, the alternative to polling.
    Nothing here changes game state; every mutation goes through the HTTP routes,
    which broadcast the result afterwards.
    """
    def __init__(self):
        # session_id -> open sockets (one per browser tab, players are not authenticated)
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, session_id: str):
        await websocket.accept()
        self.active_connections.setdefault(session_id, []).append(websocket)
        logger.info(f"S:{session_id} - Watcher connected. Open connections: {len(self.active_connections[session_id])}")

    def disconnect(self, session_id: str, websocket: WebSocket):
        connections = self.active_connections.get(session_id)
        if not connections or websocket not in connections:
            return
        connections.remove(websocket)
        logger.info(f"S:{session_id} - Watcher disconnected. Open connections: {len(connections)}")
        if not connections:
            del self.active_connections[session_id]

    def connection_count(self) -> int:
        return sum(len(c) for c in self.active_connections.values())

    async def broadcast(self, session_id: str, event: SessionEvent):
        connections = list(self.active_connections.get(session_id, []))
        if not connections:
            return
        logger.debug(f"S:{session_id} - Broadcasting {event.type} to {len(connections)} connection(s).")
        message = event.to_dict()
        await asyncio.gather(*(self._send_json_safe(c, message, session_id) for c in connections))

    async def _send_json_safe(self, connection: WebSocket, message: dict, session_id: str):
        try:
            if connection.client_state == WebSocketState.CONNECTED:
                await connection.send_json(message)
            else: # Connection closed before sending
                logger.warning(f"S:{session_id} - WS already closed before sending {message.get('type')}. Dropping it.")
                self.disconnect(session_id, connection)
        except Exception as e:
            logger.exception(f"S:{session_id} - Error sending {message.get('type')}: {e}. Disconnecting.")
            self.disconnect(session_id, connection)


session_manager = SessionConnectionManager()


def session_snapshot(db_session) -> dict:
    return GameSessionPublic.model_validate(db_session).model_dump(mode="json")


async def broadcast_session(db_session, event_type: str = "session_updated"):
    """Pushes the full session document; clients re-render from it."""
    await session_manager.broadcast(db_session.id, SessionEvent(event_type, session_snapshot(db_session)))


@router.websocket("/ws/sessions/{session_id}")
async def session_websocket_endpoint(websocket: WebSocket, session_id: str):
    # Own DB session: the socket outlives any request-scoped dependency
    db = SessionLocal()
    try:
        db_session = session_service.get_session(db, session_id)
        snapshot = session_snapshot(db_session)
    except NotFoundError:
        logger.warning(f"S:{session_id} - WS rejected, session not found or expired.")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Session not found")
        return
    finally:
        db.close()

    await session_manager.connect(websocket, session_id)
    try:
        await websocket.send_json(SessionEvent("session_snapshot", snapshot).to_dict())
        while True:
            # Clients only listen; anything they send is a keep-alive
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_json({"type": "pong", "payload": {}})
    except WebSocketDisconnect:
        logger.info(f"S:{session_id} - WS disconnected by client.")
    except Exception as e:
        logger.exception(f"S:{session_id} - Unexpected error in WS loop: {type(e).__name__} - {e}")
        if websocket.client_state == WebSocketState.CONNECTED:
            try:
                await websocket.send_json(SessionEvent("error", {"message": "Internal server error"}).to_dict())
            except Exception as send_e:
                logger.debug(f"S:{session_id} - Could not report error to client: {send_e}")
    finally:
        session_manager.disconnect(session_id, websocket)
