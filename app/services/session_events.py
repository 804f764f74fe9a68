# app/services/session_events.py
from typing import Any, Dict, Literal

SessionEventType = Literal[
    "session_snapshot",
    "session_updated",
    "submission_received",
    "submission_updated",
    "vote_cast",
    "round_scored",
    "error",
]


class SessionEvent:
    """A message pushed to every client subscribed to a session."""
    def __init__(self, event_type: SessionEventType, payload: Dict[str, Any]):
        self.type = event_type
        self.payload = payload

    def to_dict(self): # For sending over WebSocket
        return {"type": self.type, "payload": self.payload}
