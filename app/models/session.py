# app/models/session.py
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.core.config import settings
from app.models.enums import SessionPhase

class SessionPlayer(BaseModel):
    """One entry of GameSession.players. Stored as JSON on the session row."""
    user_id: str = Field(min_length=1)
    nickname: str = Field(min_length=1, max_length=settings.MAX_NICKNAME_LENGTH)
    cumulative_score: int = Field(default=0, ge=0)
    round_wins: int = Field(default=0, ge=0)
    is_ready: bool = False
    is_host: bool = False
    joined_at: datetime

class GameSessionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    host_id: str
    phase: SessionPhase
    current_round_number: int
    current_prompt: str
    rounds_completed: int
    rounds_target: int
    scored_round_numbers: List[int] = []
    players: List[SessionPlayer] = []
    created_at: datetime
    expires_at: datetime
    round_duration_seconds: int = settings.ROUND_DURATION_SECONDS

    @computed_field
    @property
    def all_players_ready(self) -> bool:
        return bool(self.players) and all(p.is_ready for p in self.players)

class CreateSessionRequest(BaseModel):
    host_id: str = Field(min_length=1)
    host_nickname: str = Field(min_length=1, max_length=settings.MAX_NICKNAME_LENGTH)
    rounds_target: int = Field(default=settings.DEFAULT_ROUNDS_TARGET, ge=1, le=settings.MAX_ROUNDS_TARGET)

class CreateSessionResponse(BaseModel):
    session_id: str
    code: str

class JoinSessionRequest(BaseModel):
    code: str = Field(min_length=settings.SESSION_CODE_LENGTH, max_length=settings.SESSION_CODE_LENGTH)
    player_id: str = Field(min_length=1)
    nickname: str = Field(min_length=1, max_length=settings.MAX_NICKNAME_LENGTH)

class PlayerReadyRequest(BaseModel):
    player_id: str
    is_ready: bool

class CompleteRoundRequest(BaseModel):
    round_winner_id: str

class LeaderboardEntry(SessionPlayer):
    rank: int
