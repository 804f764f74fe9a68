# app/models/vote.py
from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from app.models.session import SessionPlayer

class VotePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: str
    voter_id: str
    submission_id: int
    round_number: int
    voted_at: datetime

class CastVoteRequest(BaseModel):
    voter_id: str = Field(min_length=1)
    submission_id: int
    round_number: int = Field(ge=1)

class CastVoteResponse(BaseModel):
    vote_id: int

class RoundScoreResult(BaseModel):
    """
    Outcome of scoring a round. When the round was already scored by an earlier
    (or concurrent) call, only `already_calculated` is set.
    """
    round_number: int
    already_calculated: bool = False
    vote_counts: Dict[int, int] = {}       # submission_id -> votes
    points_awarded: Dict[int, int] = {}    # submission_id -> points
    updated_players: List[SessionPlayer] = []

class RoundWinner(BaseModel):
    player_id: str
    vote_count: int
    submission_id: int
