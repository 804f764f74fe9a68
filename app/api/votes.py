# app/api/votes.py
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api import deps
from app.api.websockets import session_manager
from app.models.submission import RoundProgress
from app.models.vote import CastVoteRequest, CastVoteResponse, RoundScoreResult, RoundWinner, VotePublic
from app.services import scoring_service
from app.services.session_events import SessionEvent

logger = logging.getLogger("app.api.votes")  # Logger for this module
router = APIRouter()

@router.post("/sessions/{session_id}/votes", response_model=CastVoteResponse, status_code=status.HTTP_201_CREATED)
async def cast_vote(session_id: str, request: CastVoteRequest, db: Session = Depends(deps.get_db)):
    db_vote = scoring_service.cast_vote(db, session_id, request.voter_id, request.submission_id, request.round_number)
    progress = scoring_service.get_voting_progress(db, session_id, request.round_number)
    await session_manager.broadcast(session_id, SessionEvent("vote_cast", {
        "voter_id": db_vote.voter_id,
        "progress": progress.model_dump(),
    }))
    return CastVoteResponse(vote_id=db_vote.id)

@router.get("/sessions/{session_id}/rounds/{round_number}/votes", response_model=Dict[int, int])
def get_vote_results(session_id: str, round_number: int, db: Session = Depends(deps.get_db)):
    """submission_id -> votes. Submissions without votes are omitted."""
    return scoring_service.get_vote_results(db, session_id, round_number)

@router.get("/sessions/{session_id}/rounds/{round_number}/votes/{voter_id}", response_model=VotePublic)
def get_player_vote(session_id: str, round_number: int, voter_id: str, db: Session = Depends(deps.get_db)):
    db_vote = scoring_service.get_player_vote(db, session_id, voter_id, round_number)
    if not db_vote:
        raise HTTPException(status_code=404, detail="Player has not voted in this round.")
    return db_vote

@router.get("/sessions/{session_id}/rounds/{round_number}/voting-progress", response_model=RoundProgress)
def get_voting_progress(session_id: str, round_number: int, db: Session = Depends(deps.get_db)):
    return scoring_service.get_voting_progress(db, session_id, round_number)

@router.post("/sessions/{session_id}/rounds/{round_number}/score", response_model=RoundScoreResult)
async def calculate_round_scores(session_id: str, round_number: int, db: Session = Depends(deps.get_db)):
    """
    Safe to call from every client once voting is complete; only the first call
    changes scores, the others get `already_calculated`.
    """
    result = scoring_service.calculate_round_scores(db, session_id, round_number)
    if not result.already_calculated:
        await session_manager.broadcast(session_id, SessionEvent("round_scored", result.model_dump(mode="json")))
    return result

@router.get("/sessions/{session_id}/rounds/{round_number}/winner", response_model=Optional[RoundWinner])
def get_round_winner(session_id: str, round_number: int, db: Session = Depends(deps.get_db)):
    return scoring_service.get_round_winner(db, session_id, round_number)
