# app/api/sessions.py
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api import deps
from app.api.websockets import broadcast_session
from app.models.session import (
    CompleteRoundRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    GameSessionPublic,
    JoinSessionRequest,
    LeaderboardEntry,
    PlayerReadyRequest,
)
from app.services import scoring_service, session_service

logger = logging.getLogger("app.api.sessions")  # Logger for this module
router = APIRouter()

@router.post("/sessions", response_model=CreateSessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(request: CreateSessionRequest, db: Session = Depends(deps.get_db)):
    """Host opens a new lobby. The returned code is what the other players type in."""
    db_session = session_service.create_session(db, request.host_id, request.host_nickname, request.rounds_target)
    return CreateSessionResponse(session_id=db_session.id, code=db_session.code)

@router.get("/sessions/code/{code}", response_model=GameSessionPublic)
def get_session_by_code(code: str, db: Session = Depends(deps.get_db)):
    return session_service.get_session_by_code(db, code)

@router.get("/sessions/{session_id}", response_model=GameSessionPublic)
def get_session(session_id: str, db: Session = Depends(deps.get_db)):
    return session_service.get_session(db, session_id)

@router.post("/sessions/join", response_model=GameSessionPublic)
async def join_session(request: JoinSessionRequest, db: Session = Depends(deps.get_db)):
    db_session = session_service.join_session(db, request.code, request.player_id, request.nickname)
    await broadcast_session(db_session)
    return db_session

@router.post("/sessions/{session_id}/ready", response_model=GameSessionPublic)
async def set_player_ready(session_id: str, request: PlayerReadyRequest, db: Session = Depends(deps.get_db)):
    db_session = session_service.set_player_ready(db, session_id, request.player_id, request.is_ready)
    await broadcast_session(db_session)
    return db_session

@router.post("/sessions/{session_id}/start", response_model=GameSessionPublic)
async def start_game(session_id: str, db: Session = Depends(deps.get_db)):
    db_session = session_service.start_game(db, session_id)
    await broadcast_session(db_session)
    return db_session

@router.post("/sessions/{session_id}/next-round", response_model=GameSessionPublic)
async def advance_round(session_id: str, db: Session = Depends(deps.get_db)):
    db_session = session_service.advance_round(db, session_id)
    await broadcast_session(db_session)
    return db_session

@router.post("/sessions/{session_id}/voting", response_model=GameSessionPublic)
async def begin_voting(session_id: str, db: Session = Depends(deps.get_db)):
    db_session = session_service.begin_voting(db, session_id)
    await broadcast_session(db_session)
    return db_session

@router.post("/sessions/{session_id}/complete-round", response_model=GameSessionPublic)
async def complete_round(session_id: str, request: CompleteRoundRequest, db: Session = Depends(deps.get_db)):
    db_session = session_service.complete_round(db, session_id, request.round_winner_id)
    await broadcast_session(db_session)
    return db_session

@router.post("/sessions/{session_id}/end", response_model=GameSessionPublic)
async def end_game(session_id: str, db: Session = Depends(deps.get_db)):
    db_session = session_service.end_game(db, session_id)
    await broadcast_session(db_session)
    return db_session

@router.get("/sessions/{session_id}/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(session_id: str, db: Session = Depends(deps.get_db)):
    """Players by cumulative score. Equal scores get consecutive ranks in join order."""
    return scoring_service.get_round_leaderboard(db, session_id)
