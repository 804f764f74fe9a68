# app/crud/crud_vote.py
import datetime
from typing import Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.schemas.vote import GameVote

def create_vote(db: Session, session_id: str, voter_id: str, submission_id: int, round_number: int) -> GameVote:
    db_vote = GameVote(
        session_id=session_id,
        voter_id=voter_id,
        submission_id=submission_id,
        round_number=round_number,
        voted_at=datetime.datetime.now(datetime.timezone.utc),
    )
    db.add(db_vote)
    db.commit()
    db.refresh(db_vote)
    return db_vote

def get_voter_vote(db: Session, session_id: str, voter_id: str, round_number: int) -> GameVote | None:
    return db.query(GameVote).filter(
        GameVote.session_id == session_id,
        GameVote.voter_id == voter_id,
        GameVote.round_number == round_number,
    ).first()

def tally_votes(db: Session, session_id: str, round_number: int) -> Dict[int, int]:
    """submission_id -> vote count. Submissions nobody voted for are absent."""
    rows = (
        db.query(GameVote.submission_id, func.count(GameVote.id))
        .filter(GameVote.session_id == session_id, GameVote.round_number == round_number)
        .group_by(GameVote.submission_id)
        .all()
    )
    return {submission_id: count for submission_id, count in rows}

def count_votes_for_round(db: Session, session_id: str, round_number: int) -> int:
    return db.query(func.count(GameVote.id)).filter(
        GameVote.session_id == session_id,
        GameVote.round_number == round_number,
    ).scalar() or 0
