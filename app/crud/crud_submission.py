# app/crud/crud_submission.py
import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.schemas.submission import GameSubmission

def create_submission(
    db: Session,
    session_id: str,
    player_id: str,
    round_number: int,
    first_scene_image: str,
    second_scene_image: str,
    first_scene_analysis: Optional[str] = None,
    second_scene_analysis: Optional[str] = None,
) -> GameSubmission:
    db_submission = GameSubmission(
        session_id=session_id,
        player_id=player_id,
        round_number=round_number,
        first_scene_image=first_scene_image,
        second_scene_image=second_scene_image,
        first_scene_analysis=first_scene_analysis,
        second_scene_analysis=second_scene_analysis,
        video_status="pending",
        submitted_at=datetime.datetime.now(datetime.timezone.utc),
        is_complete=True, # Both scenes are present; says nothing about the video
    )
    db.add(db_submission)
    db.commit()
    db.refresh(db_submission)
    return db_submission

def get_submission(db: Session, submission_id: int) -> GameSubmission | None:
    return db.query(GameSubmission).filter(GameSubmission.id == submission_id).first()

def get_submissions_for_round(db: Session, session_id: str, round_number: int) -> List[GameSubmission]:
    return (
        db.query(GameSubmission)
        .filter(GameSubmission.session_id == session_id, GameSubmission.round_number == round_number)
        .order_by(GameSubmission.submitted_at, GameSubmission.id)
        .all()
    )

def get_player_submission(db: Session, session_id: str, player_id: str, round_number: int) -> GameSubmission | None:
    return db.query(GameSubmission).filter(
        GameSubmission.session_id == session_id,
        GameSubmission.player_id == player_id,
        GameSubmission.round_number == round_number,
    ).first()

def count_submissions_for_round(db: Session, session_id: str, round_number: int) -> int:
    return db.query(func.count(GameSubmission.id)).filter(
        GameSubmission.session_id == session_id,
        GameSubmission.round_number == round_number,
    ).scalar() or 0

def update_submission_video(db: Session, db_submission: GameSubmission, video_url: Optional[str], video_status: str) -> GameSubmission:
    if video_url is not None:
        db_submission.video_url = video_url
    db_submission.video_status = video_status
    db.commit()
    db.refresh(db_submission)
    return db_submission
