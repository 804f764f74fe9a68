# app/services/submission_service.py
import logging
from typing import Dict, List, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateSubmissionError, InvalidStatusTransitionError, NotFoundError
from app.crud import crud_submission
from app.models.enums import VideoStatus
from app.models.submission import RoundProgress
from app.schemas.submission import GameSubmission
from app.services import session_service

logger = logging.getLogger("app.services.submission_service")

# The video comes from an external generator; completed and failed are final.
# A failed video is not retried here, voting falls back to the raw sketches.
VIDEO_STATUS_TRANSITIONS: Dict[VideoStatus, Set[VideoStatus]] = {
    VideoStatus.PENDING: {VideoStatus.PENDING, VideoStatus.PROCESSING, VideoStatus.COMPLETED, VideoStatus.FAILED},
    VideoStatus.PROCESSING: {VideoStatus.PROCESSING, VideoStatus.COMPLETED, VideoStatus.FAILED},
    VideoStatus.COMPLETED: set(),
    VideoStatus.FAILED: set(),
}


def submit_scenes(
    db: Session,
    session_id: str,
    player_id: str,
    round_number: int,
    first_scene_image: str,
    second_scene_image: str,
    first_scene_analysis: Optional[str] = None,
    second_scene_analysis: Optional[str] = None,
) -> GameSubmission:
    """
    Stores a player's two sketches for a round. One submission per player per round;
    the round itself is not checked against the session, late entries are accepted.
    """
    session_service.require_session(db, session_id)

    if crud_submission.get_player_submission(db, session_id, player_id, round_number):
        logger.warning(f"S:{session_id} R:{round_number} - Duplicate submission from player '{player_id}' rejected.")
        raise DuplicateSubmissionError()

    try:
        db_submission = crud_submission.create_submission(
            db,
            session_id=session_id,
            player_id=player_id,
            round_number=round_number,
            first_scene_image=first_scene_image,
            second_scene_image=second_scene_image,
            first_scene_analysis=first_scene_analysis,
            second_scene_analysis=second_scene_analysis,
        )
    except IntegrityError:
        # Lost a race with the same player's other request (double click, auto-submit at time-up)
        db.rollback()
        logger.warning(f"S:{session_id} R:{round_number} - Concurrent duplicate submission from player '{player_id}' rejected.")
        raise DuplicateSubmissionError()

    logger.info(f"S:{session_id} R:{round_number} - Player '{player_id}' submitted scenes (submission {db_submission.id}).")
    return db_submission


def get_submission(db: Session, submission_id: int) -> GameSubmission:
    db_submission = crud_submission.get_submission(db, submission_id)
    if not db_submission:
        raise NotFoundError("Submission not found")
    return db_submission


def update_submission_video(
    db: Session,
    submission_id: int,
    video_url: Optional[str],
    video_status: VideoStatus,
) -> GameSubmission:
    db_submission = get_submission(db, submission_id)
    current = VideoStatus(db_submission.video_status)
    if video_status not in VIDEO_STATUS_TRANSITIONS[current]:
        logger.warning(f"Submission {submission_id} - Video status change {current.value} -> {video_status.value} rejected.")
        raise InvalidStatusTransitionError(f"Cannot change video status from '{current.value}' to '{video_status.value}'")

    db_submission = crud_submission.update_submission_video(db, db_submission, video_url, video_status.value)
    logger.info(f"Submission {submission_id} - Video status {current.value} -> {video_status.value}.")
    return db_submission


def get_session_submissions(db: Session, session_id: str, round_number: int) -> List[GameSubmission]:
    session_service.require_session(db, session_id)
    return crud_submission.get_submissions_for_round(db, session_id, round_number)


def get_player_submission(db: Session, session_id: str, player_id: str, round_number: int) -> GameSubmission | None:
    session_service.require_session(db, session_id)
    return crud_submission.get_player_submission(db, session_id, player_id, round_number)


def get_submission_progress(db: Session, session_id: str, round_number: int) -> RoundProgress:
    """How many players have submitted; the client moves to voting once everyone has."""
    db_session = session_service.require_session(db, session_id)
    return RoundProgress(
        round_number=round_number,
        completed_count=crud_submission.count_submissions_for_round(db, session_id, round_number),
        player_count=len(db_session.players or []),
    )
