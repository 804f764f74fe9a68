# app/api/submissions.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api import deps
from app.api.websockets import session_manager
from app.models.submission import (
    RoundProgress,
    SubmissionPublic,
    SubmitScenesRequest,
    SubmitScenesResponse,
    UpdateVideoRequest,
)
from app.services import submission_service
from app.services.session_events import SessionEvent

logger = logging.getLogger("app.api.submissions")  # Logger for this module
router = APIRouter()

@router.post("/sessions/{session_id}/submissions", response_model=SubmitScenesResponse, status_code=status.HTTP_201_CREATED)
async def submit_scenes(session_id: str, request: SubmitScenesRequest, db: Session = Depends(deps.get_db)):
    db_submission = submission_service.submit_scenes(
        db,
        session_id=session_id,
        player_id=request.player_id,
        round_number=request.round_number,
        first_scene_image=request.first_scene_image,
        second_scene_image=request.second_scene_image,
        first_scene_analysis=request.first_scene_analysis,
        second_scene_analysis=request.second_scene_analysis,
    )
    progress = submission_service.get_submission_progress(db, session_id, request.round_number)
    await session_manager.broadcast(session_id, SessionEvent("submission_received", {
        "submission_id": db_submission.id,
        "player_id": db_submission.player_id,
        "progress": progress.model_dump(),
    }))
    return SubmitScenesResponse(submission_id=db_submission.id)

@router.get("/sessions/{session_id}/rounds/{round_number}/submissions", response_model=List[SubmissionPublic])
def get_round_submissions(session_id: str, round_number: int, db: Session = Depends(deps.get_db)):
    return submission_service.get_session_submissions(db, session_id, round_number)

@router.get("/sessions/{session_id}/rounds/{round_number}/submissions/{player_id}", response_model=SubmissionPublic)
def get_player_submission(session_id: str, round_number: int, player_id: str, db: Session = Depends(deps.get_db)):
    db_submission = submission_service.get_player_submission(db, session_id, player_id, round_number)
    if not db_submission:
        raise HTTPException(status_code=404, detail="Player has not submitted for this round.")
    return db_submission

@router.get("/sessions/{session_id}/rounds/{round_number}/submission-progress", response_model=RoundProgress)
def get_submission_progress(session_id: str, round_number: int, db: Session = Depends(deps.get_db)):
    return submission_service.get_submission_progress(db, session_id, round_number)

@router.get("/submissions/{submission_id}", response_model=SubmissionPublic)
def get_submission(submission_id: int, db: Session = Depends(deps.get_db)):
    return submission_service.get_submission(db, submission_id)

@router.patch("/submissions/{submission_id}/video", response_model=SubmissionPublic)
async def update_submission_video(submission_id: int, request: UpdateVideoRequest, db: Session = Depends(deps.get_db)):
    """Called by the video pipeline as generation progresses."""
    db_submission = submission_service.update_submission_video(db, submission_id, request.video_url, request.video_status)
    await session_manager.broadcast(db_submission.session_id, SessionEvent(
        "submission_updated",
        SubmissionPublic.model_validate(db_submission).model_dump(mode="json", exclude={"first_scene_image", "second_scene_image"}),
    ))
    return db_submission
