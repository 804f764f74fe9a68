# app/models/submission.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.models.enums import VideoStatus

class SubmissionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: str
    player_id: str
    round_number: int
    first_scene_image: str
    second_scene_image: str
    first_scene_analysis: Optional[str] = None
    second_scene_analysis: Optional[str] = None
    video_url: Optional[str] = None
    video_status: VideoStatus
    submitted_at: datetime
    is_complete: bool

class SubmitScenesRequest(BaseModel):
    player_id: str = Field(min_length=1)
    round_number: int = Field(ge=1)
    first_scene_image: str = Field(min_length=1)
    second_scene_image: str = Field(min_length=1)
    first_scene_analysis: Optional[str] = None
    second_scene_analysis: Optional[str] = None

class SubmitScenesResponse(BaseModel):
    submission_id: int

class UpdateVideoRequest(BaseModel):
    video_url: Optional[str] = None # None while processing or when generation failed
    video_status: VideoStatus

class RoundProgress(BaseModel):
    """How many players have acted (submitted or voted) in a round."""
    round_number: int
    completed_count: int
    player_count: int

    @computed_field
    @property
    def is_complete(self) -> bool:
        return self.player_count > 0 and self.completed_count >= self.player_count
