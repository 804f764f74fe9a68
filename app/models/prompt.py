# app/models/prompt.py
from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import PromptDifficulty

class DrawingPromptCreate(BaseModel):
    text: str = Field(min_length=3, max_length=200)
    category: str = Field(default="general", max_length=50)
    difficulty: PromptDifficulty = PromptDifficulty.MEDIUM

class DrawingPromptPublic(DrawingPromptCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
