# app/schemas/submission.py
from sqlalchemy import Column, String, Integer, DateTime, Boolean, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base_class import Base

class GameSubmission(Base):
    __tablename__ = "gamesubmissions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(32), ForeignKey("gamesessions.id"), nullable=False, index=True)
    player_id = Column(String, nullable=False)
    round_number = Column(Integer, nullable=False)

    # Opaque image payloads (data URLs from the canvas)
    first_scene_image = Column(Text, nullable=False)
    second_scene_image = Column(Text, nullable=False)
    first_scene_analysis = Column(Text, nullable=True)
    second_scene_analysis = Column(Text, nullable=True)

    video_url = Column(String, nullable=True)
    video_status = Column(String(16), default="pending", nullable=False) # pending, processing, completed, failed

    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    is_complete = Column(Boolean, default=True, nullable=False)

    votes = relationship("GameVote", back_populates="submission")

    __table_args__ = (UniqueConstraint('session_id', 'player_id', 'round_number', name='_session_player_round_uc'),)
