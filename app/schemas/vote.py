# app/schemas/vote.py
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base_class import Base

class GameVote(Base):
    __tablename__ = "gamevotes"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(32), ForeignKey("gamesessions.id"), nullable=False)
    voter_id = Column(String, nullable=False)
    submission_id = Column(Integer, ForeignKey("gamesubmissions.id"), nullable=False)
    round_number = Column(Integer, nullable=False)
    voted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    submission = relationship("GameSubmission", back_populates="votes")

    __table_args__ = (
        UniqueConstraint('session_id', 'voter_id', 'round_number', name='_session_voter_round_uc'),
        Index('ix_gamevotes_session_round', 'session_id', 'round_number'),
    )
