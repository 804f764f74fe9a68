# app/schemas/game_session.py
from sqlalchemy import Column, String, Integer, DateTime, JSON, Text
from sqlalchemy.sql import func

from app.db.base_class import Base

class GameSession(Base):
    """
    Root record of one game. `players` and `scored_round_numbers` are embedded JSON
    lists that are always rewritten whole; `version` makes every UPDATE of the row a
    compare-and-swap against the version the writer loaded.
    """
    __tablename__ = "gamesessions"

    id = Column(String(32), primary_key=True, index=True) # uuid4 hex
    code = Column(String(6), index=True, nullable=False)
    host_id = Column(String, nullable=False)
    phase = Column(String(16), default="waiting", nullable=False, index=True) # waiting, active, voting, completed
    current_round_number = Column(Integer, default=0, nullable=False)
    current_prompt = Column(Text, default="", nullable=False)
    rounds_completed = Column(Integer, default=0, nullable=False)
    rounds_target = Column(Integer, default=3, nullable=False)
    scored_round_numbers = Column(JSON, default=list, nullable=False)
    players = Column(JSON, default=list, nullable=False) # List of SessionPlayer dicts, join order
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
