# app/schemas/prompt.py
from sqlalchemy import Column, String, Integer, Text
from app.db.base_class import Base

class DrawingPrompt(Base):
    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False, unique=True) # e.g. "A kid jumping all the way to the moon"
    category = Column(String, default="general", nullable=False)
    difficulty = Column(String(8), default="medium", nullable=False) # easy, medium, hard
