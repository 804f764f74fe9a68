# app/crud/crud_prompt.py
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import func
from app.schemas.prompt import DrawingPrompt

def get_random_prompt(db: Session) -> DrawingPrompt | None:
    return db.query(DrawingPrompt).order_by(func.random()).first()

def get_prompt_by_text(db: Session, text: str) -> DrawingPrompt | None:
    return db.query(DrawingPrompt).filter(func.lower(DrawingPrompt.text) == text.strip().lower()).first()

def create_prompt(db: Session, text: str, category: str = "general", difficulty: str = "medium") -> DrawingPrompt:
    db_item = DrawingPrompt(text=text.strip(), category=category, difficulty=difficulty)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item
