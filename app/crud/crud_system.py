# app/crud/crud_system.py
import logging
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.schemas.system import SystemAlert
from typing import List, Tuple

logger = logging.getLogger("app.crud.system")

def create_alert(db: Session, level: str, message: str, details: str = None) -> SystemAlert | None:
    """Creates a new system alert record."""
    try:
        alert = SystemAlert(level=level, message=message, details=details)
        db.add(alert)
        db.commit()
        db.refresh(alert)
        return alert
    except Exception as e:
        # If logging to DB fails, we must fall back to standard logging
        logger.critical(f"CRITICAL: FAILED TO LOG ALERT TO DATABASE: {e}")
        logger.critical(f"Original Alert: [{level}] {message} | Details: {details}")
        db.rollback()
        return None

def get_latest_alerts(db: Session, limit: int = 50) -> List[SystemAlert]:
    """Retrieves the most recent system alerts."""
    return db.query(SystemAlert).order_by(SystemAlert.timestamp.desc(), SystemAlert.id.desc()).limit(limit).all()

def get_frequent_alert_messages(db: Session, limit: int = 10) -> List[Tuple[str, int]]:
    return (
        db.query(SystemAlert.message, func.count(SystemAlert.id))
        .group_by(SystemAlert.message)
        .order_by(func.count(SystemAlert.id).desc())
        .limit(limit)
        .all()
    )
