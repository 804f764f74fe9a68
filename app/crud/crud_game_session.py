# app/crud/crud_game_session.py
import datetime
import logging
from typing import Callable, Dict, Tuple, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.errors import ConcurrentUpdateError, NotFoundError
from app.schemas.game_session import GameSession

logger = logging.getLogger("app.crud.game_session")

T = TypeVar("T")

def create_session_record(
    db: Session,
    session_id: str,
    code: str,
    host_id: str,
    players: list,
    rounds_target: int,
    created_at: datetime.datetime,
    expires_at: datetime.datetime,
) -> GameSession:
    db_session = GameSession(
        id=session_id,
        code=code,
        host_id=host_id,
        phase="waiting",
        current_round_number=0,
        current_prompt="",
        rounds_completed=0,
        rounds_target=rounds_target,
        scored_round_numbers=[],
        players=players,
        created_at=created_at,
        expires_at=expires_at,
    )
    db.add(db_session)
    db.commit()
    db.refresh(db_session)
    return db_session

def get_session(db: Session, session_id: str) -> GameSession | None:
    return db.query(GameSession).filter(GameSession.id == session_id).first()

def get_latest_session_by_code(db: Session, code: str) -> GameSession | None:
    """Codes may be reused once a session is finished or expired; the newest one wins."""
    return (
        db.query(GameSession)
        .filter(GameSession.code == code)
        .order_by(GameSession.created_at.desc())
        .first()
    )

def is_code_live(db: Session, code: str, now: datetime.datetime) -> bool:
    """True if a not-yet-completed, not-yet-expired session already uses this code."""
    return db.query(GameSession.id).filter(
        GameSession.code == code,
        GameSession.phase != "completed",
        GameSession.expires_at > now,
    ).first() is not None

def count_sessions_by_phase(db: Session) -> Dict[str, int]:
    rows = db.query(GameSession.phase, func.count(GameSession.id)).group_by(GameSession.phase).all()
    return {phase: count for phase, count in rows}

def update_session_atomically(
    db: Session,
    session_id: str,
    mutate: Callable[[GameSession], T],
    max_attempts: int | None = None,
) -> Tuple[GameSession, T]:
    """
    Runs read -> mutate -> conditional write on one session row.

    The UPDATE only matches if the row still has the version that was read, so two
    clients racing on the same session cannot overwrite each other's players list or
    scored rounds. On a lost race the transaction is rolled back and `mutate` runs
    again against the fresh row. `mutate` may raise a GameError to reject the
    operation; nothing is written in that case.
    """
    attempts = max_attempts or settings.SESSION_WRITE_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        db_session = (
            db.query(GameSession)
            .populate_existing()
            .filter(GameSession.id == session_id)
            .first()
        )
        if db_session is None:
            raise NotFoundError("Session not found")
        try:
            result = mutate(db_session)
            db.commit()
        except StaleDataError:
            db.rollback()
            logger.warning(f"S:{session_id} - Concurrent update detected (attempt {attempt}/{attempts}). Retrying.")
            continue
        except Exception:
            db.rollback()
            raise
        db.refresh(db_session)
        return db_session, result

    logger.error(f"S:{session_id} - Gave up after {attempts} contended update attempts.")
    raise ConcurrentUpdateError()
