# tests/crud/test_crud_game_session.py
import datetime
import pytest
from sqlalchemy.orm import Session

from app.core.errors import ConcurrentUpdateError, InvalidPhaseError, NotFoundError
from app.crud import crud_game_session

NOW = datetime.datetime(2026, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)

def _create_row(db: Session, session_id: str = "s1", code: str = "ABC123", created_at=NOW, expires_at=None):
    return crud_game_session.create_session_record(
        db,
        session_id=session_id,
        code=code,
        host_id="host",
        players=[],
        rounds_target=3,
        created_at=created_at,
        expires_at=expires_at or created_at + datetime.timedelta(hours=2),
    )

def test_create_session_record_starts_at_version_one(db_session: Session):
    row = _create_row(db_session)
    assert row.version == 1
    assert row.phase == "waiting"
    assert row.current_round_number == 0
    assert row.scored_round_numbers == []

def test_get_latest_session_by_code_prefers_newest(db_session: Session):
    _create_row(db_session, "old", created_at=NOW - datetime.timedelta(hours=5))
    _create_row(db_session, "new", created_at=NOW)
    assert crud_game_session.get_latest_session_by_code(db_session, "ABC123").id == "new"
    assert crud_game_session.get_latest_session_by_code(db_session, "ZZZ999") is None

def test_is_code_live_ignores_expired_and_completed(db_session: Session):
    row = _create_row(db_session, created_at=NOW)
    assert crud_game_session.is_code_live(db_session, "ABC123", NOW)
    assert not crud_game_session.is_code_live(db_session, "ABC123", NOW + datetime.timedelta(hours=3))

    row.phase = "completed"
    db_session.commit()
    assert not crud_game_session.is_code_live(db_session, "ABC123", NOW)

def test_update_session_atomically_applies_mutation(db_session: Session):
    _create_row(db_session)
    row, result = crud_game_session.update_session_atomically(db_session, "s1", lambda r: setattr(r, "current_prompt", "A cat") or "ok")
    assert result == "ok"
    assert row.current_prompt == "A cat"
    assert row.version == 2

def test_update_session_atomically_missing_session(db_session: Session):
    with pytest.raises(NotFoundError):
        crud_game_session.update_session_atomically(db_session, "nope", lambda r: None)

def test_update_session_atomically_rejection_writes_nothing(db_session: Session):
    _create_row(db_session)

    def _reject(row):
        row.current_prompt = "should not persist"
        raise InvalidPhaseError()

    with pytest.raises(InvalidPhaseError):
        crud_game_session.update_session_atomically(db_session, "s1", _reject)

    fresh = crud_game_session.get_session(db_session, "s1")
    db_session.refresh(fresh)
    assert fresh.current_prompt == ""
    assert fresh.version == 1

def test_update_session_atomically_retries_after_lost_race(db_session: Session, session_factory):
    _create_row(db_session)
    seen_versions = []

    def _mutate(row):
        seen_versions.append(row.version)
        if len(seen_versions) == 1:
            # Another client writes the same row between our read and our write
            other = session_factory()
            try:
                crud_game_session.update_session_atomically(other, "s1", lambda r: setattr(r, "current_prompt", "other writer"))
            finally:
                other.close()
        row.rounds_target = 7
        return len(seen_versions)

    row, attempts = crud_game_session.update_session_atomically(db_session, "s1", _mutate)

    assert attempts == 2
    assert seen_versions == [1, 2]
    assert row.rounds_target == 7
    assert row.current_prompt == "other writer" # Not clobbered by the retry
    assert row.version == 3

def test_update_session_atomically_gives_up(db_session: Session, session_factory):
    _create_row(db_session)

    def _always_loses(row):
        other = session_factory()
        try:
            crud_game_session.update_session_atomically(other, "s1", lambda r: setattr(r, "current_prompt", f"v{r.version}"))
        finally:
            other.close()
        row.rounds_target = 9

    with pytest.raises(ConcurrentUpdateError):
        crud_game_session.update_session_atomically(db_session, "s1", _always_loses, max_attempts=2)

    fresh = crud_game_session.get_session(db_session, "s1")
    db_session.refresh(fresh)
    assert fresh.rounds_target == 3

def test_count_sessions_by_phase(db_session: Session):
    _create_row(db_session, "a", code="AAAAAA")
    _create_row(db_session, "b", code="BBBBBB")
    row = _create_row(db_session, "c", code="CCCCCC")
    row.phase = "active"
    db_session.commit()
    assert crud_game_session.count_sessions_by_phase(db_session) == {"waiting": 2, "active": 1}
