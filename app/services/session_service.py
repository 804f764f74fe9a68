# app/services/session_service.py
import datetime
import logging
import random
import uuid
from typing import Dict, List, Set

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    ExpiredError,
    InsufficientPlayersError,
    InvalidPhaseError,
    NotFoundError,
    SessionCodeUnavailableError,
)
from app.crud import crud_game_session, crud_prompt
from app.models.enums import SessionPhase
from app.models.session import SessionPlayer
from app.schemas.game_session import GameSession

logger = logging.getLogger("app.services.session_service")  # Logger for this module

# Central transition table: operation -> {current phase -> phases it may move to}.
# Any (operation, current, target) combination not listed is rejected with InvalidPhaseError.
PHASE_TRANSITIONS: Dict[str, Dict[SessionPhase, Set[SessionPhase]]] = {
    "start_game": {
        SessionPhase.WAITING: {SessionPhase.ACTIVE},
    },
    "advance_round": {
        SessionPhase.WAITING: {SessionPhase.ACTIVE},
        SessionPhase.ACTIVE: {SessionPhase.ACTIVE},
    },
    "begin_voting": {
        SessionPhase.ACTIVE: {SessionPhase.VOTING},
    },
    "complete_round": {
        SessionPhase.WAITING: {SessionPhase.WAITING, SessionPhase.COMPLETED},
        SessionPhase.ACTIVE: {SessionPhase.WAITING, SessionPhase.COMPLETED},
        SessionPhase.VOTING: {SessionPhase.WAITING, SessionPhase.COMPLETED},
    },
    "end_game": {
        SessionPhase.WAITING: {SessionPhase.COMPLETED},
        SessionPhase.ACTIVE: {SessionPhase.COMPLETED},
        SessionPhase.VOTING: {SessionPhase.COMPLETED},
    },
}


def ensure_transition(operation: str, current: SessionPhase, target: SessionPhase) -> None:
    if target not in PHASE_TRANSITIONS[operation].get(current, set()):
        raise InvalidPhaseError(f"Cannot {operation.replace('_', ' ')} while session is '{current.value}'")


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def is_expired(db_session: GameSession, now: datetime.datetime | None = None) -> bool:
    return (now or utc_now()) >= as_utc(db_session.expires_at)


def load_players(db_session: GameSession) -> List[SessionPlayer]:
    return [SessionPlayer.model_validate(p) for p in (db_session.players or [])]


def dump_players(players: List[SessionPlayer]) -> list:
    # Always a fresh list so the JSON column is written back whole
    return [p.model_dump(mode="json") for p in players]


def generate_session_code() -> str:
    return "".join(random.choices(settings.SESSION_CODE_ALPHABET, k=settings.SESSION_CODE_LENGTH))


def _generate_unique_code(db: Session, now: datetime.datetime) -> str:
    for _ in range(settings.SESSION_CODE_MAX_ATTEMPTS):
        code = generate_session_code()
        if not crud_game_session.is_code_live(db, code, now):
            return code
        logger.warning(f"Generated session code {code} collides with a live session. Regenerating.")
    logger.error(f"No free session code after {settings.SESSION_CODE_MAX_ATTEMPTS} attempts.")
    raise SessionCodeUnavailableError()


def pick_round_prompt(db: Session) -> str:
    """Random prompt from the catalog table, or from the static fallback list when the table is empty."""
    db_prompt = crud_prompt.get_random_prompt(db)
    if db_prompt:
        return db_prompt.text
    logger.debug("Prompt catalog is empty, using fallback prompts.")
    return random.choice(settings.FALLBACK_PROMPTS)


def create_session(db: Session, host_id: str, host_nickname: str, rounds_target: int | None = None) -> GameSession:
    now = utc_now()
    code = _generate_unique_code(db, now)
    host = SessionPlayer(
        user_id=host_id,
        nickname=host_nickname,
        is_host=True,
        is_ready=False,
        joined_at=now,
    )
    db_session = crud_game_session.create_session_record(
        db,
        session_id=uuid.uuid4().hex,
        code=code,
        host_id=host_id,
        players=dump_players([host]),
        rounds_target=rounds_target or settings.DEFAULT_ROUNDS_TARGET,
        created_at=now,
        expires_at=now + datetime.timedelta(hours=settings.SESSION_TTL_HOURS),
    )
    logger.info(f"S:{db_session.id} - Created by host '{host_id}' with code {code} ({db_session.rounds_target} rounds).")
    return db_session


def require_session(db: Session, session_id: str) -> GameSession:
    """Session by id regardless of expiry. Raises NotFoundError if it does not exist."""
    db_session = crud_game_session.get_session(db, session_id)
    if not db_session:
        raise NotFoundError("Session not found")
    return db_session


def get_session(db: Session, session_id: str) -> GameSession:
    """Session lookup for clients. Expired sessions are reported as not found."""
    db_session = require_session(db, session_id)
    if is_expired(db_session):
        raise NotFoundError("Session not found")
    return db_session


def get_session_by_code(db: Session, code: str) -> GameSession:
    db_session = crud_game_session.get_latest_session_by_code(db, code.upper())
    if not db_session or is_expired(db_session):
        raise NotFoundError("Session not found")
    return db_session


def join_session(db: Session, code: str, player_id: str, nickname: str) -> GameSession:
    db_session = crud_game_session.get_latest_session_by_code(db, code.upper())
    if not db_session:
        logger.warning(f"Join rejected for player '{player_id}': no session with code {code}.")
        raise NotFoundError("Session not found")

    def _join(row: GameSession) -> bool:
        if SessionPhase(row.phase) != SessionPhase.WAITING:
            raise InvalidPhaseError("Session is no longer accepting new players")
        if is_expired(row):
            raise ExpiredError()
        players = load_players(row)
        if any(p.user_id == player_id for p in players):
            return False  # Reconnect or retried request
        players.append(SessionPlayer(user_id=player_id, nickname=nickname, joined_at=utc_now()))
        row.players = dump_players(players)
        return True

    try:
        db_session, joined = crud_game_session.update_session_atomically(db, db_session.id, _join)
    except (InvalidPhaseError, ExpiredError) as e:
        logger.warning(f"S:{db_session.id} - Join rejected for player '{player_id}': {e.message}")
        raise
    if joined:
        logger.info(f"S:{db_session.id} - Player '{player_id}' ({nickname}) joined. Players: {len(db_session.players)}")
    else:
        logger.debug(f"S:{db_session.id} - Player '{player_id}' already in session, join is a no-op.")
    return db_session


def set_player_ready(db: Session, session_id: str, player_id: str, is_ready: bool) -> GameSession:
    def _set_ready(row: GameSession) -> bool:
        players = load_players(row)
        found = False
        for player in players:
            if player.user_id == player_id:
                player.is_ready = is_ready
                found = True
        if found:
            row.players = dump_players(players)
        return found

    db_session, found = crud_game_session.update_session_atomically(db, session_id, _set_ready)
    if not found:
        logger.warning(f"S:{session_id} - Ready flag ignored for unknown player '{player_id}'.")
    return db_session


def start_game(db: Session, session_id: str) -> GameSession:
    # Ready gating is left to the lobby UI; only the player count is enforced here.
    prompt = pick_round_prompt(db)

    def _start(row: GameSession) -> None:
        ensure_transition("start_game", SessionPhase(row.phase), SessionPhase.ACTIVE)
        if row.current_round_number != 0:
            raise InvalidPhaseError("Game has already started, use next round instead")
        if len(row.players or []) < settings.MIN_PLAYERS_TO_START:
            raise InsufficientPlayersError(f"Need at least {settings.MIN_PLAYERS_TO_START} players to start")
        row.phase = SessionPhase.ACTIVE.value
        row.current_round_number = 1
        row.current_prompt = prompt

    db_session, _ = crud_game_session.update_session_atomically(db, session_id, _start)
    logger.info(f"S:{session_id} - Game started with {len(db_session.players)} players. Prompt: '{prompt}'")
    return db_session


def advance_round(db: Session, session_id: str) -> GameSession:
    """Starts the next drawing round. Scores and rounds_completed are left to complete_round()."""
    prompt = pick_round_prompt(db)

    def _advance(row: GameSession) -> None:
        ensure_transition("advance_round", SessionPhase(row.phase), SessionPhase.ACTIVE)
        if row.current_round_number == 0:
            raise InvalidPhaseError("Game has not started yet")
        row.phase = SessionPhase.ACTIVE.value
        row.current_round_number = row.current_round_number + 1
        row.current_prompt = prompt

    db_session, _ = crud_game_session.update_session_atomically(db, session_id, _advance)
    logger.info(f"S:{session_id} - Round {db_session.current_round_number} started. Prompt: '{prompt}'")
    return db_session


def begin_voting(db: Session, session_id: str) -> GameSession:
    def _begin(row: GameSession) -> None:
        ensure_transition("begin_voting", SessionPhase(row.phase), SessionPhase.VOTING)
        row.phase = SessionPhase.VOTING.value

    db_session, _ = crud_game_session.update_session_atomically(db, session_id, _begin)
    logger.info(f"S:{session_id} - Voting opened for round {db_session.current_round_number}.")
    return db_session


def complete_round(db: Session, session_id: str, round_winner_id: str) -> GameSession:
    """
    Records the round win and closes the round. Points were already applied by
    scoring_service.calculate_round_scores(). Back-to-back calls without
    advance_round() in between are allowed once the game has started.
    """
    def _complete(row: GameSession) -> bool:
        rounds_completed = row.rounds_completed + 1
        target_phase = SessionPhase.COMPLETED if rounds_completed >= row.rounds_target else SessionPhase.WAITING
        ensure_transition("complete_round", SessionPhase(row.phase), target_phase)
        if row.current_round_number == 0:
            raise InvalidPhaseError("Game has not started yet")

        players = load_players(row)
        winner_found = False
        for player in players:
            if player.user_id == round_winner_id:
                player.round_wins += 1
                winner_found = True
        row.players = dump_players(players)
        row.rounds_completed = rounds_completed
        row.phase = target_phase.value
        return winner_found

    db_session, winner_found = crud_game_session.update_session_atomically(db, session_id, _complete)
    if not winner_found:
        logger.warning(f"S:{session_id} - Round winner '{round_winner_id}' is not a player; no round win recorded.")
    logger.info(
        f"S:{session_id} - Round closed ({db_session.rounds_completed}/{db_session.rounds_target}). "
        f"Winner: {round_winner_id}. Phase: {db_session.phase}"
    )
    return db_session


def end_game(db: Session, session_id: str) -> GameSession:
    def _end(row: GameSession) -> bool:
        if SessionPhase(row.phase) == SessionPhase.COMPLETED:
            return False
        ensure_transition("end_game", SessionPhase(row.phase), SessionPhase.COMPLETED)
        row.phase = SessionPhase.COMPLETED.value
        return True

    db_session, ended = crud_game_session.update_session_atomically(db, session_id, _end)
    if ended:
        logger.info(f"S:{session_id} - Game ended by host after {db_session.rounds_completed} round(s).")
    return db_session
