# app/services/scoring_service.py
import logging
from typing import Dict, List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateVoteError, NotFoundError, SelfVoteError
from app.crud import crud_game_session, crud_submission, crud_vote
from app.models.session import LeaderboardEntry
from app.models.submission import RoundProgress
from app.models.vote import RoundScoreResult, RoundWinner
from app.schemas.game_session import GameSession
from app.schemas.submission import GameSubmission
from app.schemas.vote import GameVote
from app.services import session_service

logger = logging.getLogger("app.services.scoring_service")

# Points by rank within a round: 1st, 2nd, 3rd. Everything below gets nothing.
POINTS_BY_RANK: Tuple[int, ...] = (3, 2, 1)


def points_for_rank(index: int) -> int:
    """`index` is 0-based."""
    return POINTS_BY_RANK[index] if index < len(POINTS_BY_RANK) else 0


def cast_vote(db: Session, session_id: str, voter_id: str, submission_id: int, round_number: int) -> GameVote:
    """
    Records one vote. Checks run in order: session exists, voter has not voted this
    round, submission exists in this session and round, voter is not the author.
    A submission from another session or round is reported as NotFoundError (404),
    the same as an unknown submission id.
    """
    session_service.require_session(db, session_id)

    if crud_vote.get_voter_vote(db, session_id, voter_id, round_number):
        logger.warning(f"S:{session_id} R:{round_number} - Second vote from '{voter_id}' rejected.")
        raise DuplicateVoteError()

    db_submission = crud_submission.get_submission(db, submission_id)
    if (
        not db_submission
        or db_submission.session_id != session_id
        or db_submission.round_number != round_number
    ):
        raise NotFoundError("Submission not found in this round")

    if db_submission.player_id == voter_id:
        logger.warning(f"S:{session_id} R:{round_number} - Self vote from '{voter_id}' rejected.")
        raise SelfVoteError()

    try:
        db_vote = crud_vote.create_vote(db, session_id, voter_id, submission_id, round_number)
    except IntegrityError:
        db.rollback()
        logger.warning(f"S:{session_id} R:{round_number} - Concurrent second vote from '{voter_id}' rejected.")
        raise DuplicateVoteError()

    logger.info(f"S:{session_id} R:{round_number} - '{voter_id}' voted for submission {submission_id}.")
    return db_vote


def get_player_vote(db: Session, session_id: str, voter_id: str, round_number: int) -> GameVote | None:
    return crud_vote.get_voter_vote(db, session_id, voter_id, round_number)


def get_vote_results(db: Session, session_id: str, round_number: int) -> Dict[int, int]:
    """submission_id -> votes. Submissions without votes are not in the map."""
    session_service.require_session(db, session_id)
    return crud_vote.tally_votes(db, session_id, round_number)


def rank_submissions(
    vote_counts: Dict[int, int],
    submissions: List[GameSubmission],
    player_order: List[str],
) -> List[int]:
    """
    Orders the voted-for submission ids from first place down.

    Equal vote counts are decided by the earlier submission, then by the author's
    join order, then by submission id, so every caller computes the same ranking.
    """
    by_id = {s.id: s for s in submissions}
    join_index = {user_id: i for i, user_id in enumerate(player_order)}

    def _key(submission_id: int):
        db_submission = by_id.get(submission_id)
        if db_submission is None:
            return (-vote_counts[submission_id], float("inf"), len(join_index), submission_id)
        return (
            -vote_counts[submission_id],
            session_service.as_utc(db_submission.submitted_at).timestamp(),
            join_index.get(db_submission.player_id, len(join_index)),
            submission_id,
        )

    return sorted(vote_counts, key=_key)


def calculate_round_scores(db: Session, session_id: str, round_number: int) -> RoundScoreResult:
    """
    Applies the round's points to the players exactly once.

    Any client may trigger this when it sees the last vote arrive. The scored-round
    guard, the score update and the append to scored_round_numbers happen in one
    versioned write, so a caller that loses the race re-reads the session, sees the
    round already scored and returns `already_calculated` without touching scores.
    """
    def _score(row: GameSession) -> RoundScoreResult:
        if round_number in (row.scored_round_numbers or []):
            return RoundScoreResult(round_number=round_number, already_calculated=True)

        vote_counts = crud_vote.tally_votes(db, session_id, round_number)
        submissions = crud_submission.get_submissions_for_round(db, session_id, round_number)
        players = session_service.load_players(row)

        ranking = rank_submissions(vote_counts, submissions, [p.user_id for p in players])
        points_awarded = {submission_id: points_for_rank(i) for i, submission_id in enumerate(ranking)}

        # First submission per player; there is only ever one per round
        submission_by_player: Dict[str, int] = {}
        for db_submission in submissions:
            submission_by_player.setdefault(db_submission.player_id, db_submission.id)

        for player in players:
            submission_id = submission_by_player.get(player.user_id)
            if submission_id is not None:
                player.cumulative_score += points_awarded.get(submission_id, 0)

        row.players = session_service.dump_players(players)
        row.scored_round_numbers = list(row.scored_round_numbers or []) + [round_number]
        return RoundScoreResult(
            round_number=round_number,
            vote_counts=vote_counts,
            points_awarded=points_awarded,
            updated_players=players,
        )

    _, result = crud_game_session.update_session_atomically(db, session_id, _score)
    if result.already_calculated:
        logger.info(f"S:{session_id} R:{round_number} - Scores already calculated, skipping.")
    else:
        logger.info(
            f"S:{session_id} R:{round_number} - Scored {sum(result.vote_counts.values())} votes. "
            f"Points: {result.points_awarded}"
        )
    return result


def get_round_winner(db: Session, session_id: str, round_number: int) -> RoundWinner | None:
    db_session = session_service.require_session(db, session_id)
    vote_counts = crud_vote.tally_votes(db, session_id, round_number)
    if not vote_counts:
        return None

    submissions = crud_submission.get_submissions_for_round(db, session_id, round_number)
    player_order = [p.user_id for p in session_service.load_players(db_session)]
    winning_id = rank_submissions(vote_counts, submissions, player_order)[0]

    db_submission = next((s for s in submissions if s.id == winning_id), None)
    if db_submission is None:
        db_submission = crud_submission.get_submission(db, winning_id)
    if db_submission is None:
        logger.error(f"S:{session_id} R:{round_number} - Winning submission {winning_id} has votes but no record.")
        return None

    return RoundWinner(
        player_id=db_submission.player_id,
        vote_count=vote_counts[winning_id],
        submission_id=winning_id,
    )


def get_round_leaderboard(db: Session, session_id: str) -> List[LeaderboardEntry]:
    # Equal scores keep join order and still get distinct ranks
    db_session = session_service.require_session(db, session_id)
    players = sorted(session_service.load_players(db_session), key=lambda p: -p.cumulative_score)
    return [LeaderboardEntry(**p.model_dump(), rank=i + 1) for i, p in enumerate(players)]


def get_voting_progress(db: Session, session_id: str, round_number: int) -> RoundProgress:
    db_session = session_service.require_session(db, session_id)
    return RoundProgress(
        round_number=round_number,
        completed_count=crud_vote.count_votes_for_round(db, session_id, round_number),
        player_count=len(db_session.players or []),
    )
