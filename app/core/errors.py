# app/core/errors.py
from fastapi import status


class GameError(Exception):
    """Base class for every rule violation raised by the session, submission and scoring services."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Game rule violation"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(GameError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidPhaseError(GameError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Operation not allowed in the current session phase"


class ExpiredError(GameError):
    status_code = status.HTTP_410_GONE
    default_message = "Session has expired"


class InsufficientPlayersError(GameError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Need at least 2 players to start"


class DuplicateVoteError(GameError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Player has already voted in this round"


class SelfVoteError(GameError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Cannot vote for your own submission"


class DuplicateSubmissionError(GameError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Player has already submitted for this round"


class InvalidStatusTransitionError(GameError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Invalid video status transition"


class ConcurrentUpdateError(GameError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Session is being updated by other players, please retry"


class SessionCodeUnavailableError(GameError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Could not allocate a free session code, please retry"
