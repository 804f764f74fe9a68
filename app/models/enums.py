from enum import Enum

class SessionPhase(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    VOTING = "voting"
    COMPLETED = "completed"

class VideoStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

class PromptDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
