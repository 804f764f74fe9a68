# app/db/base.py
# Import all the models, so that Base has them before being
# imported by Alembic
from app.db.base_class import Base
from app.schemas.game_session import GameSession
from app.schemas.submission import GameSubmission
from app.schemas.vote import GameVote
from app.schemas.prompt import DrawingPrompt
from app.schemas.system import SystemAlert
