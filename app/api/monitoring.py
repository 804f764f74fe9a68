# app/api/monitoring.py
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api import deps
from app.api.websockets import session_manager
from app.core.config import settings
from app.crud import crud_game_session, crud_system
from app.models.enums import SessionPhase
from app.models.monitoring import FrequentError, LiveStats, MonitoringDataResponse, SystemAlertPublic

logger = logging.getLogger("app.api.monitoring")
router = APIRouter()

@router.get("/data", response_model=MonitoringDataResponse)
async def get_monitoring_data(db: Session = Depends(deps.get_db)):
    """
    Live counters plus the most recent alerts written by the database log handler.
    """
    from app.main import api_stats # main imports this router

    phase_counts = crud_game_session.count_sessions_by_phase(db)
    live_stats = LiveStats(
        sessions_waiting=phase_counts.get(SessionPhase.WAITING.value, 0),
        sessions_active=phase_counts.get(SessionPhase.ACTIVE.value, 0),
        sessions_voting=phase_counts.get(SessionPhase.VOTING.value, 0),
        sessions_completed=phase_counts.get(SessionPhase.COMPLETED.value, 0),
        concurrent_websockets=session_manager.connection_count(),
        total_requests=api_stats["total_requests"],
        errors_5xx=api_stats["errors_5xx"],
    )

    frequent_errors = [
        FrequentError(message=msg, count=count)
        for msg, count in crud_system.get_frequent_alert_messages(db, limit=10)
    ]
    alerts = [SystemAlertPublic.model_validate(a) for a in crud_system.get_latest_alerts(db, limit=settings.MONITORING_ALERTS_LIMIT)]

    return MonitoringDataResponse(
        live_stats=live_stats,
        alerts=alerts,
        frequent_errors=frequent_errors,
    )
