from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

class LiveStats(BaseModel):
    sessions_waiting: int
    sessions_active: int
    sessions_voting: int
    sessions_completed: int
    concurrent_websockets: int
    total_requests: int
    errors_5xx: int

class SystemAlertPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    level: str
    message: str
    details: Optional[str] = None

class FrequentError(BaseModel):
    message: str
    count: int

class MonitoringDataResponse(BaseModel):
    live_stats: LiveStats
    alerts: List[SystemAlertPublic]
    frequent_errors: List[FrequentError]
