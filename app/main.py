# app/main.py
# Start the Postgres server using docker run -d --name sketch_party_db -e POSTGRES_USER=backend -e POSTGRES_PASSWORD=password -e POSTGRES_DB=sketch_party_db -p 5432:5432 -v pgdata:/var/lib/postgresql/data postgres:15
# Start backend using uvicorn app.main:app --reload --host 0.0.0.0
import logging
import logging.config
import logging.handlers
import json
import pathlib
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute, APIWebSocketRoute
from app.core.config import settings
from app.core.errors import GameError
from app.api import monitoring as monitoring_router
from app.api import prompts as prompts_router
from app.api import sessions as sessions_router
from app.api import submissions as submissions_router
from app.api import votes as votes_router
from app.api import websockets as websocket_router
from app.crud import crud_system
from app.db.base import Base # For initial table creation if not using Alembic
from app.db.session import SessionLocal, engine

_queue_handler_instance: Optional[logging.handlers.QueueHandler] = None # Module-level variable
api_stats = {"total_requests": 0, "errors_5xx": 0}

async def metrics_middleware(request: Request, call_next):
    api_stats["total_requests"] += 1
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            api_stats["errors_5xx"] += 1
        return response
    except Exception as e:
        api_stats["errors_5xx"] += 1
        # Log this severe error to the DB
        db = SessionLocal()
        try:
            crud_system.create_alert(db, "CRITICAL", "Unhandled Exception in Middleware", f"{request.method} {request.url.path}: {e}")
        except Exception as alert_e:
            logger.critical(f"FATAL: Could not log unhandled exception to DB: {alert_e}")
        finally:
            db.close()
        raise e

LOGGING_CONFIG_FILE = pathlib.Path(__file__).parent / "logging_config.json"
FALLBACK_LOG_FORMAT = '%(levelname)-8s [%(name)s] %(message)s'

def _fall_back_to_stdout(reason: str):
    print(f"ERROR: {reason}. Falling back to basic stdout logging.")
    logging.basicConfig(level=logging.INFO, format=FALLBACK_LOG_FORMAT)

def configure_logging_from_file(config_file: pathlib.Path = LOGGING_CONFIG_FILE):
    """
    Applies logging_config.json. Every handler sits behind one QueueHandler so that
    slow sinks (the alerts table, the rotating file) never block a request; the
    listener draining that queue is started and stopped by the lifespan.
    """
    global _queue_handler_instance
    try:
        config = json.loads(config_file.read_text())
        pathlib.Path("logs").mkdir(exist_ok=True) # RotatingFileHandler does not create it
        logging.config.dictConfig(config)
    except FileNotFoundError:
        _fall_back_to_stdout(f"Logging configuration file not found at {config_file}")
        return
    except json.JSONDecodeError as e:
        _fall_back_to_stdout(f"Failed to parse logging configuration file {config_file}: {e}")
        return
    except Exception as e:
        _fall_back_to_stdout(f"Failed to configure logging from file: {e}")
        return

    _queue_handler_instance = next(
        (h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.QueueHandler)),
        None,
    )
    if not _queue_handler_instance:
        logging.getLogger("app.main.logging_setup_check").error(
            "QueueHandler not found in root logger. Off-thread logging will not work as intended."
        )


# Configure logging when the module is loaded. Listener is started/stopped by lifespan.
configure_logging_from_file()
logger = logging.getLogger("app.main") # Logger for this module

# With Alembic in place this is only a safety net for fresh development databases
def create_tables():
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup sequence initiated...")
    if _queue_handler_instance and hasattr(_queue_handler_instance, 'listener'):
        try:
            _queue_handler_instance.listener.start()
            logger.info("Logging QueueListener started successfully via lifespan.")
        except Exception as e:
            logger.error(f"Failed to start QueueListener in lifespan: {e}", exc_info=True)
    else:
        logger.warning("QueueHandler or its listener not found during startup; off-thread logging might not be active.")

    create_tables()
    logger.info("Database tables checked/created.")

    yield  # This is where the application will run

    logger.info("Application shutdown sequence initiated...")
    if _queue_handler_instance and hasattr(_queue_handler_instance, 'listener'):
        try:
            logger.info("Attempting to stop Logging QueueListener...")
            _queue_handler_instance.listener.stop()
        except Exception as e:
            print(f"ERROR: Failed to stop QueueListener gracefully in lifespan: {e}")

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)
app.middleware("http")(metrics_middleware)  # Add the metrics middleware

@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    # Rule violations are expected traffic; services already logged them at WARNING
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

# Include Routers
app.include_router(sessions_router.router, prefix=settings.API_V1_STR, tags=["Sessions"])
app.include_router(submissions_router.router, prefix=settings.API_V1_STR, tags=["Submissions"])
app.include_router(votes_router.router, prefix=settings.API_V1_STR, tags=["Votes & Scoring"])
app.include_router(prompts_router.router, prefix=settings.API_V1_STR, tags=["Prompts"])
app.include_router(monitoring_router.router, prefix=settings.API_V1_STR + "/monitoring", tags=["Monitoring"])
app.include_router(websocket_router.router, tags=["Session Sockets"]) # WebSockets usually don't have API prefix

logger.info("--- FastAPI Registered Routes ---")
for route in app.routes:
    if isinstance(route, APIRoute):
        logger.info(f"Path: {route.path}, Methods: {route.methods}, Name: {route.name}")
    elif isinstance(route, APIWebSocketRoute):
        logger.info(f"WebSocket Path: {route.path}, Name: {route.name}")
logger.info("--- End Registered Routes ---")


@app.get(settings.API_V1_STR + "/health", tags=["Health Check"])
async def health_check():
    return {"status": "healthy", "project": settings.PROJECT_NAME}

# For development with uvicorn: uvicorn app.main:app --reload
