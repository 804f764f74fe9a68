# tests/conftest.py
import os

# Must be set before app.core.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
import logging
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app, api_stats
from app.db.base import Base
from app.api.deps import get_db

SQLALCHEMY_DATABASE_URL_TEST = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL_TEST,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    """Routes every request onto the in-memory test engine."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(scope="function")
def db_session():
    """
    Fresh tables for every test. The services commit and roll back on their own
    (the versioned session writes retry after a rollback), so tests cannot be
    wrapped in one outer transaction.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def session_factory():
    """Opens extra sessions on the test database, e.g. to play a second client."""
    return TestingSessionLocal

@pytest.fixture(scope="function")
def client(db_session, mocker) -> TestClient:
    """TestClient bound to the fresh tables of db_session."""
    # The websocket route opens its own DB session
    mocker.patch("app.api.websockets.SessionLocal", TestingSessionLocal)
    return TestClient(app)

@pytest.fixture(autouse=True)
def reset_in_memory_state():
    """Websocket watchers and request counters live in module globals."""
    from app.api.websockets import session_manager

    session_manager.active_connections.clear()
    api_stats["total_requests"] = 0
    api_stats["errors_5xx"] = 0
    yield

def pytest_configure(config):
    # Keep the transport libraries quiet in test output
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
