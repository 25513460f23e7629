"""Shared fixtures: in-memory database, API clients and signed-in owners."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.database import get_db
from app.main import create_app
from app.models import Base
from app.services.session_store import InMemorySessionStore

OWNER_ID = 1
PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def fast_password_hashes(monkeypatch):
    """Lowest bcrypt work factor so signups stay quick."""
    monkeypatch.setattr(get_settings(), "password_hash_rounds", 4)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create in-memory SQLite database for testing."""
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def owner_id() -> int:
    return OWNER_ID


@pytest.fixture
def session_store():
    return InMemorySessionStore(ttl=timedelta(hours=1))


def make_client(db_session, session_store) -> TestClient:
    app = create_app(session_store=session_store)
    app.dependency_overrides[get_db] = lambda: db_session
    return TestClient(app)


def sign_up(client: TestClient, username: str) -> dict:
    response = client.post(
        "/users",
        json={"username": username, "password": PASSWORD, "confirm_password": PASSWORD},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def anonymous_client(db_session, session_store):
    """API client with no session cookie."""
    return make_client(db_session, session_store)


@pytest.fixture
def client(anonymous_client, owner_id):
    """API client signed up and signed in as the test owner."""
    user = sign_up(anonymous_client, "alice")
    assert user["id"] == owner_id
    return anonymous_client


@pytest.fixture
def other_client(client, db_session, session_store):
    """A second signed-in user sharing the same database."""
    other = make_client(db_session, session_store)
    sign_up(other, "bob")
    return other
