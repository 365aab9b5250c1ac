"""Shared test fixtures."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from planner.core.database import get_session
from planner.main import app
from planner.models import Event, Room, User
from planner.services import events, rooms


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    """Factory for users with unique e-mail addresses."""

    def _make(name: str = "User", email: str | None = None, is_active: bool = True) -> User:
        user = User(
            name=name,
            email=email or f"{name.lower()}-{uuid4().hex[:8]}@example.com",
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture(name="auth")
def auth_fixture():
    """Build the identity header for a user."""

    def _headers(user: User) -> dict:
        return {"X-User-Id": str(user.id)}

    return _headers


@pytest.fixture(name="coordinator")
def coordinator_fixture(make_user) -> User:
    return make_user("Alice")


@pytest.fixture(name="co_coordinator")
def co_coordinator_fixture(make_user) -> User:
    """A user who is not yet a co-coordinator of anything."""
    return make_user("Bob")


@pytest.fixture(name="guest")
def guest_fixture(make_user) -> User:
    return make_user("Gina")


@pytest.fixture(name="stranger")
def stranger_fixture(make_user) -> User:
    return make_user("Sam")


@pytest.fixture(name="event")
def event_fixture(session: Session, coordinator: User) -> Event:
    """An event created through the service, so it has its main room."""
    return events.create_event(session, coordinator, "Summer Wedding")


@pytest.fixture(name="main_room")
def main_room_fixture(session: Session, event: Event) -> Room:
    return events.get_main_room(session, event.id)


@pytest.fixture(name="topic_room")
def topic_room_fixture(session: Session, event: Event, coordinator: User) -> Room:
    """A non-main room created by the primary coordinator."""
    return rooms.create_room(session, event.id, coordinator.id, "Catering")
