"""Pytest fixtures and configuration for accountabot tests."""

import pytest
import uuid
from datetime import datetime, timedelta
from typing import List, Tuple
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from accountabot.database.database import Base
from accountabot.database import models  # noqa: F401  (registers tables)
from accountabot.database.repository import TaskRepository
from accountabot.database.user_settings_repository import UserSettingsRepository
from accountabot.models.task import Bucket, ReminderFrequency, Task


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


class FakeTransport:
    """Records outgoing messages instead of calling Telegram."""

    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent: List[Tuple[str, str]] = []

    def send(self, chat_id: str, text: str) -> bool:
        self.sent.append((chat_id, text))
        return self.ok

    def texts_for(self, chat_id: str) -> List[str]:
        return [text for target, text in self.sent if target == chat_id]


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def settings_repository(db_session: Session):
    """Create a UserSettingsRepository instance for testing."""
    return UserSettingsRepository(db_session)


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def test_chat_id():
    return "424242"


@pytest.fixture
def reference_now():
    """Monday 2024-01-15 10:00 local time."""
    return datetime(2024, 1, 15, 10, 0, 0)


@pytest.fixture
def sample_task_base(test_user_id, reference_now):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "title": "Test Task",
        "notes": "Test notes",
        "deadline": reference_now + timedelta(hours=2),
        "bucket": Bucket.TODAY,
        "created_at": reference_now - timedelta(days=1),
        "updated_at": reference_now - timedelta(days=1),
        "completed_at": None,
        "delegated_to": None,
        "reminder_frequency": ReminderFrequency.HOURLY,
        "last_reminded_at": None,
        "escalation_level": 0,
        "tags": [],
        "recurrence": None,
    }


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample Task object for testing."""
    return Task(**sample_task_base)


@pytest.fixture
def linked_settings(settings_repository, test_user_id, test_chat_id, reference_now):
    """Settings of a user whose Telegram chat is linked."""
    return settings_repository.link_chat(test_user_id, test_chat_id, reference_now - timedelta(days=30))


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def failing_transport():
    return FakeTransport(ok=False)


@pytest.fixture
def test_client(db_session: Session, fake_transport, monkeypatch):
    """Create a FastAPI test client with overridden database and transport dependencies."""
    from accountabot.api.app import app, get_transport
    from accountabot.database.database import get_db

    monkeypatch.delenv("REMINDER_API_KEY", raising=False)

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_transport] = lambda: fake_transport

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
