"""Pytest fixtures and configuration for lifetasks tests."""

import pytest
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import uuid

from lifetasks.database.database import Base
from lifetasks.database import models  # noqa: F401
from lifetasks.database.repository import TaskRepository
from lifetasks.database.recurring_task_repository import RecurringTaskRepository
from lifetasks.models.recurrence import RecurringTaskDefinition
from lifetasks.models.task import Task, TaskContext
from lifetasks.recurrence.store import RecurrenceStore


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session(test_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates a test user in the database.
    """
    from lifetasks.database.models import UserDB

    # StaticPool keeps the single in-memory connection alive across sessions
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    # Create test user (required for foreign key constraints)
    now = datetime.utcnow()
    session.add(UserDB(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    ))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def task_repository(db_session: Session):
    return TaskRepository(db_session)


@pytest.fixture
def recurring_repository(db_session: Session):
    return RecurringTaskRepository(db_session)


@pytest.fixture
def sample_task_base(test_user_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    now = datetime.utcnow()
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "date": "2025-06-16",
        "context": TaskContext.WORK,
        "title": "Test Task",
        "notes": "Test notes",
        "status": "To Do",
        "completed": False,
        "priority": 0,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def sample_task(sample_task_base):
    return Task(**sample_task_base)


@pytest.fixture
def definition_base(test_user_id):
    """Base recurring definition data; override per test."""
    now = datetime.utcnow()
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "title": "Standup",
        "context": TaskContext.WORK,
        "status": "To Do",
        "frequency": "everyday",
        "active": True,
        "generated_dates": [],
        "created_at": now,
        "updated_at": now,
    }


class InMemoryRecurrenceStore(RecurrenceStore):
    """Dict-backed store for exercising the reconciler without a database.

    `fail_create_on` / `fail_persist_for` inject failures for specific dates / definition ids.
    """

    def __init__(self, definitions: Optional[List[RecurringTaskDefinition]] = None):
        self.definitions: Dict[str, RecurringTaskDefinition] = {d.id: d for d in (definitions or [])}
        self.tasks: List[Task] = []
        self.create_calls = 0
        self.persist_calls = 0
        self.fail_create_on: set = set()
        self.fail_persist_for: set = set()
        self.fail_delete_definition = False

    def list_recurring_definitions(self):
        return list(self.definitions.values())

    def get_definition(self, definition_id):
        return self.definitions.get(definition_id)

    def list_task_instances(self, date, context):
        context = getattr(context, "value", context)
        return [t for t in self.tasks if t.date == date and t.context == context]

    def create_task_instance(self, task):
        self.create_calls += 1
        if task.date in self.fail_create_on:
            raise RuntimeError("storage unavailable")
        self.tasks.append(task)
        return True

    def persist_definition(self, definition):
        self.persist_calls += 1
        if definition.id in self.fail_persist_for:
            raise RuntimeError("write failed")
        self.definitions[definition.id] = definition

    def delete_definition(self, definition_id):
        if self.fail_delete_definition:
            raise RuntimeError("delete failed")
        return self.definitions.pop(definition_id, None) is not None

    def delete_task_instances_by_title(self, title):
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if t.title != title]
        return before - len(self.tasks)


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from lifetasks.models.user import User
    now = datetime.utcnow()
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def test_client(db_session: Session, test_user):
    """Create a FastAPI test client with overridden database dependency and authentication."""
    from lifetasks.api.app import app
    from lifetasks.database.database import get_db
    from lifetasks.auth.dependencies import get_current_user

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session is closed by the db_session fixture

    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
