import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from focus_tracker.clock import FrozenClock, get_clock  # noqa: E402
from focus_tracker.db import get_db  # noqa: E402
from focus_tracker.main import app  # noqa: E402
from focus_tracker.models import Base, Goal, Task, TaskStatus, User  # noqa: E402
from focus_tracker.security import create_access_token  # noqa: E402
from focus_tracker.services.notifier import Notifier, get_notifier  # noqa: E402

T0 = datetime(2024, 1, 1, 0, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FrozenClock(T0)


@pytest.fixture
def notifier():
    return Notifier(max_queue_size=10)


@pytest.fixture
def client(session_factory, clock, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(email="user@example.com", username="user"):
        user = User(email=email, username=username, password_hash="x", is_active=True)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def make_task(db):
    def _make(owner, title="Write report", category="writing", goal=None, status=TaskStatus.PLANNED):
        task = Task(
            user_id=owner.id,
            title=title,
            category=category,
            goal_id=goal.id if goal else None,
            status=status,
            time_spent=0,
        )
        db.add(task)
        db.commit()
        return task

    return _make


@pytest.fixture
def task(make_task, user):
    return make_task(user)


@pytest.fixture
def make_goal(db):
    def _make(owner, title="Ship it"):
        goal = Goal(user_id=owner.id, title=title, progress=0, is_completed=False)
        db.add(goal)
        db.commit()
        return goal

    return _make


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
