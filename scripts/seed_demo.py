"""Seed a demo user with a goal and a few tasks into the configured database."""

from focus_tracker.db import SessionLocal
from focus_tracker.models import Goal, Task, TaskPriority, User
from focus_tracker.security import get_password_hash

DEMO_EMAIL = "demo@example.com"
DEFAULT_PASSWORD = "demo1234"
DEMO_TASKS = [
    ("Outline the report", "writing", TaskPriority.HIGH),
    ("Draft section 1", "writing", TaskPriority.MEDIUM),
    ("Review pull requests", "coding", TaskPriority.MEDIUM),
    ("Plan next sprint", "planning", TaskPriority.LOW),
]


def ensure_user(session) -> User:
    user = session.query(User).filter(User.email == DEMO_EMAIL).one_or_none()
    if user:
        return user
    user = User(
        email=DEMO_EMAIL,
        username="demo",
        password_hash=get_password_hash(DEFAULT_PASSWORD),
        is_active=True,
    )
    session.add(user)
    session.flush()
    return user


def ensure_goal(session, user: User) -> Goal:
    goal = session.query(Goal).filter(Goal.user_id == user.id, Goal.title == "Ship Q3 report").one_or_none()
    if goal is None:
        goal = Goal(user_id=user.id, title="Ship Q3 report", progress=0, is_completed=False)
        session.add(goal)
        session.flush()
    return goal


def ensure_tasks(session, user: User, goal: Goal) -> None:
    for title, category, priority in DEMO_TASKS:
        existing = session.query(Task).filter(Task.user_id == user.id, Task.title == title).one_or_none()
        if existing:
            continue
        session.add(
            Task(
                user_id=user.id,
                goal_id=goal.id if category == "writing" else None,
                title=title,
                category=category,
                priority=priority,
                time_spent=0,
            )
        )


def main() -> None:
    session = SessionLocal()
    try:
        user = ensure_user(session)
        goal = ensure_goal(session, user)
        ensure_tasks(session, user, goal)
        session.commit()
        print("Demo data ready:")
        print(f"  Login: {DEMO_EMAIL} / {DEFAULT_PASSWORD}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
