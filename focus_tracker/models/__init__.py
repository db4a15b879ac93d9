from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .activity_log import ActivityLog  # noqa: E402,F401
from .goal import Goal  # noqa: E402,F401
from .task import Task, TaskPriority, TaskStatus  # noqa: E402,F401
from .timer_session import TimerSession  # noqa: E402,F401
from .user import User  # noqa: E402,F401
