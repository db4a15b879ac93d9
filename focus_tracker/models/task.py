import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from . import Base
from ._ids import new_id


class TaskStatus(str, enum.Enum):
    PLANNED = "planned"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


task_status_enum = Enum(TaskStatus, name="task_status", values_callable=_enum_values)
task_priority_enum = Enum(TaskPriority, name="task_priority", values_callable=_enum_values)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    goal_id = Column(String(36), ForeignKey("goals.id"), nullable=True, index=True)
    title = Column(String, nullable=False)
    category = Column(String, nullable=False, default="general")
    priority = Column(task_priority_enum, nullable=False, default=TaskPriority.MEDIUM)
    status = Column(task_status_enum, nullable=False, default=TaskStatus.PLANNED)
    time_spent = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    goal = relationship("Goal", back_populates="tasks")
