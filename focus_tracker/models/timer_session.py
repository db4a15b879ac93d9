from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import relationship

from . import Base
from ._ids import new_id


class TimerSession(Base):
    __tablename__ = "timer_sessions"
    __table_args__ = (
        # at most one open (running or paused) session per user
        Index(
            "uq_timer_sessions_user_open",
            "user_id",
            unique=True,
            postgresql_where=text("end_time IS NULL"),
            sqlite_where=text("end_time IS NULL"),
        ),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    is_running = Column(Boolean, nullable=False, default=True)
    elapsed_at_pause = Column(Integer, nullable=False, default=0)
    end_time = Column(DateTime, nullable=True)
    total_duration = Column(Integer, nullable=True)
    duration_limit = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    task = relationship("Task")
