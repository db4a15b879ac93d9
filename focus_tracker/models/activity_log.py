from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from . import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String(36), nullable=False)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=True)
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
