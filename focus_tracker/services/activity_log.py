from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from ..models import ActivityLog

logger = logging.getLogger(__name__)


def log(
    db: Session,
    user_id: str,
    action: str,
    entity_type: str,
    entity_id: str,
    task_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ActivityLog | None:
    """Append an audit entry in its own transaction.

    Failures are logged and swallowed so they never undo the transition that
    triggered them. Callers must have committed their own work first.
    """
    try:
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            task_id=task_id,
            details=metadata,
        )
        db.add(entry)
        db.commit()
    except Exception:  # audit trail is best-effort
        db.rollback()
        logger.exception("Failed to record activity %s for %s %s", action, entity_type, entity_id)
        return None
    return entry


def recent(db: Session, user_id: str, limit: int = 50) -> list[ActivityLog]:
    return (
        db.query(ActivityLog)
        .filter(ActivityLog.user_id == user_id)
        .order_by(ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
