from typing import Optional

from sqlalchemy.orm import Session

from jobboard.core.logging import get_logger
from jobboard.models import ActivityLog

logger = get_logger("activity")


def record_activity(db: Session, user_id: Optional[int], action: str, detail: Optional[str] = None) -> ActivityLog:
    """Add an audit entry to the current session. The caller commits."""
    entry = ActivityLog(user_id=user_id, action=action, detail=detail)
    db.add(entry)
    logger.info(f"{action} by user {user_id}: {detail or '-'}")
    return entry
