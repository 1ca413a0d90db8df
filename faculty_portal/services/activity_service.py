"""Activity log helpers for administrative actions."""

import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


class ActivityAction:
    ROOM_CREATED = "ROOM_CREATED"
    ROOM_DELETED = "ROOM_DELETED"
    NOTIFICATION_POSTED = "NOTIFICATION_POSTED"
    NOTIFICATION_DELETED = "NOTIFICATION_DELETED"
    USER_DELETED = "USER_DELETED"
    IMAGE_SWEEP = "IMAGE_SWEEP"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_DELETED = "DOCUMENT_DELETED"


async def log_activity(
    db: AsyncSession,
    action: str,
    user_id: Optional[UUID] = None,
    details: Optional[dict] = None,
) -> ActivityLog:
    """
    Record an audit entry. The caller's transaction commits it.

    Args:
        db: Database session
        action: One of ActivityAction values
        user_id: Acting user, None for system actions
        details: JSON-serializable context
    """
    entry = ActivityLog(user_id=user_id, action=action, details=details or {})
    db.add(entry)
    await db.flush()
    logger.info(f"Activity {action} by {user_id}: {details}")
    return entry


async def get_recent_activity(db: AsyncSession, limit: int = 100) -> Sequence[ActivityLog]:
    result = await db.execute(
        select(ActivityLog).order_by(ActivityLog.created_at.desc()).limit(limit)
    )
    return result.scalars().all()
