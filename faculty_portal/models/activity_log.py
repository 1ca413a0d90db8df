"""Activity log SQLAlchemy model for administrative audit entries."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, JSON, String, Uuid

from ..database import Base


class ActivityLog(Base):
    """
    Audit trail row.

    Attributes:
        id: Unique identifier (UUID)
        user_id: Acting user, None for system actions
        action: Action code, e.g. ROOM_CREATED
        details: Free-form JSON payload
        created_at: When the action happened
    """

    __tablename__ = "ActivityLogs"
    __allow_unmapped__ = True

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    user_id = Column(
        Uuid,
        nullable=True,
        index=True,
    )
    action = Column(
        String(50),
        nullable=False,
    )
    details = Column(
        JSON,
        nullable=True,
    )
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<ActivityLog(id={self.id}, action={self.action})>"
