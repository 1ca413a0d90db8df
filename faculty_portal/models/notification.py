"""Notification SQLAlchemy model for portal announcements."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, JSON, String, Text, Uuid

from ..database import Base


class NotificationScope(str, Enum):
    GENERAL = "general"
    DEPARTMENT = "department"


class NotificationClassification(str, Enum):
    URGENT = "urgent"
    REGULAR = "regular"
    INFORMATIONAL = "informational"


class Notification(Base):
    """
    Announcement posted by a governor or admin.

    Attributes:
        id: Unique identifier (UUID)
        scope: general (everyone) or department (one department)
        classification: urgent, regular or informational
        title: Short headline
        content: Body text
        posted_by: Username of the poster
        target_department_name: Department for department scope, else None
        reactions: Reaction name -> count
        comments: Ordered list of {id, author, content, timestamp}
        created_at: Timestamp when posted
    """

    __tablename__ = "Notifications"
    __allow_unmapped__ = True

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    scope = Column(
        String(20),
        nullable=False,
        default=NotificationScope.GENERAL.value,
    )
    classification = Column(
        String(20),
        nullable=False,
        default=NotificationClassification.REGULAR.value,
    )
    title = Column(
        String(255),
        nullable=False,
    )
    content = Column(
        Text,
        nullable=False,
    )
    posted_by = Column(
        String(100),
        nullable=False,
    )
    target_department_name = Column(
        String(100),
        nullable=True,
        index=True,
    )
    reactions = Column(
        JSON,
        nullable=False,
        default=dict,
    )
    comments = Column(
        JSON,
        nullable=False,
        default=list,
    )
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation of Notification."""
        return f"<Notification(id={self.id}, scope={self.scope}, title={self.title})>"
