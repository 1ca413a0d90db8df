"""Room SQLAlchemy model for chat rooms."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from ..database import Base


class RoomType(str, Enum):
    """Kinds of chat rooms."""

    GENERAL = "general"
    DEPARTMENT = "department"
    CUSTOM = "custom"


# Rooms created at initialization cannot be deleted
PROTECTED_ROOM_TYPES = frozenset({RoomType.GENERAL.value, RoomType.DEPARTMENT.value})


class Room(Base):
    """
    Chat room model.

    Exactly one room has type general. Department rooms carry the
    department_name they belong to; custom rooms are created by admins.

    Attributes:
        id: Unique identifier (UUID)
        name: Display name
        type: One of RoomType values
        department_name: Owning department for department rooms
        created_by: Username of the creator, or "system"
        created_at: Timestamp when the room was created
    """

    __tablename__ = "Rooms"
    __allow_unmapped__ = True

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    name = Column(
        String(100),
        nullable=False,
    )
    type = Column(
        String(20),
        nullable=False,
        default=RoomType.CUSTOM.value,
        index=True,
    )
    department_name = Column(
        String(100),
        nullable=True,
    )
    created_by = Column(
        String(100),
        nullable=False,
    )
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    messages = relationship(
        "Message",
        back_populates="room",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    @property
    def is_protected(self) -> bool:
        return self.type in PROTECTED_ROOM_TYPES

    def __repr__(self) -> str:
        """String representation of Room."""
        return f"<Room(id={self.id}, name={self.name}, type={self.type})>"
