"""Message SQLAlchemy model for chat messages."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, JSON, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base


class Message(Base):
    """
    Chat message model.

    Reactions are stored inline as a name -> count map. The JSON column is
    not mutation-tracked, so callers must assign a new dict when changing it.

    Attributes:
        id: Unique identifier (UUID)
        room_id: Room the message belongs to
        sender: Display name of the author (not a foreign key)
        content: Message text or image caption
        formatting: Optional {bold, italic, color} styling
        image_url: Object key of an attached image, cleared on expiry
        image_expiry: When the attached image expires
        reply_to: Quoted snippet of the message being replied to
        edited: Whether the content was changed after sending
        reactions: Reaction name -> count
        created_at: Server timestamp
    """

    __tablename__ = "Messages"
    __allow_unmapped__ = True

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    room_id = Column(
        Uuid,
        ForeignKey("Rooms.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender = Column(
        String(100),
        nullable=False,
    )
    content = Column(
        Text,
        nullable=False,
    )
    formatting = Column(
        JSON,
        nullable=True,
    )
    image_url = Column(
        String(500),
        nullable=True,
    )
    image_expiry = Column(
        DateTime,
        nullable=True,
    )
    reply_to = Column(
        Text,
        nullable=True,
    )
    edited = Column(
        Boolean,
        nullable=False,
        default=False,
    )
    reactions = Column(
        JSON,
        nullable=False,
        default=dict,
    )
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    room = relationship("Room", back_populates="messages")

    __table_args__ = (
        Index("ix_Messages_room_id_created_at", "room_id", "created_at"),
        Index("ix_Messages_image_expiry", "image_expiry"),
    )

    def __repr__(self) -> str:
        """String representation of Message."""
        return f"<Message(id={self.id}, room_id={self.room_id}, sender={self.sender})>"
