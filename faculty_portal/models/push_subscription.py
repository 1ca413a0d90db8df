"""Web Push subscription SQLAlchemy model."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base


class PushSubscription(Base):
    """A browser push endpoint registered by a user."""

    __tablename__ = "PushSubscriptions"
    __allow_unmapped__ = True

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    user_id = Column(
        Uuid,
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    endpoint = Column(
        Text,
        unique=True,
        nullable=False,
    )
    p256dh = Column(
        String(255),
        nullable=False,
    )
    auth = Column(
        String(255),
        nullable=False,
    )
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    user = relationship("User", back_populates="push_subscriptions")

    def to_subscription_info(self) -> dict:
        """Shape expected by the webpush client."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh, "auth": self.auth},
        }

    def __repr__(self) -> str:
        return f"<PushSubscription(id={self.id}, user_id={self.user_id})>"
