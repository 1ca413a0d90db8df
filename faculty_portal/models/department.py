"""Department SQLAlchemy model."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from ..database import Base


class Department(Base):
    """A faculty department. Each department owns one chat room."""

    __tablename__ = "Departments"
    __allow_unmapped__ = True

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    name = Column(
        String(100),
        unique=True,
        nullable=False,
    )
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, name={self.name})>"
