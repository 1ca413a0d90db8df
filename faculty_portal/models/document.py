"""Shared document SQLAlchemy model."""

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, String, Uuid

from ..database import Base


class Document(Base):
    """
    A file shared through the portal.

    The bytes live in object storage; the row keeps the key plus the
    metadata shown in listings.

    Attributes:
        id: Unique identifier (UUID)
        name: Original file name
        object_key: Object storage key
        owner: Username of the uploader
        department_name: Uploader's department, None for users without one
        file_type: File extension including the dot, e.g. ".pdf"
        content_type: MIME type reported at upload
        size: Size in bytes
        created_at: Upload time
    """

    __tablename__ = "Documents"
    __allow_unmapped__ = True

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    name = Column(
        String(255),
        nullable=False,
    )
    object_key = Column(
        String(500),
        unique=True,
        nullable=False,
    )
    owner = Column(
        String(100),
        nullable=False,
        index=True,
    )
    department_name = Column(
        String(100),
        nullable=True,
        index=True,
    )
    file_type = Column(
        String(50),
        nullable=False,
    )
    content_type = Column(
        String(100),
        nullable=False,
    )
    size = Column(
        BigInteger,
        nullable=False,
    )
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, name={self.name}, owner={self.owner})>"
