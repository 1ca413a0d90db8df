"""User SQLAlchemy model for authentication and role-based access."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from ..database import Base


class UserRole(str, Enum):
    """Portal roles, from least to most privileged."""

    STUDENT = "student"
    DEPARTMENT_GOVERNOR = "department-governor"
    FACULTY_GOVERNOR = "faculty-governor"
    ADMIN = "admin"


# Roles that see every room and every notification
ELEVATED_ROLES = frozenset({UserRole.ADMIN.value, UserRole.FACULTY_GOVERNOR.value})

# Roles allowed to post notifications
POSTING_ROLES = frozenset({
    UserRole.ADMIN.value,
    UserRole.FACULTY_GOVERNOR.value,
    UserRole.DEPARTMENT_GOVERNOR.value,
})


class User(Base):
    """
    User model representing portal members.

    Attributes:
        id: Unique identifier (UUID)
        username: Login name, also used as the chat display name (unique)
        password_hash: Hashed password for authentication
        phone: Contact phone number
        reg_number: Registration number
        role: One of UserRole values
        department_name: Department the user belongs to, if any
        created_at: Timestamp when user was created
    """

    __tablename__ = "Users"
    __allow_unmapped__ = True

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    username = Column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash = Column(
        String(255),
        nullable=False,
    )

    # Profile fields
    phone = Column(
        String(30),
        nullable=True,
    )
    reg_number = Column(
        String(50),
        nullable=True,
    )
    role = Column(
        String(30),
        nullable=False,
        default=UserRole.STUDENT.value,
    )
    department_name = Column(
        String(100),
        nullable=True,
        index=True,
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    push_subscriptions = relationship(
        "PushSubscription",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
