"""Password hashing and access predicates."""

from .security import (
    can_access_department,
    can_post_notifications,
    get_password_hash,
    has_department_authority,
    verify_password,
)

__all__ = [
    "can_access_department",
    "can_post_notifications",
    "get_password_hash",
    "has_department_authority",
    "verify_password",
]
