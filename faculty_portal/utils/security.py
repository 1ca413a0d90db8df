"""Password hashing and role-based access predicates."""

from typing import Optional

from passlib.context import CryptContext

from ..models.user import ELEVATED_ROLES, POSTING_ROLES, UserRole

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against a bcrypt hash.

    Returns:
        True if the password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def can_access_department(
    role: Optional[str],
    user_department: Optional[str],
    target_department: Optional[str],
) -> bool:
    """
    Decide whether a user may see content scoped to a department.

    Admins and faculty governors see every department. Everyone else only
    sees their own. Content without a department is visible to all.

    Args:
        role: The user's role
        user_department: The user's own department
        target_department: Department the content is scoped to, or None

    Returns:
        True if access is allowed
    """
    if target_department is None:
        return True
    if role in ELEVATED_ROLES:
        return True
    return user_department is not None and user_department == target_department


def can_post_notifications(role: Optional[str]) -> bool:
    return role in POSTING_ROLES


def has_department_authority(
    role: Optional[str],
    user_department: Optional[str],
    target_department: Optional[str],
) -> bool:
    """Governor authority over content targeted at a department."""
    if role in ELEVATED_ROLES:
        return True
    if role == UserRole.DEPARTMENT_GOVERNOR.value:
        return target_department is not None and target_department == user_department
    return False
