"""Authentication service with JWT token generation and user management."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models.user import User, UserRole
from ..schemas.user import UserCreate
from ..utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

# OAuth2 scheme for token-based authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class Token(BaseModel):
    """Token response schema."""

    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """
    Token payload data schema.

    Carries enough identity for the WebSocket layer to authorize room
    access without a database round trip per frame.
    """

    user_id: Optional[str] = None
    username: Optional[str] = None
    role: Optional[str] = None
    department_name: Optional[str] = None


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to encode in the token
        expires_delta: Optional custom expiration time delta

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.jwt_expiration_minutes
        )

    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def create_token_for_user(user: User) -> str:
    """Issue an access token carrying the user's identity claims."""
    return create_access_token(
        data={
            "sub": str(user.id),
            "username": user.username,
            "role": user.role,
            "department": user.department_name,
        }
    )


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Decode and validate a JWT access token.

    Args:
        token: The JWT token string to decode

    Returns:
        TokenData with user information, or None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    return TokenData(
        user_id=user_id,
        username=payload.get("username"),
        role=payload.get("role"),
        department_name=payload.get("department"),
    )


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def authenticate_user(
    db: AsyncSession, username: str, password: str
) -> Optional[User]:
    """
    Authenticate a user with username and password.

    Returns:
        User object if authentication successful, None otherwise
    """
    user = await get_user_by_username(db, username)

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


async def create_user(
    db: AsyncSession,
    user_data: UserCreate,
    role: Optional[str] = None,
) -> User:
    """
    Create a new user in the database.

    Args:
        db: Database session
        user_data: User creation data including password
        role: Overrides the requested role (used for bootstrap admins)

    Returns:
        Created User object

    Raises:
        HTTPException: If the username is taken or a governor has no department
    """
    existing_user = await get_user_by_username(db, user_data.username)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        )

    effective_role = role or user_data.role
    if (
        effective_role == UserRole.DEPARTMENT_GOVERNOR.value
        and not user_data.department_name
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Department governors must belong to a department",
        )

    db_user = User(
        username=user_data.username,
        password_hash=get_password_hash(user_data.password),
        phone=user_data.phone,
        reg_number=user_data.reg_number,
        role=effective_role,
        department_name=user_data.department_name,
    )

    db.add(db_user)
    await db.flush()
    await db.refresh(db_user)

    logger.info(f"Created user {db_user.username} with role {db_user.role}")
    return db_user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from the JWT token.

    This is a FastAPI dependency that extracts and validates
    the JWT token from the Authorization header.

    Raises:
        HTTPException: If token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = decode_access_token(token)
    if token_data is None or token_data.user_id is None:
        raise credentials_exception

    try:
        user_id = UUID(token_data.user_id)
    except ValueError:
        raise credentials_exception

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise credentials_exception

    return user


async def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Dependency that only lets administrators through.

    Raises:
        HTTPException: 403 if the user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user
