"""Authentication API endpoints.

Provides endpoints for user registration, login, logout, and profile access.
Uses JWT-based authentication; the token also authenticates the chat
WebSocket.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.user import UserCreate, UserResponse
from ..services.auth_service import (
    Token,
    authenticate_user,
    create_token_for_user,
    create_user,
    get_current_user,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a portal account. Administrators cannot self-register.",
    responses={
        201: {"description": "User created successfully"},
        400: {"description": "Username taken or validation error"},
    },
)
async def signup(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Register a new user.

    - **username**: Unique login name, shown as chat sender
    - **password**: Minimum 8 characters
    - **departmentName**: Department membership
    """
    return await create_user(db, user_data)


@router.post(
    "/login",
    response_model=Token,
    summary="Login and get access token",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"description": "Invalid credentials"},
    },
)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: AsyncSession = Depends(get_db),
) -> Token:
    """
    Login with username and password (OAuth2 password form).

    Returns a JWT carrying the user's id, username, role and department.
    """
    user = await authenticate_user(db, form_data.username, form_data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(access_token=create_token_for_user(user))


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    summary="Logout current user",
)
async def logout(
    current_user: User = Depends(get_current_user),
) -> dict:
    """Tokens are stateless; the client discards its token."""
    return {
        "message": "Successfully logged out",
        "user_id": str(current_user.id),
    }


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user profile",
    responses={
        200: {"description": "User profile retrieved successfully"},
        401: {"description": "Not authenticated"},
    },
)
async def get_me(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    return current_user
