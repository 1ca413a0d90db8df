"""User profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.user import UserResponse
from ..services.auth_service import get_current_user, get_user_by_username

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/profile/{username}",
    response_model=UserResponse,
    summary="Get a user's public profile",
    responses={404: {"description": "User not found"}},
)
async def get_profile(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await get_user_by_username(db, username)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user
