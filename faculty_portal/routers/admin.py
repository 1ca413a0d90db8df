"""Administrative endpoints: users, activity logs and maintenance jobs."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db, get_session_factory
from ..models.user import User
from ..schemas.user import UserResponse
from ..services.activity_service import ActivityAction, get_recent_activity, log_activity
from ..services.auth_service import require_admin
from ..services.image_sweep_service import sweep_expired_images
from ..services.minio_service import MinIOService, get_minio_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="List all users",
)
async def list_users(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[UserResponse]:
    result = await db.execute(select(User).order_by(User.username))
    return result.scalars().all()


@router.delete(
    "/users/{user_id}",
    summary="Delete a user",
    responses={
        400: {"description": "Admin accounts cannot be deleted"},
        404: {"description": "User not found"},
    },
)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    if user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete admin users",
        )

    username = user.username
    await db.delete(user)
    await log_activity(
        db,
        ActivityAction.USER_DELETED,
        user_id=current_user.id,
        details={"deletedUserId": str(user_id), "deletedUsername": username},
    )
    return {"message": "User deleted successfully"}


@router.get(
    "/logs",
    summary="Recent activity log entries",
)
async def get_logs(
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    entries = await get_recent_activity(db, limit)
    return [
        {
            "id": str(entry.id),
            "userId": str(entry.user_id) if entry.user_id else None,
            "action": entry.action,
            "details": entry.details,
            "timestamp": entry.created_at.isoformat(),
        }
        for entry in entries
    ]


@router.post(
    "/run-image-sweep",
    summary="Run the expired image sweep now",
    description="Runs the same job the worker schedules hourly.",
)
async def run_image_sweep(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    session_factory=Depends(get_session_factory),
    storage: MinIOService = Depends(get_minio_service),
) -> dict:
    logger.info(f"Manual image sweep triggered by {current_user.username}")
    result = await sweep_expired_images(session_factory=session_factory, storage=storage)
    await log_activity(db, ActivityAction.IMAGE_SWEEP, user_id=current_user.id, details=result)
    return {"status": "completed", **result}
