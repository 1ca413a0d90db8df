"""Notification API endpoints.

Provides endpoints for listing, posting, reacting to, commenting on and
deleting portal notifications. Posting schedules push delivery in the
background.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db, get_session_factory
from ..models.user import User
from ..schemas.notification import (
    NotificationCommentCreate,
    NotificationCreate,
    NotificationReact,
    NotificationResponse,
)
from ..services.activity_service import ActivityAction, log_activity
from ..services.auth_service import get_current_user
from ..services.notification_fanout import schedule_fanout
from ..services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=List[NotificationResponse],
    summary="List notifications",
    description="General notifications plus those of the user's department, newest first.",
)
async def list_notifications(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[NotificationResponse]:
    return await NotificationService.list_visible(db, current_user)


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a notification",
    description=(
        "Governors and admins only. Department governors always post to their "
        "own department; a target of 'all' makes the notification general."
    ),
    responses={
        201: {"description": "Notification posted"},
        403: {"description": "Not authorized to post notifications"},
    },
)
async def create_notification(
    notification_data: NotificationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory=Depends(get_session_factory),
) -> NotificationResponse:
    notification = await NotificationService.create_notification(
        db, current_user, notification_data
    )
    await log_activity(
        db,
        ActivityAction.NOTIFICATION_POSTED,
        user_id=current_user.id,
        details={
            "notificationId": str(notification.id),
            "classification": notification.classification,
        },
    )
    await db.commit()

    schedule_fanout(notification.id, session_factory=session_factory)
    return notification


@router.post(
    "/{notification_id}/react",
    response_model=NotificationResponse,
    summary="React to a notification",
    responses={404: {"description": "Notification not found"}},
)
async def react_to_notification(
    notification_id: UUID,
    reaction: NotificationReact,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    notification = await NotificationService.get_visible(db, notification_id, current_user)
    return await NotificationService.add_reaction(db, notification, reaction.reaction_type)


@router.post(
    "/{notification_id}/comment",
    response_model=NotificationResponse,
    summary="Comment on a notification",
    responses={
        400: {"description": "Comment content is required"},
        404: {"description": "Notification not found"},
    },
)
async def comment_on_notification(
    notification_id: UUID,
    comment: NotificationCommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    notification = await NotificationService.get_visible(db, notification_id, current_user)
    return await NotificationService.add_comment(
        db, notification, current_user.username, comment.content
    )


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a notification",
    description="Allowed for the poster, admins and governors with authority over the target.",
    responses={
        403: {"description": "Not authorized to delete this notification"},
        404: {"description": "Notification not found"},
    },
)
async def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    notification = await NotificationService.get_visible(db, notification_id, current_user)
    await NotificationService.delete_notification(db, notification, current_user)
    await log_activity(
        db,
        ActivityAction.NOTIFICATION_DELETED,
        user_id=current_user.id,
        details={"notificationId": str(notification_id)},
    )
    return {"message": "Notification deleted"}
