"""Notification service for posting and interacting with announcements.

Provides business logic for notification management, including:
- Role-based visibility (general vs. department scoped)
- Posting with department targeting rules
- Reactions, comments and deletion authority
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import UUID, uuid4

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.notification import Notification, NotificationScope
from ..models.user import User, UserRole
from ..schemas.notification import NotificationCreate
from ..utils.security import (
    can_access_department,
    can_post_notifications,
    has_department_authority,
)

logger = logging.getLogger(__name__)

# Target values meaning "everyone"
_ALL_DEPARTMENTS = {"", "all"}


class NotificationService:
    """Service for managing portal notifications."""

    @staticmethod
    def is_visible(notification: Notification, user: User) -> bool:
        """General notifications reach everyone, department ones their department."""
        if notification.scope == NotificationScope.GENERAL.value:
            return True
        return can_access_department(
            user.role, user.department_name, notification.target_department_name
        )

    @staticmethod
    async def list_visible(db: AsyncSession, user: User) -> Sequence[Notification]:
        """
        Notifications a user may see, newest first.

        Args:
            db: Database session
            user: The requesting user

        Returns:
            Visible notifications
        """
        query = select(Notification).order_by(Notification.created_at.desc())
        if not user.is_elevated:
            query = query.where(
                or_(
                    Notification.scope == NotificationScope.GENERAL.value,
                    Notification.target_department_name == user.department_name,
                )
            )
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_visible(
        db: AsyncSession, notification_id: UUID, user: User
    ) -> Notification:
        """
        Load a notification the user can see.

        Raises:
            HTTPException: 404 if missing or hidden from the user
        """
        notification = await db.get(Notification, notification_id)
        if notification is None or not NotificationService.is_visible(notification, user):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found",
            )
        return notification

    @staticmethod
    def resolve_target(poster: User, requested: Optional[str]) -> Optional[str]:
        """
        Decide which department a new notification targets.

        Department governors always post to their own department. Other
        posters target the requested department, or everyone for "all".
        """
        if poster.role == UserRole.DEPARTMENT_GOVERNOR.value:
            return poster.department_name
        if requested is None or requested.strip().lower() in _ALL_DEPARTMENTS:
            return None
        return requested.strip()

    @staticmethod
    async def create_notification(
        db: AsyncSession,
        poster: User,
        data: NotificationCreate,
    ) -> Notification:
        """
        Persist a new notification.

        Args:
            db: Database session
            poster: The posting user
            data: Notification data

        Returns:
            Notification: The committed notification

        Raises:
            HTTPException: 403 if the poster's role may not post
        """
        if not can_post_notifications(poster.role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to post notifications",
            )

        content = data.content.strip()
        if not content:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Notification content is required",
            )

        target = NotificationService.resolve_target(poster, data.target_department_name)
        notification = Notification(
            scope=(
                NotificationScope.DEPARTMENT.value if target else NotificationScope.GENERAL.value
            ),
            classification=data.classification,
            title=data.title.strip() or "Notification",
            content=content,
            posted_by=poster.username,
            target_department_name=target,
            reactions={},
            comments=[],
        )

        db.add(notification)
        await db.commit()
        await db.refresh(notification)

        logger.info(
            f"Notification created: id={notification.id}, "
            f"scope={notification.scope}, target={notification.target_department_name}"
        )
        return notification

    @staticmethod
    async def add_reaction(
        db: AsyncSession, notification: Notification, reaction: str
    ) -> Notification:
        reactions = dict(notification.reactions or {})
        reactions[reaction] = reactions.get(reaction, 0) + 1
        notification.reactions = reactions
        await db.commit()
        await db.refresh(notification)
        return notification

    @staticmethod
    async def add_comment(
        db: AsyncSession,
        notification: Notification,
        author: str,
        content: str,
    ) -> Notification:
        """
        Append a comment. Existing comments are never reordered.

        Raises:
            HTTPException: 400 if the comment is blank
        """
        content = content.strip()
        if not content:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Comment content is required",
            )

        comment = {
            "id": uuid4().hex,
            "author": author,
            "content": content,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        notification.comments = [*(notification.comments or []), comment]
        await db.commit()
        await db.refresh(notification)
        return notification

    @staticmethod
    def can_delete(user: User, notification: Notification) -> bool:
        """Poster, admins and governors with authority over the target may delete."""
        if notification.posted_by == user.username:
            return True
        return has_department_authority(
            user.role, user.department_name, notification.target_department_name
        )

    @staticmethod
    async def delete_notification(
        db: AsyncSession, notification: Notification, user: User
    ) -> None:
        """
        Delete a notification.

        Raises:
            HTTPException: 403 if the user lacks authority
        """
        if not NotificationService.can_delete(user, notification):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to delete this notification",
            )
        await db.delete(notification)
        await db.commit()
        logger.info(f"Notification {notification.id} deleted by {user.username}")
