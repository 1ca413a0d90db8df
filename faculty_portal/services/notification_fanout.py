"""Push fanout for newly posted notifications.

The fanout runs as a background task so posting a notification never
waits on push services. Each subscription is delivered independently;
subscriptions whose endpoint is gone are pruned afterwards.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import async_session_maker
from ..models.notification import Notification, NotificationScope
from ..models.push_subscription import PushSubscription
from ..models.user import ELEVATED_ROLES, User
from .push_service import PushGoneError, PushService, push_service

logger = logging.getLogger(__name__)

# Strong references so scheduled fanouts are not garbage collected mid-flight
_background_tasks: set[asyncio.Task] = set()


@dataclass
class FanoutResult:
    """Outcome of one notification fanout."""

    notification_id: str
    sent: int = 0
    failed: int = 0
    pruned: list[str] = field(default_factory=list)


async def get_audience_subscriptions(
    db: AsyncSession,
    notification: Notification,
) -> Sequence[PushSubscription]:
    """
    Push subscriptions of every user who can see a notification.

    General notifications reach everyone. Department notifications reach
    that department plus admins and faculty governors.
    """
    query = select(PushSubscription).join(User, PushSubscription.user_id == User.id)
    if notification.scope == NotificationScope.DEPARTMENT.value:
        query = query.where(
            or_(
                User.department_name == notification.target_department_name,
                User.role.in_(ELEVATED_ROLES),
            )
        )
    result = await db.execute(query)
    return result.scalars().all()


async def _deliver_one(
    push: PushService,
    subscription: PushSubscription,
    payload: dict,
    result: FanoutResult,
) -> None:
    try:
        if await push.send(subscription.to_subscription_info(), payload):
            result.sent += 1
    except PushGoneError:
        result.pruned.append(subscription.endpoint)
    except Exception as e:
        result.failed += 1
        logger.warning(f"Push delivery failed for subscription {subscription.id}: {e}")


async def fanout_notification(
    notification_id: UUID,
    session_factory: Optional[Callable] = None,
    push: Optional[PushService] = None,
) -> FanoutResult:
    """
    Deliver a committed notification to its audience.

    Args:
        notification_id: The notification to deliver
        session_factory: Async session factory (defaults to the app's)
        push: Push client (defaults to the global one)

    Returns:
        FanoutResult with delivery counts and pruned endpoints
    """
    session_factory = session_factory or async_session_maker
    push = push or push_service
    result = FanoutResult(notification_id=str(notification_id))

    if not push.enabled:
        logger.debug(f"Push disabled, skipping fanout for notification {notification_id}")
        return result

    async with session_factory() as db:
        notification = await db.get(Notification, notification_id)
        if notification is None:
            logger.warning(f"Fanout skipped, notification {notification_id} not found")
            return result
        subscriptions = await get_audience_subscriptions(db, notification)
        payload = PushService.build_payload(notification.title, notification.content)

    await asyncio.gather(
        *(_deliver_one(push, sub, payload, result) for sub in subscriptions)
    )

    if result.pruned:
        async with session_factory() as db:
            await db.execute(
                delete(PushSubscription).where(PushSubscription.endpoint.in_(result.pruned))
            )
            await db.commit()

    logger.info(
        f"Notification {notification_id} fanout: sent={result.sent}, "
        f"failed={result.failed}, pruned={len(result.pruned)}"
    )
    return result


def schedule_fanout(
    notification_id: UUID,
    session_factory: Optional[Callable] = None,
    push: Optional[PushService] = None,
) -> asyncio.Task:
    """
    Start a fanout in the background and return immediately.

    Returns:
        The scheduled task
    """
    task = asyncio.create_task(
        fanout_notification(notification_id, session_factory=session_factory, push=push)
    )
    _background_tasks.add(task)
    task.add_done_callback(_on_fanout_done)
    return task


def _on_fanout_done(task: asyncio.Task) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Notification fanout crashed", exc_info=exc)
