"""Web Push subscription endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.push_subscription import PushSubscription
from ..models.user import User
from ..schemas.push import PushSubscriptionCreate, PushUnsubscribe, VapidPublicKey
from ..services.auth_service import get_current_user
from ..services.push_service import PushService, get_push_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/push", tags=["Push"])


@router.get(
    "/vapid-public-key",
    response_model=VapidPublicKey,
    response_model_by_alias=True,
    summary="Get the VAPID application server key",
)
async def get_vapid_public_key(
    push: PushService = Depends(get_push_service),
) -> VapidPublicKey:
    return VapidPublicKey(publicKey=push.public_key if push.enabled else None)


@router.post(
    "/subscribe",
    status_code=status.HTTP_201_CREATED,
    summary="Register a push subscription",
    description="Re-registering a known endpoint moves it to the current user.",
)
async def subscribe(
    subscription: PushSubscriptionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    result = await db.execute(
        select(PushSubscription).where(PushSubscription.endpoint == subscription.endpoint)
    )
    existing = result.scalar_one_or_none()

    if existing is None:
        db.add(
            PushSubscription(
                user_id=current_user.id,
                endpoint=subscription.endpoint,
                p256dh=subscription.keys.p256dh,
                auth=subscription.keys.auth,
            )
        )
    else:
        existing.user_id = current_user.id
        existing.p256dh = subscription.keys.p256dh
        existing.auth = subscription.keys.auth

    logger.info(f"Push subscription registered for {current_user.username}")
    return {"success": True}


@router.delete(
    "/subscribe",
    summary="Remove a push subscription",
)
async def unsubscribe(
    subscription: PushUnsubscribe,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    result = await db.execute(
        delete(PushSubscription).where(
            PushSubscription.endpoint == subscription.endpoint,
            PushSubscription.user_id == current_user.id,
        )
    )
    return {"success": True, "removed": result.rowcount or 0}
