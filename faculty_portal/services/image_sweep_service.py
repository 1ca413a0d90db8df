"""Expired chat image cleanup.

Clears the image reference from messages whose image has expired and
removes the stored object. The message text stays. Nothing is broadcast;
clients see the change on their next history fetch.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from ..database import async_session_maker
from .message_service import MessageService
from .minio_service import MinIOService, minio_service

logger = logging.getLogger(__name__)


async def sweep_expired_images(
    session_factory: Optional[Callable] = None,
    storage: Optional[MinIOService] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Clear every image whose expiry has passed.

    References are cleared and committed before any object is removed, so a
    failed commit never leaves a message pointing at a deleted object. A
    failing object delete is logged and does not stop the sweep.

    Args:
        session_factory: Async session factory (defaults to the app's)
        storage: Object storage client (defaults to the global one)
        now: Reference time (defaults to utcnow)

    Returns:
        dict with cleared and storage_errors counts
    """
    session_factory = session_factory or async_session_maker
    storage = storage or minio_service
    now = now or datetime.utcnow()

    async with session_factory() as db:
        expired = await MessageService.get_expired_images(db, now)
        object_keys = [message.image_url for message in expired]
        for message in expired:
            await MessageService.clear_image(db, message)
        await db.commit()

    storage_errors = 0
    for object_key in object_keys:
        try:
            await asyncio.to_thread(storage.delete_image, object_key)
        except Exception as e:
            storage_errors += 1
            logger.warning(f"Could not delete image {object_key}: {e}")

    cleared = len(object_keys)
    if cleared:
        logger.info(
            f"Image sweep cleared {cleared} expired images ({storage_errors} storage errors)"
        )
    return {"cleared": cleared, "storage_errors": storage_errors}
