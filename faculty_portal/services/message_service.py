"""Message store operations.

Durable CRUD for chat messages. The database is the source of truth for
history; the WebSocket layer only relays what has been committed here.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.message import Message

logger = logging.getLogger(__name__)


class MessageService:
    """Persistence helpers for the Message table."""

    @staticmethod
    async def create_message(
        db: AsyncSession,
        room_id: UUID,
        sender: str,
        content: str,
        formatting: Optional[dict] = None,
        reply_to: Optional[str] = None,
        image_url: Optional[str] = None,
        image_expiry: Optional[datetime] = None,
    ) -> Message:
        """
        Insert a new message with empty reactions and edited=False.

        Args:
            db: Database session
            room_id: Target room
            sender: Display name of the author
            content: Message text or image caption
            formatting: Optional styling dict
            reply_to: Optional quoted snippet
            image_url: Object key of an attached image
            image_expiry: When the attached image expires

        Returns:
            The committed Message with server id and timestamp
        """
        message = Message(
            room_id=room_id,
            sender=sender,
            content=content,
            formatting=formatting,
            reply_to=reply_to,
            image_url=image_url,
            image_expiry=image_expiry,
            edited=False,
            reactions={},
        )

        db.add(message)
        await db.commit()
        await db.refresh(message)

        logger.debug(f"Message created: id={message.id}, room={room_id}, sender={sender}")
        return message

    @staticmethod
    async def get_message(db: AsyncSession, message_id: UUID) -> Optional[Message]:
        result = await db.execute(select(Message).where(Message.id == message_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_recent_messages(
        db: AsyncSession,
        room_id: UUID,
        limit: int,
    ) -> Sequence[Message]:
        """
        Fetch the most recent messages of a room, newest first.

        Callers that render history reverse this to oldest-first.
        """
        result = await db.execute(
            select(Message)
            .where(Message.room_id == room_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def update_content(db: AsyncSession, message: Message, content: str) -> Message:
        message.content = content
        message.edited = True
        await db.commit()
        await db.refresh(message)
        return message

    @staticmethod
    async def delete_message(db: AsyncSession, message: Message) -> None:
        await db.delete(message)
        await db.commit()

    @staticmethod
    async def apply_reaction(
        db: AsyncSession,
        message: Message,
        emoji: str,
        delta: int = 1,
    ) -> dict:
        """
        Adjust one reaction counter and persist the whole map.

        Counts never drop below zero; a counter that reaches zero is removed.
        This is a read-modify-write, concurrent reactions may be lost.

        Returns:
            The new reactions map
        """
        reactions = dict(message.reactions or {})
        count = max(reactions.get(emoji, 0) + delta, 0)
        if count:
            reactions[emoji] = count
        else:
            reactions.pop(emoji, None)

        # JSON columns are not mutation-tracked, assign a fresh dict
        message.reactions = reactions
        await db.commit()
        return reactions

    @staticmethod
    async def get_expired_images(
        db: AsyncSession,
        now: Optional[datetime] = None,
    ) -> Sequence[Message]:
        """Messages whose attached image has passed its expiry."""
        now = now or datetime.utcnow()
        result = await db.execute(
            select(Message).where(
                and_(
                    Message.image_url.is_not(None),
                    Message.image_expiry.is_not(None),
                    Message.image_expiry < now,
                )
            )
        )
        return result.scalars().all()

    @staticmethod
    async def clear_image(db: AsyncSession, message: Message) -> None:
        """Drop the image reference, keeping the message text."""
        message.image_url = None
        message.image_expiry = None
        await db.flush()

    @staticmethod
    async def delete_room_messages(db: AsyncSession, room_id: UUID) -> int:
        result = await db.execute(delete(Message).where(Message.room_id == room_id))
        return result.rowcount or 0
