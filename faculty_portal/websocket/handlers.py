"""Chat message lifecycle handlers.

Every mutation is persisted first and broadcast only after the commit
succeeded, so room members never see a change the store does not hold.
Failures are reported to the requesting connection only.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from ..config import settings
from ..database import async_session_maker
from ..models.message import Message
from ..schemas.message import serialize_message
from ..services.message_service import MessageService
from .frames import DeleteFrame, EditFrame, JoinFrame, ReactFrame, SendFrame, parse_frame
from .manager import ConnectionManager, MessageType, manager
from .registry import WebSocketConnection
from .room_auth import check_room_access

logger = logging.getLogger(__name__)

DEFAULT_REACTION = "heart"


class ErrorCode:
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    INVALID_FRAME = "INVALID_FRAME"


@dataclass
class BroadcastResult:
    """Result of a broadcast operation."""

    room_id: str
    recipients: int
    message_type: str


RoomAuthorizer = Callable[[Any, str], Awaitable[bool]]


def image_caption(filename: str, caption: Optional[str] = None) -> str:
    """Caption shown for an image message, defaulting to its file name."""
    caption = (caption or "").strip()
    return caption or f"[Image: {filename}]"


class MessageLifecycle:
    """
    Create, edit, delete and react to chat messages.

    Args:
        connection_manager: Manager used for delivery (defaults to global)
        session_factory: Async session factory (defaults to the app's)
        room_authorizer: Optional async callable(principal, room_id) -> bool
            consulted before any frame reads or changes a room
        history_limit: Number of messages returned on join
    """

    def __init__(
        self,
        connection_manager: Optional[ConnectionManager] = None,
        session_factory: Optional[Callable] = None,
        room_authorizer: Optional[RoomAuthorizer] = None,
        history_limit: Optional[int] = None,
    ) -> None:
        self.manager = connection_manager or manager
        self.session_factory = session_factory or async_session_maker
        self.room_authorizer = room_authorizer
        self.history_limit = history_limit or settings.chat_history_limit

    @staticmethod
    def requester(connection: WebSocketConnection) -> Optional[str]:
        """Identity a connection acts under: joined name, else token username."""
        if connection.identity:
            return connection.identity
        if connection.principal is not None:
            return connection.principal.username
        return None

    # ------------------------------------------------------------------
    # Join / history
    # ------------------------------------------------------------------

    async def load_history(self, room_id: UUID) -> list[dict]:
        """
        Most recent messages of a room, oldest first.

        Returns:
            At most history_limit serialized messages
        """
        async with self.session_factory() as db:
            newest_first = await MessageService.get_recent_messages(
                db, room_id, self.history_limit
            )
        return [serialize_message(m) for m in reversed(newest_first)]

    async def authorize_room(self, connection: WebSocketConnection, room_id: str) -> bool:
        """Run the room authorizer, reporting a denial to the requester."""
        if self.room_authorizer is None:
            return True
        if await self.room_authorizer(connection.principal, room_id):
            return True
        await self.manager.send_error(
            connection,
            ErrorCode.UNAUTHORIZED,
            f"Access denied to room: {room_id}",
        )
        return False

    async def handle_join(self, connection: WebSocketConnection, frame: JoinFrame) -> None:
        room_id = str(frame.room_id)

        if not await self.authorize_room(connection, room_id):
            return

        if connection.principal is not None:
            identity = connection.principal.username
        else:
            identity = frame.user_id
        self.manager.assign(connection, identity, room_id, user_id=frame.user_id)

        try:
            messages = await self.load_history(frame.room_id)
        except SQLAlchemyError:
            logger.error(f"Failed to load history for room {room_id}", exc_info=True)
            await self.manager.send_error(
                connection, ErrorCode.PERSISTENCE_FAILED, "Could not load history"
            )
            return

        await self.manager.send_personal(
            connection,
            {"type": MessageType.HISTORY.value, "messages": messages},
        )

    # ------------------------------------------------------------------
    # Send
    # ------------------------------------------------------------------

    async def send_message(
        self,
        room_id: UUID,
        sender: str,
        content: str,
        formatting: Optional[dict] = None,
        reply_to: Optional[str] = None,
        image_url: Optional[str] = None,
        image_expiry: Optional[datetime] = None,
    ) -> Message:
        """
        Persist a new message and broadcast it to its room.

        Args:
            room_id: Target room
            sender: Display name stamped on the message
            content: Message text
            formatting: Optional styling dict
            reply_to: Optional quoted snippet
            image_url: Object key of an attached image
            image_expiry: When the image expires

        Returns:
            The persisted message

        Raises:
            SQLAlchemyError: If the message could not be stored
        """
        async with self.session_factory() as db:
            message = await MessageService.create_message(
                db,
                room_id=room_id,
                sender=sender,
                content=content,
                formatting=formatting,
                reply_to=reply_to,
                image_url=image_url,
                image_expiry=image_expiry,
            )

        await self.broadcast(
            str(room_id),
            {"type": MessageType.NEW_MESSAGE.value, "message": serialize_message(message)},
        )
        return message

    async def attach_image(
        self,
        room_id: UUID,
        sender: str,
        object_key: str,
        filename: str,
        caption: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Message:
        """
        Send variant for uploaded images.

        The caption defaults to "[Image: <filename>]" and the image expires
        image_expiry_hours after upload.
        """
        now = now or datetime.utcnow()
        return await self.send_message(
            room_id=room_id,
            sender=sender,
            content=image_caption(filename, caption),
            image_url=object_key,
            image_expiry=now + timedelta(hours=settings.image_expiry_hours),
        )

    async def handle_send(self, connection: WebSocketConnection, frame: SendFrame) -> None:
        sender = self.requester(connection) or frame.sender
        if not sender:
            await self.manager.send_error(
                connection, ErrorCode.INVALID_FRAME, "Message has no sender"
            )
            return

        if not await self.authorize_room(connection, str(frame.room_id)):
            return

        try:
            await self.send_message(
                room_id=frame.room_id,
                sender=sender,
                content=frame.content,
                formatting=frame.formatting.model_dump() if frame.formatting else None,
                reply_to=frame.reply_to,
            )
        except SQLAlchemyError:
            logger.error(f"Failed to store message in room {frame.room_id}", exc_info=True)
            await self.manager.send_error(
                connection, ErrorCode.PERSISTENCE_FAILED, "Message was not sent"
            )

    # ------------------------------------------------------------------
    # Edit / delete
    # ------------------------------------------------------------------

    async def _authorize_message_room(
        self,
        connection: WebSocketConnection,
        message_id: UUID,
        report_missing: bool = True,
    ) -> bool:
        """
        Check room access for the room a message lives in.

        A missing message fails the check; NOT_FOUND is reported only when
        report_missing is set.
        """
        if self.room_authorizer is None:
            return True

        async with self.session_factory() as db:
            message = await MessageService.get_message(db, message_id)
            room_id = str(message.room_id) if message is not None else None

        if room_id is None:
            if report_missing:
                await self.manager.send_error(
                    connection, ErrorCode.NOT_FOUND, f"Message {message_id} not found"
                )
            return False
        return await self.authorize_room(connection, room_id)

    async def _load_owned(
        self,
        db,
        connection: WebSocketConnection,
        message_id: UUID,
    ) -> Optional[Message]:
        """Fetch a message the requester owns, reporting why not otherwise."""
        message = await MessageService.get_message(db, message_id)
        if message is None:
            await self.manager.send_error(
                connection, ErrorCode.NOT_FOUND, f"Message {message_id} not found"
            )
            return None

        requester = self.requester(connection)
        if requester is None or requester != message.sender:
            logger.warning(
                f"Rejected change to message {message_id} by {requester} "
                f"(sender {message.sender})"
            )
            await self.manager.send_error(
                connection,
                ErrorCode.UNAUTHORIZED,
                "Only the sender can change this message",
            )
            return None
        return message

    async def handle_edit(self, connection: WebSocketConnection, frame: EditFrame) -> None:
        try:
            if not await self._authorize_message_room(connection, frame.message_id):
                return
            async with self.session_factory() as db:
                message = await self._load_owned(db, connection, frame.message_id)
                if message is None:
                    return
                await MessageService.update_content(db, message, frame.content)
                room_id = str(message.room_id)
        except SQLAlchemyError:
            logger.error(f"Failed to edit message {frame.message_id}", exc_info=True)
            await self.manager.send_error(
                connection, ErrorCode.PERSISTENCE_FAILED, "Edit was not saved"
            )
            return

        await self.broadcast(
            room_id,
            {
                "type": MessageType.MESSAGE_EDITED.value,
                "messageId": str(frame.message_id),
                "content": frame.content,
            },
        )

    async def handle_delete(self, connection: WebSocketConnection, frame: DeleteFrame) -> None:
        try:
            if not await self._authorize_message_room(connection, frame.message_id):
                return
            async with self.session_factory() as db:
                message = await self._load_owned(db, connection, frame.message_id)
                if message is None:
                    return
                room_id = str(message.room_id)
                await MessageService.delete_message(db, message)
        except SQLAlchemyError:
            logger.error(f"Failed to delete message {frame.message_id}", exc_info=True)
            await self.manager.send_error(
                connection, ErrorCode.PERSISTENCE_FAILED, "Delete was not saved"
            )
            return

        await self.broadcast(
            room_id,
            {
                "type": MessageType.MESSAGE_DELETED.value,
                "messageId": str(frame.message_id),
            },
        )

    # ------------------------------------------------------------------
    # React
    # ------------------------------------------------------------------

    async def handle_react(self, connection: WebSocketConnection, frame: ReactFrame) -> None:
        """Adjust a reaction counter. Reacting to a missing message does nothing."""
        emoji = frame.emoji or DEFAULT_REACTION
        try:
            if not await self._authorize_message_room(
                connection, frame.message_id, report_missing=False
            ):
                return
            async with self.session_factory() as db:
                message = await MessageService.get_message(db, frame.message_id)
                if message is None:
                    logger.debug(f"Ignoring reaction to missing message {frame.message_id}")
                    return
                reactions = await MessageService.apply_reaction(
                    db, message, emoji, frame.delta
                )
                room_id = str(message.room_id)
        except SQLAlchemyError:
            logger.error(f"Failed to react to message {frame.message_id}", exc_info=True)
            await self.manager.send_error(
                connection, ErrorCode.PERSISTENCE_FAILED, "Reaction was not saved"
            )
            return

        await self.broadcast(
            room_id,
            {
                "type": MessageType.MESSAGE_REACTED.value,
                "messageId": str(frame.message_id),
                "reactions": reactions,
            },
        )

    # ------------------------------------------------------------------
    # Delivery and routing
    # ------------------------------------------------------------------

    async def broadcast(self, room_id: str, message: dict[str, Any]) -> BroadcastResult:
        recipients = await self.manager.broadcast_to_room(room_id, message)
        return BroadcastResult(
            room_id=room_id,
            recipients=recipients,
            message_type=message["type"],
        )

    async def route(self, connection: WebSocketConnection, data: Any) -> None:
        """
        Dispatch one decoded inbound frame.

        Unknown or malformed frames are dropped; the connection stays open.
        """
        frame = parse_frame(data)
        if frame is None:
            return

        logger.debug(f"Routing frame: identity={connection.identity}, type={frame.type}")

        if isinstance(frame, JoinFrame):
            await self.handle_join(connection, frame)
        elif isinstance(frame, SendFrame):
            await self.handle_send(connection, frame)
        elif isinstance(frame, EditFrame):
            await self.handle_edit(connection, frame)
        elif isinstance(frame, DeleteFrame):
            await self.handle_delete(connection, frame)
        elif isinstance(frame, ReactFrame):
            await self.handle_react(connection, frame)


# Global lifecycle instance bound to the global connection manager
lifecycle = MessageLifecycle(room_authorizer=check_room_access)


async def route_incoming_message(
    connection: WebSocketConnection,
    data: Any,
    message_lifecycle: Optional[MessageLifecycle] = None,
) -> None:
    """
    Route incoming WebSocket messages to the chat handlers.

    Args:
        connection: The connection that sent the message
        data: The decoded JSON frame
        message_lifecycle: Optional custom lifecycle (defaults to global)
    """
    await (message_lifecycle or lifecycle).route(connection, data)


def get_message_lifecycle() -> MessageLifecycle:
    """FastAPI dependency for the process-wide message lifecycle."""
    return lifecycle
