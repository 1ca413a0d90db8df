"""WebSocket connection manager.

Owns every live socket for this process: the global connection set used
for portal-wide broadcasts, and the room registry used for chat delivery.
Broadcasts are local to this process.
"""

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import WebSocket

from .registry import RoomRegistry, WebSocketConnection, fan_out, send_json

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    """WebSocket message types."""

    # Connection events
    CONNECTED = "connected"
    ERROR = "error"

    # Inbound chat frames
    JOIN = "join"
    MESSAGE = "message"
    EDIT = "edit"
    DELETE = "delete"
    REACT = "react"

    # Outbound chat events
    HISTORY = "history"
    NEW_MESSAGE = "new_message"
    MESSAGE_EDITED = "message_edited"
    MESSAGE_DELETED = "message_deleted"
    MESSAGE_REACTED = "message_reacted"

    # Portal-wide events
    NEW_ROOM = "new_room"


class ConnectionManager:
    """
    WebSocket connection manager with room-based delivery.

    A connection belongs to at most one chat room at a time; joining a new
    room leaves the previous one.
    """

    def __init__(self, registry: Optional[RoomRegistry] = None) -> None:
        self.registry = registry or RoomRegistry()
        # Map of websocket -> connection object
        self._connections: dict[WebSocket, WebSocketConnection] = {}

    @property
    def total_connections(self) -> int:
        """Get total number of active connections."""
        return len(self._connections)

    @property
    def connections(self) -> list[WebSocketConnection]:
        return list(self._connections.values())

    def get_connection(self, websocket: WebSocket) -> Optional[WebSocketConnection]:
        return self._connections.get(websocket)

    async def connect(
        self,
        websocket: WebSocket,
        principal=None,
    ) -> WebSocketConnection:
        """
        Accept a WebSocket connection and register it globally.

        Identity and room are unset until the client sends a join frame.

        Args:
            websocket: The WebSocket instance
            principal: TokenData of the authenticated user, if any

        Returns:
            WebSocketConnection: The connection wrapper object
        """
        await websocket.accept()

        connection = WebSocketConnection(websocket=websocket, principal=principal)
        self._connections[websocket] = connection

        logger.info(
            f"WebSocket connected: user={principal.username if principal else None}, "
            f"total_connections={self.total_connections}"
        )

        await self.send_personal(
            connection,
            {
                "type": MessageType.CONNECTED.value,
                "data": {"connected_at": connection.connected_at.isoformat()},
            },
        )
        return connection

    def register(self, connection: WebSocketConnection) -> None:
        """Track an already-accepted connection."""
        self._connections[connection.websocket] = connection

    def assign(
        self,
        connection: WebSocketConnection,
        identity: Optional[str],
        room_id: str,
        user_id: Optional[str] = None,
    ) -> None:
        """
        Set a connection's identity and move it into a room.

        Args:
            connection: The connection to update
            identity: Display name the connection acts under
            room_id: The room to join
            user_id: Client-supplied user identifier
        """
        room_id = str(room_id)
        if connection.room_id and connection.room_id != room_id:
            self.registry.leave(connection.room_id, connection)

        connection.identity = identity
        connection.user_id = user_id
        connection.room_id = room_id
        self.registry.join(room_id, connection)

        logger.info(
            f"{identity} joined room {room_id} "
            f"(room_size={self.registry.room_count(room_id)})"
        )

    async def disconnect(self, websocket: WebSocket) -> None:
        """
        Remove a socket from its room and the global set.

        Unknown sockets are ignored.
        """
        connection = self._connections.pop(websocket, None)
        if connection is None:
            return

        if connection.room_id:
            self.registry.leave(connection.room_id, connection)

        logger.info(
            f"WebSocket disconnected: identity={connection.identity}, "
            f"total_connections={self.total_connections}"
        )

    async def send_personal(
        self,
        connection: WebSocketConnection,
        message: dict[str, Any],
    ) -> bool:
        """Send a message to a specific connection."""
        return await send_json(connection, message)

    async def send_error(
        self,
        connection: WebSocketConnection,
        error: str,
        detail: str,
    ) -> bool:
        """Report a failed operation to the requesting connection only."""
        return await self.send_personal(
            connection,
            {
                "type": MessageType.ERROR.value,
                "data": {"error": error, "message": detail},
            },
        )

    async def broadcast_to_room(
        self,
        room_id: str,
        message: dict[str, Any],
        exclude: Optional[WebSocketConnection] = None,
    ) -> int:
        """Broadcast a message to every open connection in a room."""
        return await self.registry.broadcast(room_id, message, exclude=exclude)

    async def broadcast_to_all(self, message: dict[str, Any]) -> int:
        """
        Broadcast a message to every open connection, joined or not.

        Returns:
            int: Number of successful sends
        """
        success_count = await fan_out(set(self._connections.values()), message)
        logger.debug(
            f"Global broadcast {message.get('type')}: "
            f"{success_count}/{self.total_connections} successful"
        )
        return success_count


# Global connection manager instance
manager = ConnectionManager()


def get_connection_manager() -> ConnectionManager:
    """FastAPI dependency for the process-wide connection manager."""
    return manager
