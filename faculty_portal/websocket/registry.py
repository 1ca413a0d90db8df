"""In-memory room membership for live WebSocket connections.

Rooms are created lazily on first join and pruned as soon as their last
member leaves. All mutations happen on the event loop and never span an
await, so no lock is needed.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

if TYPE_CHECKING:
    from ..services.auth_service import TokenData

logger = logging.getLogger(__name__)


@dataclass
class WebSocketConnection:
    """
    A live socket plus the identity it acts under.

    principal comes from the access token presented at connect time.
    identity and room_id are assigned by the join frame.
    """

    websocket: WebSocket
    principal: Optional["TokenData"] = None
    identity: Optional[str] = None
    user_id: Optional[str] = None
    room_id: Optional[str] = None
    connected_at: datetime = field(default_factory=datetime.utcnow)

    def __hash__(self) -> int:
        """Hash by websocket id for set operations."""
        return id(self.websocket)

    def __eq__(self, other: object) -> bool:
        """Equality check by websocket id."""
        if not isinstance(other, WebSocketConnection):
            return False
        return id(self.websocket) == id(other.websocket)

    @property
    def is_open(self) -> bool:
        return getattr(self.websocket, "client_state", None) == WebSocketState.CONNECTED


async def send_json(connection: WebSocketConnection, message: dict[str, Any]) -> bool:
    """
    Send one JSON frame, swallowing transport errors.

    Returns:
        bool: True if sent successfully, False otherwise
    """
    try:
        await connection.websocket.send_json(message)
        return True
    except Exception as e:
        logger.debug(f"Send failed for connection {id(connection.websocket)}: {e}")
        return False


async def fan_out(
    connections: set[WebSocketConnection],
    message: dict[str, Any],
    exclude: Optional[WebSocketConnection] = None,
) -> int:
    """
    Send a message to every open connection of a set concurrently.

    A failing or closed socket never blocks delivery to the others.

    Returns:
        int: Number of successful sends
    """
    targets = [c for c in connections if c is not exclude and c.is_open]
    if not targets:
        return 0

    results = await asyncio.gather(
        *(send_json(conn, message) for conn in targets),
        return_exceptions=True,
    )
    return sum(1 for r in results if r is True)


class RoomRegistry:
    """Mapping of room id to the set of connections currently in it."""

    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocketConnection]] = {}

    @property
    def total_rooms(self) -> int:
        """Get total number of non-empty rooms."""
        return len(self._rooms)

    def room_count(self, room_id: str) -> int:
        """Get number of connections in a room."""
        return len(self._rooms.get(str(room_id), ()))

    def members(self, room_id: str) -> set[WebSocketConnection]:
        """Snapshot of a room's members."""
        return set(self._rooms.get(str(room_id), ()))

    def rooms_for(self, connection: WebSocketConnection) -> list[str]:
        return [room_id for room_id, conns in self._rooms.items() if connection in conns]

    def join(self, room_id: str, connection: WebSocketConnection) -> None:
        """Add a connection to a room. Joining twice is a no-op."""
        self._rooms.setdefault(str(room_id), set()).add(connection)

    def leave(self, room_id: str, connection: WebSocketConnection) -> None:
        """Remove a connection from a room, pruning the room when empty."""
        key = str(room_id)
        members = self._rooms.get(key)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self._rooms[key]

    async def broadcast(
        self,
        room_id: str,
        message: dict[str, Any],
        exclude: Optional[WebSocketConnection] = None,
    ) -> int:
        """
        Broadcast a message to all open connections in a room.

        Args:
            room_id: The room to broadcast to
            message: The message to send
            exclude: Optional connection to skip

        Returns:
            int: Number of successful sends
        """
        members = self.members(room_id)
        if not members:
            return 0

        success_count = await fan_out(members, message, exclude=exclude)
        logger.debug(
            f"Broadcast {message.get('type')} to room {room_id}: "
            f"{success_count}/{len(members)} successful"
        )
        return success_count
