"""WebSocket module for real-time chat delivery."""

from .frames import InboundFrame, parse_frame
from .handlers import (
    BroadcastResult,
    ErrorCode,
    MessageLifecycle,
    lifecycle,
    route_incoming_message,
)
from .manager import ConnectionManager, MessageType, manager
from .registry import RoomRegistry, WebSocketConnection
from .room_auth import check_room_access

__all__ = [
    # Registry / manager
    "ConnectionManager",
    "MessageType",
    "RoomRegistry",
    "WebSocketConnection",
    "manager",
    # Frames
    "InboundFrame",
    "parse_frame",
    # Handlers
    "BroadcastResult",
    "ErrorCode",
    "MessageLifecycle",
    "lifecycle",
    "route_incoming_message",
    # Room authorization
    "check_room_access",
]
