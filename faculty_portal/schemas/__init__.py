"""Pydantic schemas package for request/response validation."""

from .document import DocumentResponse
from .message import AIChatRequest, MessageFormatting, MessageResponse
from .notification import (
    NotificationCommentCreate,
    NotificationCreate,
    NotificationReact,
    NotificationResponse,
)
from .push import PushSubscriptionCreate, PushUnsubscribe, VapidPublicKey
from .room import RoomCreate, RoomResponse
from .user import UserCreate, UserResponse

__all__ = [
    "AIChatRequest",
    "DocumentResponse",
    "MessageFormatting",
    "MessageResponse",
    "NotificationCommentCreate",
    "NotificationCreate",
    "NotificationReact",
    "NotificationResponse",
    "PushSubscriptionCreate",
    "PushUnsubscribe",
    "RoomCreate",
    "RoomResponse",
    "UserCreate",
    "UserResponse",
    "VapidPublicKey",
]
