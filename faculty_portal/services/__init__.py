"""Business logic services."""

from .auth_service import (
    authenticate_user,
    create_access_token,
    create_user,
    get_current_user,
    get_user_by_username,
    require_admin,
)
from .message_service import MessageService
from .notification_service import NotificationService
from .room_service import RoomService

__all__ = [
    "MessageService",
    "NotificationService",
    "RoomService",
    "authenticate_user",
    "create_access_token",
    "create_user",
    "get_current_user",
    "get_user_by_username",
    "require_admin",
]
