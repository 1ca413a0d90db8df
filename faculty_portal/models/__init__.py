"""SQLAlchemy ORM models package."""

from .activity_log import ActivityLog
from .department import Department
from .document import Document
from .message import Message
from .notification import Notification
from .push_subscription import PushSubscription
from .room import Room
from .user import User

__all__ = [
    "ActivityLog",
    "Department",
    "Document",
    "Message",
    "Notification",
    "PushSubscription",
    "Room",
    "User",
]
