"""API routers package.

This package contains all FastAPI routers for the application.
Each router handles a specific domain of the API.
"""

from .admin import router as admin_router
from .auth import router as auth_router
from .chat import router as chat_router
from .documents import router as documents_router
from .notifications import router as notifications_router
from .portal import router as portal_router
from .push import router as push_router
from .rooms import router as rooms_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "chat_router",
    "documents_router",
    "notifications_router",
    "portal_router",
    "push_router",
    "rooms_router",
    "users_router",
]
