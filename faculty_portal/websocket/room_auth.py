"""Room authorization for WebSocket connections.

Admins and faculty governors may join any room. Everyone else may join
the general room and the rooms of their own department.

Room scope (type and department) rarely changes, so it is cached with a
TTL to keep reconnection storms off the database.
"""

import logging
import time
from typing import Callable, Optional, Tuple
from uuid import UUID

from sqlalchemy import select

from ..database import async_session_maker
from ..models.room import Room, RoomType
from ..models.user import ELEVATED_ROLES

logger = logging.getLogger(__name__)

# Cache room_id -> ((type, department_name), expires_at)
_scope_cache: dict[str, Tuple[Tuple[str, Optional[str]], float]] = {}
_SCOPE_CACHE_TTL = 300  # 5 minutes
_SCOPE_CACHE_MAX_SIZE = 10000


def _get_cached_scope(room_id: str) -> Optional[Tuple[str, Optional[str]]]:
    cached = _scope_cache.get(room_id)
    if cached is None:
        return None
    scope, expires_at = cached
    if time.time() > expires_at:
        _scope_cache.pop(room_id, None)
        return None
    return scope


def _set_cached_scope(room_id: str, scope: Tuple[str, Optional[str]]) -> None:
    if len(_scope_cache) >= _SCOPE_CACHE_MAX_SIZE:
        _scope_cache.clear()
    _scope_cache[room_id] = (scope, time.time() + _SCOPE_CACHE_TTL)


def invalidate_room_cache(room_id: str) -> None:
    """Drop a cached room scope (call when a room is deleted)."""
    _scope_cache.pop(str(room_id), None)


async def _load_room_scope(
    room_id: str,
    session_factory: Callable,
) -> Optional[Tuple[str, Optional[str]]]:
    async with session_factory() as db:
        result = await db.execute(
            select(Room.type, Room.department_name).where(Room.id == UUID(room_id))
        )
        row = result.first()
    if row is None:
        return None
    return row[0], row[1]


async def check_room_access(
    principal,
    room_id: str,
    session_factory: Optional[Callable] = None,
) -> bool:
    """
    Check if a connected user may join a room.

    Args:
        principal: TokenData of the connection, or None for anonymous
        room_id: The room identifier
        session_factory: Session factory (defaults to the app's)

    Returns:
        bool: True if the user has access, False otherwise
    """
    room_id = str(room_id)
    if principal is None:
        logger.warning(f"[Room Auth] DENIED - anonymous join to room {room_id}")
        return False

    scope = _get_cached_scope(room_id)
    if scope is None:
        try:
            scope = await _load_room_scope(room_id, session_factory or async_session_maker)
        except Exception as e:
            logger.error(f"[Room Auth] ERROR loading room {room_id}: {e}")
            return False
        if scope is None:
            logger.warning(f"[Room Auth] DENIED - unknown room {room_id}")
            return False
        _set_cached_scope(room_id, scope)

    if principal.role in ELEVATED_ROLES:
        return True

    room_type, department_name = scope
    if room_type == RoomType.GENERAL.value:
        return True
    allowed = department_name is not None and department_name == principal.department_name
    if not allowed:
        logger.warning(
            f"[Room Auth] DENIED - {principal.username} ({principal.department_name}) "
            f"to room {room_id} ({department_name})"
        )
    return allowed
