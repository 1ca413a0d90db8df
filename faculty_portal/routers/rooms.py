"""Chat room API endpoints.

Listing is role filtered. Creating and deleting rooms is reserved for
administrators; a created room is announced to every connected client.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models.user import User
from ..schemas.message import MessageResponse
from ..schemas.room import RoomCreate, RoomResponse, serialize_room
from ..services.activity_service import ActivityAction, log_activity
from ..services.auth_service import get_current_user, require_admin
from ..services.message_service import MessageService
from ..services.room_service import RoomService
from ..websocket.manager import ConnectionManager, MessageType, get_connection_manager
from ..websocket.room_auth import invalidate_room_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["Rooms"])


async def get_accessible_room(
    room_id: UUID,
    db: AsyncSession,
    user: User,
):
    """
    Load a room the user may see.

    Raises:
        HTTPException: 404 if missing, 403 if outside the user's scope
    """
    room = await RoomService.get_room(db, room_id)
    if room is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Room not found",
        )
    if not RoomService.can_access(user, room):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to this room",
        )
    return room


@router.get(
    "",
    response_model=List[RoomResponse],
    summary="List visible rooms",
)
async def list_rooms(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[RoomResponse]:
    return await RoomService.list_rooms_for(db, current_user)


@router.post(
    "",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a room",
    description="Admin only. Broadcasts new_room to every connected client.",
    responses={
        201: {"description": "Room created"},
        403: {"description": "Admin access required"},
    },
)
async def create_room(
    room_data: RoomCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    connection_manager: ConnectionManager = Depends(get_connection_manager),
) -> RoomResponse:
    room = await RoomService.create_room(db, room_data, current_user)
    await log_activity(
        db,
        ActivityAction.ROOM_CREATED,
        user_id=current_user.id,
        details={"roomId": str(room.id), "roomName": room.name},
    )
    # Announce only what is durably stored
    await db.commit()

    await connection_manager.broadcast_to_all(
        {"type": MessageType.NEW_ROOM.value, "room": serialize_room(room)}
    )
    return room


@router.delete(
    "/{room_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a custom room",
    responses={
        400: {"description": "General and department rooms cannot be deleted"},
        403: {"description": "Admin access required"},
        404: {"description": "Room not found"},
    },
)
async def delete_room(
    room_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    room = await RoomService.get_room(db, room_id)
    if room is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Room not found",
        )

    await RoomService.delete_room(db, room)
    await log_activity(
        db,
        ActivityAction.ROOM_DELETED,
        user_id=current_user.id,
        details={"roomId": str(room_id)},
    )
    invalidate_room_cache(str(room_id))
    return {"message": "Room deleted"}


@router.get(
    "/{room_id}/messages",
    response_model=List[MessageResponse],
    summary="Get room history",
    description="Most recent messages of a room, oldest first.",
)
async def get_room_messages(
    room_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[MessageResponse]:
    await get_accessible_room(room_id, db, current_user)
    newest_first = await MessageService.get_recent_messages(
        db, room_id, limit or settings.chat_history_limit
    )
    return list(reversed(newest_first))
