"""Room and department management.

Also seeds the organization on startup: one row per configured department,
the single general room, one room per department and, optionally, a
bootstrap administrator.
"""

import logging
from typing import Optional, Sequence
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models.department import Department
from ..models.room import Room, RoomType
from ..models.user import User, UserRole
from ..schemas.room import RoomCreate
from ..utils.security import get_password_hash
from .message_service import MessageService

logger = logging.getLogger(__name__)

SYSTEM_CREATOR = "system"


class RoomService:
    """Service for listing, creating and deleting chat rooms."""

    @staticmethod
    async def get_room(db: AsyncSession, room_id: UUID) -> Optional[Room]:
        return await db.get(Room, room_id)

    @staticmethod
    async def list_rooms_for(db: AsyncSession, user: User) -> Sequence[Room]:
        """
        Rooms a user may see.

        Admins and faculty governors see every room; everyone else sees the
        general room and the rooms of their own department.
        """
        query = select(Room).order_by(Room.created_at, Room.name)
        if not user.is_elevated:
            query = query.where(
                or_(
                    Room.type == RoomType.GENERAL.value,
                    Room.department_name == user.department_name,
                )
            )
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    def can_access(user: User, room: Room) -> bool:
        if user.is_elevated or room.type == RoomType.GENERAL.value:
            return True
        return room.department_name is not None and room.department_name == user.department_name

    @staticmethod
    async def create_room(db: AsyncSession, data: RoomCreate, creator: User) -> Room:
        """
        Create a room on behalf of an administrator.

        Raises:
            HTTPException: 400 if a second general room is requested
        """
        if data.type == RoomType.GENERAL.value:
            existing = await db.execute(
                select(Room.id).where(Room.type == RoomType.GENERAL.value)
            )
            if existing.first() is not None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="A general room already exists",
                )

        room = Room(
            name=data.name.strip(),
            type=data.type,
            department_name=data.department_name or None,
            created_by=creator.username,
        )
        db.add(room)
        await db.flush()
        await db.refresh(room)

        logger.info(f"Room created: id={room.id}, name={room.name}, type={room.type}")
        return room

    @staticmethod
    async def delete_room(db: AsyncSession, room: Room) -> None:
        """
        Delete a custom room and its messages.

        Raises:
            HTTPException: 400 for general and department rooms
        """
        if room.is_protected:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete default rooms",
            )

        removed = await MessageService.delete_room_messages(db, room.id)
        await db.delete(room)
        await db.flush()
        logger.info(f"Room deleted: id={room.id} ({removed} messages removed)")

    @staticmethod
    async def list_departments(db: AsyncSession) -> Sequence[Department]:
        result = await db.execute(select(Department).order_by(Department.name))
        return result.scalars().all()


async def ensure_default_rooms(
    db: AsyncSession,
    departments: Optional[list[str]] = None,
) -> int:
    """
    Create missing departments, the general room and department rooms.

    Safe to run on every startup.

    Returns:
        Number of rows created
    """
    departments = settings.departments if departments is None else departments
    created = 0

    existing_departments = set(
        (await db.execute(select(Department.name))).scalars().all()
    )
    for name in departments:
        if name not in existing_departments:
            db.add(Department(name=name))
            created += 1

    general = await db.execute(select(Room.id).where(Room.type == RoomType.GENERAL.value))
    if general.first() is None:
        db.add(
            Room(
                name=settings.general_room_name,
                type=RoomType.GENERAL.value,
                created_by=SYSTEM_CREATOR,
            )
        )
        created += 1

    rooms_with_department = set(
        (
            await db.execute(
                select(Room.department_name).where(Room.type == RoomType.DEPARTMENT.value)
            )
        ).scalars().all()
    )
    for name in departments:
        if name not in rooms_with_department:
            db.add(
                Room(
                    name=name,
                    type=RoomType.DEPARTMENT.value,
                    department_name=name,
                    created_by=SYSTEM_CREATOR,
                )
            )
            created += 1

    await db.commit()
    if created:
        logger.info(f"Organization seeded: {created} rows created")
    return created


async def ensure_admin_user(
    db: AsyncSession,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> Optional[User]:
    """Create the bootstrap admin from settings if it does not exist yet."""
    username = username or settings.admin_username
    password = password or settings.admin_password
    if not username or not password:
        return None

    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is not None:
        return user

    user = User(
        username=username,
        password_hash=get_password_hash(password),
        role=UserRole.ADMIN.value,
    )
    db.add(user)
    await db.commit()
    logger.info(f"Bootstrap admin {username} created")
    return user
