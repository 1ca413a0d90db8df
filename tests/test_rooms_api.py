"""Tests for the room API endpoints and the new_room broadcast."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from conftest import FakeWebSocket, auth_headers_for
from faculty_portal.models import ActivityLog, Message, Room


@pytest.mark.asyncio
class TestListRooms:
    """Tests for GET /api/rooms endpoint."""

    async def test_student_sees_general_and_own_department(
        self, client: AsyncClient, rooms, physics_student
    ):
        response = await client.get("/api/rooms", headers=auth_headers_for(physics_student))

        assert response.status_code == 200
        assert {r["name"] for r in response.json()} == {"General", "Physics"}

    async def test_admin_sees_every_room(self, client: AsyncClient, rooms, admin_user):
        response = await client.get("/api/rooms", headers=auth_headers_for(admin_user))

        assert {r["name"] for r in response.json()} == {"General", "Physics", "Chemistry"}
        general = next(r for r in response.json() if r["name"] == "General")
        assert general["type"] == "general"
        assert general["createdBy"] == "system"

    async def test_requires_authentication(self, client: AsyncClient, rooms):
        response = await client.get("/api/rooms")

        assert response.status_code == 401


@pytest.mark.asyncio
class TestCreateRoom:
    """Tests for POST /api/rooms endpoint."""

    async def test_admin_creates_room_and_everyone_hears(
        self, client: AsyncClient, rooms, admin_user, connection_manager, session_factory
    ):
        joined, idle = FakeWebSocket(), FakeWebSocket()
        connection = await connection_manager.connect(joined)
        connection_manager.assign(connection, "alice", str(rooms["General"].id))
        await connection_manager.connect(idle)

        response = await client.post(
            "/api/rooms",
            json={"name": "Exam Committee"},
            headers=auth_headers_for(admin_user),
        )

        assert response.status_code == 201
        room = response.json()
        assert room["type"] == "custom"
        assert room["createdBy"] == "admin"
        for websocket in (joined, idle):
            events = websocket.of_type("new_room")
            assert len(events) == 1
            assert events[0]["room"]["id"] == room["id"]
            assert events[0]["room"]["name"] == "Exam Committee"

        async with session_factory() as db:
            actions = (await db.execute(select(ActivityLog.action))).scalars().all()
        assert "ROOM_CREATED" in actions

    async def test_non_admin_cannot_create(
        self, client: AsyncClient, rooms, make_user, connection_manager
    ):
        governor = await make_user("dean", role="faculty-governor")
        websocket = FakeWebSocket()
        await connection_manager.connect(websocket)

        response = await client.post(
            "/api/rooms",
            json={"name": "Secret"},
            headers=auth_headers_for(governor),
        )

        assert response.status_code == 403
        assert websocket.of_type("new_room") == []

    async def test_second_general_room_is_rejected(
        self, client: AsyncClient, rooms, admin_user
    ):
        response = await client.post(
            "/api/rooms",
            json={"name": "Another General", "type": "general"},
            headers=auth_headers_for(admin_user),
        )

        assert response.status_code == 400


@pytest.mark.asyncio
class TestDeleteRoom:
    """Tests for DELETE /api/rooms/{id} endpoint."""

    @pytest.mark.parametrize("name", ["General", "Physics"])
    async def test_default_rooms_cannot_be_deleted(
        self, client: AsyncClient, rooms, admin_user, name
    ):
        response = await client.delete(
            f"/api/rooms/{rooms[name].id}", headers=auth_headers_for(admin_user)
        )

        assert response.status_code == 400

    async def test_delete_custom_room_removes_messages(
        self, client: AsyncClient, rooms, admin_user, db_session, session_factory
    ):
        room = Room(name="Temporary", type="custom", created_by="admin")
        db_session.add(room)
        await db_session.commit()
        db_session.add(
            Message(room_id=room.id, sender="admin", content="bye", reactions={}, edited=False)
        )
        await db_session.commit()

        response = await client.delete(
            f"/api/rooms/{room.id}", headers=auth_headers_for(admin_user)
        )

        assert response.status_code == 200
        async with session_factory() as db:
            assert await db.get(Room, room.id) is None
            remaining = (
                await db.execute(select(Message).where(Message.room_id == room.id))
            ).scalars().all()
        assert remaining == []

    async def test_delete_missing_room(self, client: AsyncClient, rooms, admin_user):
        response = await client.delete(
            f"/api/rooms/{uuid4()}", headers=auth_headers_for(admin_user)
        )

        assert response.status_code == 404

    async def test_student_cannot_delete(self, client: AsyncClient, rooms, physics_student):
        response = await client.delete(
            f"/api/rooms/{rooms['General'].id}", headers=auth_headers_for(physics_student)
        )

        assert response.status_code == 403


@pytest.mark.asyncio
class TestRoomMessages:
    """Tests for GET /api/rooms/{id}/messages endpoint."""

    async def test_history_oldest_first_with_limit(
        self, client: AsyncClient, rooms, physics_student, db_session
    ):
        room = rooms["Physics"]
        base = datetime.utcnow() - timedelta(minutes=10)
        for i in range(5):
            db_session.add(
                Message(
                    room_id=room.id,
                    sender="alice",
                    content=f"m{i}",
                    reactions={},
                    edited=False,
                    created_at=base + timedelta(seconds=i),
                )
            )
        await db_session.commit()

        response = await client.get(
            f"/api/rooms/{room.id}/messages",
            params={"limit": 3},
            headers=auth_headers_for(physics_student),
        )

        assert response.status_code == 200
        data = response.json()
        assert [m["content"] for m in data] == ["m2", "m3", "m4"]
        assert "timestamp" in data[0]
        assert data[0]["roomId"] == str(room.id)

    async def test_other_department_history_is_forbidden(
        self, client: AsyncClient, rooms, chemistry_student
    ):
        response = await client.get(
            f"/api/rooms/{rooms['Physics'].id}/messages",
            headers=auth_headers_for(chemistry_student),
        )

        assert response.status_code == 403
