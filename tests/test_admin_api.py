"""Tests for admin, portal, profile and push subscription endpoints."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from conftest import auth_headers_for
from faculty_portal.models import ActivityLog, Message, PushSubscription, User

SUBSCRIPTION = {
    "endpoint": "https://push.example.com/sub/abc",
    "keys": {"p256dh": "client-key", "auth": "client-auth"},
}


@pytest.mark.asyncio
class TestAdminUsers:
    """Tests for /api/admin/users endpoints."""

    async def test_list_users(self, client: AsyncClient, admin_user, physics_student):
        response = await client.get("/api/admin/users", headers=auth_headers_for(admin_user))

        assert response.status_code == 200
        assert [u["username"] for u in response.json()] == ["admin", "alice"]

    async def test_list_users_requires_admin(self, client: AsyncClient, physics_student):
        response = await client.get(
            "/api/admin/users", headers=auth_headers_for(physics_student)
        )

        assert response.status_code == 403

    async def test_delete_user_is_logged(
        self, client: AsyncClient, admin_user, physics_student, db_session, session_factory
    ):
        db_session.add(
            PushSubscription(
                user_id=physics_student.id,
                endpoint="https://push.example.com/a",
                p256dh="k",
                auth="a",
            )
        )
        await db_session.commit()

        response = await client.delete(
            f"/api/admin/users/{physics_student.id}", headers=auth_headers_for(admin_user)
        )

        assert response.status_code == 200
        async with session_factory() as db:
            assert await db.get(User, physics_student.id) is None
            assert (await db.execute(select(PushSubscription))).scalars().all() == []
            entry = (
                await db.execute(select(ActivityLog).where(ActivityLog.action == "USER_DELETED"))
            ).scalar_one()
        assert entry.details["deletedUsername"] == "alice"

    async def test_admins_cannot_be_deleted(self, client: AsyncClient, admin_user, make_user):
        other_admin = await make_user("root", role="admin")

        response = await client.delete(
            f"/api/admin/users/{other_admin.id}", headers=auth_headers_for(admin_user)
        )

        assert response.status_code == 400

    async def test_delete_missing_user(self, client: AsyncClient, admin_user):
        response = await client.delete(
            f"/api/admin/users/{uuid4()}", headers=auth_headers_for(admin_user)
        )

        assert response.status_code == 404


@pytest.mark.asyncio
class TestAdminMaintenance:
    """Tests for logs and the on-demand image sweep."""

    async def test_run_image_sweep(
        self, client: AsyncClient, rooms, admin_user, db_session, mock_storage
    ):
        db_session.add(
            Message(
                room_id=rooms["General"].id,
                sender="alice",
                content="[Image: old.png]",
                image_url="rooms/x/old.png",
                image_expiry=datetime.utcnow() - timedelta(hours=1),
                reactions={},
                edited=False,
            )
        )
        await db_session.commit()

        response = await client.post(
            "/api/admin/run-image-sweep", headers=auth_headers_for(admin_user)
        )

        assert response.status_code == 200
        assert response.json() == {"status": "completed", "cleared": 1, "storage_errors": 0}
        mock_storage.delete_image.assert_called_once_with("rooms/x/old.png")

    async def test_logs_newest_first(self, client: AsyncClient, rooms, admin_user):
        headers = auth_headers_for(admin_user)
        await client.post("/api/rooms", json={"name": "One"}, headers=headers)
        await client.post("/api/admin/run-image-sweep", headers=headers)

        response = await client.get("/api/admin/logs", headers=headers)

        assert response.status_code == 200
        assert [e["action"] for e in response.json()] == ["IMAGE_SWEEP", "ROOM_CREATED"]
        assert response.json()[0]["userId"] == str(admin_user.id)


@pytest.mark.asyncio
class TestPortal:
    """Tests for config, departments and profiles."""

    async def test_config(self, client: AsyncClient):
        response = await client.get("/api/config")

        assert response.status_code == 200
        data = response.json()
        assert data["imageExpiryHours"] == 3
        assert data["chatHistoryLimit"] == 50
        assert data["aiMarker"] == "@ai"
        assert data["pushEnabled"] is False

    async def test_departments(self, client: AsyncClient, rooms):
        response = await client.get("/api/departments")

        assert [d["name"] for d in response.json()] == ["Chemistry", "Physics"]

    async def test_profile(self, client: AsyncClient, physics_student, chemistry_student):
        response = await client.get(
            "/api/users/profile/alice", headers=auth_headers_for(chemistry_student)
        )

        assert response.status_code == 200
        assert response.json()["departmentName"] == "Physics"

    async def test_unknown_profile(self, client: AsyncClient, physics_student):
        response = await client.get(
            "/api/users/profile/nobody", headers=auth_headers_for(physics_student)
        )

        assert response.status_code == 404

    async def test_root_and_health(self, client: AsyncClient):
        root = await client.get("/")
        health = await client.get("/health")

        assert root.json()["status"] == "healthy"
        assert health.status_code == 200
        assert "connections" in health.json()["websocket"]


@pytest.mark.asyncio
class TestPushSubscriptions:
    """Tests for /api/push endpoints."""

    async def test_vapid_key_is_null_when_disabled(self, client: AsyncClient):
        response = await client.get("/api/push/vapid-public-key")

        assert response.status_code == 200
        assert response.json() == {"publicKey": None}

    async def test_subscribe_and_unsubscribe(
        self, client: AsyncClient, physics_student, session_factory
    ):
        headers = auth_headers_for(physics_student)

        response = await client.post("/api/push/subscribe", json=SUBSCRIPTION, headers=headers)
        assert response.status_code == 201

        response = await client.request(
            "DELETE",
            "/api/push/subscribe",
            json={"endpoint": SUBSCRIPTION["endpoint"]},
            headers=headers,
        )
        assert response.json() == {"success": True, "removed": 1}

        async with session_factory() as db:
            assert (await db.execute(select(PushSubscription))).scalars().all() == []

    async def test_resubscribe_moves_endpoint(
        self, client: AsyncClient, physics_student, chemistry_student, session_factory
    ):
        await client.post(
            "/api/push/subscribe", json=SUBSCRIPTION, headers=auth_headers_for(physics_student)
        )
        await client.post(
            "/api/push/subscribe", json=SUBSCRIPTION, headers=auth_headers_for(chemistry_student)
        )

        async with session_factory() as db:
            subscriptions = (await db.execute(select(PushSubscription))).scalars().all()
        assert len(subscriptions) == 1
        assert subscriptions[0].user_id == chemistry_student.id
