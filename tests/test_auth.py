"""Unit tests for authentication endpoints and token handling."""

from datetime import timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient

from conftest import TEST_PASSWORD, auth_headers_for
from faculty_portal.models import User
from faculty_portal.services.auth_service import (
    create_access_token,
    create_token_for_user,
    decode_access_token,
)


class TestTokens:
    """Tests for JWT creation and decoding."""

    def test_token_carries_identity_claims(self):
        user = User(id=uuid4(), username="alice", role="student", department_name="Physics")

        token_data = decode_access_token(create_token_for_user(user))

        assert token_data.user_id == str(user.id)
        assert token_data.username == "alice"
        assert token_data.role == "student"
        assert token_data.department_name == "Physics"

    def test_invalid_token_decodes_to_none(self):
        assert decode_access_token("not-a-token") is None

    def test_expired_token_decodes_to_none(self):
        token = create_access_token({"sub": "x"}, expires_delta=timedelta(seconds=-1))

        assert decode_access_token(token) is None

    def test_token_without_subject_decodes_to_none(self):
        assert decode_access_token(create_access_token({"username": "alice"})) is None


@pytest.mark.asyncio
class TestSignup:
    """Tests for POST /auth/signup endpoint."""

    async def test_signup_success(self, client: AsyncClient):
        response = await client.post(
            "/auth/signup",
            json={
                "username": "carol",
                "password": "Sup3rSecret!",
                "departmentName": "Physics",
                "regNumber": "PHY-001",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "carol"
        assert data["role"] == "student"
        assert data["departmentName"] == "Physics"
        assert data["regNumber"] == "PHY-001"
        assert "password" not in data
        assert "passwordHash" not in data

    async def test_signup_duplicate_username(self, client: AsyncClient, physics_student):
        response = await client.post(
            "/auth/signup",
            json={"username": "alice", "password": "Sup3rSecret!"},
        )

        assert response.status_code == 400

    async def test_signup_governor_requires_department(self, client: AsyncClient):
        response = await client.post(
            "/auth/signup",
            json={
                "username": "gov",
                "password": "Sup3rSecret!",
                "role": "department-governor",
            },
        )

        assert response.status_code == 400

    async def test_signup_cannot_create_admin(self, client: AsyncClient):
        response = await client.post(
            "/auth/signup",
            json={"username": "sneaky", "password": "Sup3rSecret!", "role": "admin"},
        )

        assert response.status_code == 422


@pytest.mark.asyncio
class TestLogin:
    """Tests for POST /auth/login endpoint."""

    async def test_login_success(self, client: AsyncClient, physics_student):
        response = await client.post(
            "/auth/login",
            data={"username": "alice", "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        token_data = decode_access_token(data["access_token"])
        assert token_data.username == "alice"
        assert token_data.department_name == "Physics"

    async def test_login_wrong_password(self, client: AsyncClient, physics_student):
        response = await client.post(
            "/auth/login",
            data={"username": "alice", "password": "wrong-password"},
        )

        assert response.status_code == 401

    async def test_login_unknown_user(self, client: AsyncClient):
        response = await client.post(
            "/auth/login",
            data={"username": "nobody", "password": TEST_PASSWORD},
        )

        assert response.status_code == 401


@pytest.mark.asyncio
class TestCurrentUser:
    """Tests for GET /auth/me and POST /auth/logout."""

    async def test_me(self, client: AsyncClient, physics_student):
        response = await client.get("/auth/me", headers=auth_headers_for(physics_student))

        assert response.status_code == 200
        assert response.json()["username"] == "alice"

    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get("/auth/me")

        assert response.status_code == 401

    async def test_me_rejects_bad_token(self, client: AsyncClient):
        response = await client.get(
            "/auth/me", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401

    async def test_logout(self, client: AsyncClient, physics_student):
        response = await client.post("/auth/logout", headers=auth_headers_for(physics_student))

        assert response.status_code == 200
        assert response.json()["user_id"] == str(physics_student.id)
