"""Shared pytest fixtures for backend tests."""

import json
import os
import sys
from typing import AsyncGenerator
from unittest.mock import MagicMock
from uuid import uuid4

# Settings are read at import time, configure them before importing the app
os.environ.setdefault("DB_SERVER", "localhost")
os.environ.setdefault("DB_NAME", "faculty_portal_test")
os.environ.setdefault("DB_USER", "test")
os.environ.setdefault("DB_PASSWORD", "test")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("MINIO_ENDPOINT", "localhost:9000")
os.environ.setdefault("MINIO_ACCESS_KEY", "minioadmin")
os.environ.setdefault("MINIO_SECRET_KEY", "minioadmin")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-jwt-signing")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from starlette.websockets import WebSocketState

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faculty_portal.database import Base, get_db, get_session_factory
from faculty_portal.main import app
from faculty_portal.models import Room, User
from faculty_portal.models.user import UserRole
from faculty_portal.services.ai_service import AIService, get_ai_service
from faculty_portal.services.auth_service import TokenData, create_token_for_user
from faculty_portal.services.minio_service import get_minio_service
from faculty_portal.services.room_service import ensure_default_rooms
from faculty_portal.websocket.handlers import MessageLifecycle, get_message_lifecycle
from faculty_portal.websocket.manager import ConnectionManager, get_connection_manager
from faculty_portal.websocket.room_auth import _scope_cache, check_room_access

TEST_DEPARTMENTS = ["Physics", "Chemistry"]
TEST_PASSWORD = "TestPassword123!"


def get_test_password_hash(password: str) -> str:
    """
    Generate a password hash for testing.

    Uses bcrypt directly to avoid passlib version detection issues.
    """
    import bcrypt
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


class FakeWebSocket:
    """Records outbound frames; optionally fails every send like a dead socket."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.accepted = False
        self.fail = fail
        self.client_state = WebSocketState.CONNECTED

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    def of_type(self, message_type: str) -> list[dict]:
        return [m for m in self.sent if m.get("type") == message_type]


def principal_for(user: User) -> TokenData:
    """Token payload a connection of this user would carry."""
    return TokenData(
        user_id=str(user.id),
        username=user.username,
        role=user.role,
        department_name=user.department_name,
    )


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def engine():
    """Create an in-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def clear_room_scope_cache():
    _scope_cache.clear()
    yield
    _scope_cache.clear()


# =============================================================================
# Organization
# =============================================================================


@pytest_asyncio.fixture
async def rooms(db_session: AsyncSession) -> dict[str, Room]:
    """Seed departments and default rooms, keyed by room name."""
    await ensure_default_rooms(db_session, TEST_DEPARTMENTS)
    result = await db_session.execute(select(Room))
    return {room.name: room for room in result.scalars().all()}


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory creating users with a given role and department."""

    async def _make_user(
        username: str = None,
        role: str = UserRole.STUDENT.value,
        department_name: str = None,
    ) -> User:
        user = User(
            id=uuid4(),
            username=username or f"user_{uuid4().hex[:8]}",
            password_hash=get_test_password_hash(TEST_PASSWORD),
            role=role,
            department_name=department_name,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest_asyncio.fixture
async def admin_user(make_user) -> User:
    return await make_user("admin", role=UserRole.ADMIN.value)


@pytest_asyncio.fixture
async def physics_student(make_user) -> User:
    return await make_user("alice", department_name="Physics")


@pytest_asyncio.fixture
async def chemistry_student(make_user) -> User:
    return await make_user("bob", department_name="Chemistry")


def auth_headers_for(user: User) -> dict:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}


# =============================================================================
# WebSocket layer
# =============================================================================


@pytest.fixture
def connection_manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def lifecycle(connection_manager, session_factory) -> MessageLifecycle:
    """Message lifecycle bound to the test database and manager."""

    async def authorize(principal, room_id):
        return await check_room_access(principal, room_id, session_factory=session_factory)

    return MessageLifecycle(
        connection_manager=connection_manager,
        session_factory=session_factory,
        room_authorizer=authorize,
        history_limit=50,
    )


@pytest.fixture
def join_room(connection_manager, lifecycle):
    """Connect a fake socket for a user and join it to a room."""

    async def _join(user: User, room: Room, fail: bool = False):
        websocket = FakeWebSocket(fail=fail)
        connection = await connection_manager.connect(websocket, principal_for(user))
        await lifecycle.route(
            connection,
            {"type": "join", "roomId": str(room.id), "userId": user.username},
        )
        return connection, websocket

    return _join


# =============================================================================
# HTTP client
# =============================================================================


@pytest.fixture
def mock_storage() -> MagicMock:
    """Create a mock MinIO service."""
    storage = MagicMock()
    storage.generate_object_name.side_effect = (
        lambda room_id, filename: f"rooms/{room_id}/abcd1234_{filename}"
    )
    storage.generate_document_name.side_effect = (
        lambda department, filename: f"documents/{department or 'general'}/abcd1234_{filename}"
    )
    storage.upload_image.side_effect = lambda key, data, content_type: key
    storage.upload_document.side_effect = lambda key, data, content_type: key
    storage.delete_image.return_value = True
    storage.get_presigned_url.return_value = "http://minio.local/chat-images/signed"
    return storage


@pytest.fixture
def ai_replies() -> list[dict]:
    """Requests received by the fake AI endpoint."""
    return []


@pytest.fixture
def ai_service(ai_replies) -> AIService:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        ai_replies.append(body)
        return httpx.Response(200, json={"response": f"echo: {body['message']}"})

    return AIService(
        endpoint="http://ai.local/chat",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


@pytest_asyncio.fixture
async def client(
    session_factory,
    connection_manager,
    lifecycle,
    mock_storage,
    ai_service,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create a test client with dependency overrides."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_connection_manager] = lambda: connection_manager
    app.dependency_overrides[get_message_lifecycle] = lambda: lifecycle
    app.dependency_overrides[get_minio_service] = lambda: mock_storage
    app.dependency_overrides[get_ai_service] = lambda: ai_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
