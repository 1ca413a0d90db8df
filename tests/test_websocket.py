"""Tests for the /ws endpoint handshake and frame loop."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from faculty_portal.main import app
from faculty_portal.services.auth_service import create_access_token


@pytest.fixture
def ws_client():
    # No context manager: the lifespan (database checks, seeding) is not run
    return TestClient(app)


def student_token() -> str:
    return create_access_token(
        {
            "sub": str(uuid4()),
            "username": "alice",
            "role": "student",
            "department": "Physics",
        }
    )


class TestWebSocketHandshake:

    def test_missing_token_is_rejected(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect("/ws"):
                pass

        assert exc_info.value.code == 4001

    def test_invalid_token_is_rejected(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect("/ws?token=garbage"):
                pass

        assert exc_info.value.code == 4001

    def test_connection_survives_bad_frames(self, ws_client):
        with ws_client.websocket_connect(f"/ws?token={student_token()}") as websocket:
            assert websocket.receive_json()["type"] == "connected"

            websocket.send_bytes(b'{"type": "join"}')
            websocket.send_text("{not json")
            websocket.send_json({"type": "shout", "content": "ignored"})
            # Joining a room that does not exist is refused, the socket stays open
            websocket.send_json({"type": "join", "roomId": str(uuid4()), "userId": "alice"})

            frame = websocket.receive_json()
            assert frame["type"] == "error"
            assert frame["data"]["error"] == "UNAUTHORIZED"

    def test_oversized_frame_is_refused(self, ws_client):
        with ws_client.websocket_connect(f"/ws?token={student_token()}") as websocket:
            websocket.receive_json()

            websocket.send_text("x" * 70000)

            frame = websocket.receive_json()
            assert frame["data"]["error"] == "MESSAGE_TOO_LARGE"
