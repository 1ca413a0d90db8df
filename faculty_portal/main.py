"""FastAPI application entry point."""

import asyncio
import json
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError

from .config import settings
from .database import async_session_maker, check_connection
from .routers import (
    admin_router,
    auth_router,
    chat_router,
    documents_router,
    notifications_router,
    portal_router,
    push_router,
    rooms_router,
    users_router,
)
from .services.auth_service import decode_access_token
from .services.minio_service import minio_service
from .services.room_service import ensure_admin_user, ensure_default_rooms
from .websocket import manager, route_incoming_message

# Configure logging to show errors
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGES = 100  # Max frames per window
RATE_LIMIT_WINDOW = 10  # Window in seconds


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown tasks."""
    # Startup
    logger.info("Checking database connectivity...")
    if not await check_connection():
        raise RuntimeError("Database is unreachable")

    logger.info("Seeding departments and default rooms...")
    async with async_session_maker() as db:
        await ensure_default_rooms(db)
        await ensure_admin_user(db)

    logger.info("Ensuring object storage bucket exists...")
    try:
        await asyncio.to_thread(minio_service.ensure_bucket_exists)
    except Exception as e:
        logger.warning(f"MinIO unavailable, image and document uploads will fail: {e}")

    yield

    # Shutdown
    logger.info(f"Shutting down with {manager.total_connections} open WebSocket connections")


# Create FastAPI application
app = FastAPI(
    title="Faculty Portal API",
    description="Departmental chat rooms, notifications and administration",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Database pool exhaustion handler - return 503 so clients can retry
@app.exception_handler(SQLAlchemyTimeoutError)
async def db_pool_exhausted_handler(request: Request, exc: SQLAlchemyTimeoutError):
    """Handle database connection pool exhaustion with 503 Service Unavailable."""
    logger.warning(
        f"Database pool exhausted on {request.method} {request.url}: {exc}"
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Service temporarily unavailable. Please retry.",
            "retry_after": 5,
        },
        headers={"Retry-After": "5"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log all unhandled exceptions with full traceback."""
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url}: {exc}\n"
        f"{traceback.format_exc()}"
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Include API routers
app.include_router(auth_router)
app.include_router(portal_router)
app.include_router(rooms_router)
app.include_router(chat_router)
app.include_router(documents_router)
app.include_router(notifications_router)
app.include_router(push_router)
app.include_router(users_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "status": "healthy",
        "service": "Faculty Portal API",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    database_ok = await check_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "ok" if database_ok else "unreachable",
        "websocket": {
            "connections": manager.total_connections,
            "rooms": manager.registry.total_rooms,
        },
    }


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: str | None = None):
    """
    WebSocket endpoint for real-time chat.

    Authentication is done via query parameter since WebSocket
    doesn't support custom headers in the initial handshake
    from browser clients.

    Usage:
        ws://localhost:8000/ws?token=<jwt_token>
    """
    if not token:
        logger.debug("WebSocket connection attempt without token")
        await websocket.close(code=4001, reason="Authentication required")
        return

    token_data = decode_access_token(token)
    if token_data is None or token_data.user_id is None:
        logger.debug("WebSocket connection with invalid token")
        await websocket.close(code=4001, reason="Invalid token")
        return

    connection = await manager.connect(websocket, token_data)
    username = token_data.username

    # Rate limiting state
    message_timestamps: list[float] = []

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            raw_message = message.get("text")
            if raw_message is None:
                logger.warning(f"Ignoring binary frame from user {username}")
                continue

            current_time = asyncio.get_running_loop().time()
            message_timestamps[:] = [
                t for t in message_timestamps if current_time - t < RATE_LIMIT_WINDOW
            ]
            if len(message_timestamps) >= RATE_LIMIT_MESSAGES:
                logger.warning(f"Rate limit exceeded for user {username}")
                await manager.send_error(connection, "RATE_LIMIT", "Too many messages, slow down")
                continue
            message_timestamps.append(current_time)

            if len(raw_message) > settings.ws_max_message_size:
                logger.warning(
                    f"Message too large from user {username}: "
                    f"{len(raw_message)} bytes (max: {settings.ws_max_message_size})"
                )
                await manager.send_error(
                    connection,
                    "MESSAGE_TOO_LARGE",
                    f"Message exceeds maximum size of {settings.ws_max_message_size} bytes",
                )
                continue

            try:
                data = json.loads(raw_message)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON from user {username}")
                continue

            # One failing frame must not take the connection down
            try:
                await route_incoming_message(connection, data)
            except Exception:
                logger.error(f"Frame handling failed for user {username}", exc_info=True)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnect for user: {username}")
    except Exception as e:
        logger.error(f"WebSocket exception for user {username}: {e}")
    finally:
        await manager.disconnect(websocket)
