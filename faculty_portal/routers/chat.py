"""Chat HTTP endpoints: image upload, image access and the AI relay.

Messages created here go through the same lifecycle as WebSocket sends,
so room members receive them as ordinary new_message events.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models.message import Message
from ..models.user import User
from ..schemas.message import AIChatRequest, serialize_message
from ..services.ai_service import AIService, AIServiceError, get_ai_service
from ..services.auth_service import get_current_user
from ..services.minio_service import MinIOService, StorageServiceError, get_minio_service
from ..websocket.handlers import MessageLifecycle, get_message_lifecycle
from .rooms import get_accessible_room

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post(
    "/chat/upload-image",
    summary="Post an image message",
    description=(
        "Stores the image and posts it to the room. The image is removed "
        "after the configured expiry; the caption stays."
    ),
    responses={
        400: {"description": "Not an image or too large"},
        403: {"description": "Access denied to this room"},
        503: {"description": "Image storage unavailable"},
    },
)
async def upload_image(
    room_id: UUID = Form(..., alias="roomId"),
    caption: Optional[str] = Form(None),
    image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MinIOService = Depends(get_minio_service),
    message_lifecycle: MessageLifecycle = Depends(get_message_lifecycle),
) -> dict:
    await get_accessible_room(room_id, db, current_user)

    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image uploads are allowed",
        )

    data = await image.read()
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No image uploaded",
        )
    if len(data) > settings.max_image_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Image exceeds {settings.max_image_bytes} bytes",
        )

    filename = image.filename or "image"
    object_key = storage.generate_object_name(str(room_id), filename)
    try:
        await asyncio.to_thread(storage.upload_image, object_key, data, content_type)
    except StorageServiceError as e:
        logger.error(f"Image upload failed for room {room_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Image storage unavailable",
        )

    message = await message_lifecycle.attach_image(
        room_id=room_id,
        sender=current_user.username,
        object_key=object_key,
        filename=filename,
        caption=caption,
    )
    return {"success": True, "message": serialize_message(message)}


@router.get(
    "/chat/images/{object_key:path}",
    summary="Fetch a chat image",
    description="Redirects to a short-lived download URL while the image has not expired.",
    responses={
        403: {"description": "Access denied to the image's room"},
        404: {"description": "Unknown or expired image"},
    },
)
async def get_image(
    object_key: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MinIOService = Depends(get_minio_service),
) -> RedirectResponse:
    result = await db.execute(
        select(Message.room_id).where(Message.image_url == object_key).limit(1)
    )
    room_id = result.scalar_one_or_none()
    if room_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )
    await get_accessible_room(room_id, db, current_user)

    try:
        url = await asyncio.to_thread(storage.get_presigned_url, object_key)
    except StorageServiceError as e:
        logger.error(f"Presign failed for {object_key}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Image storage unavailable",
        )
    return RedirectResponse(url)


@router.post(
    "/ai/chat",
    summary="Ask the AI assistant",
    description=(
        "Relays the prompt to the AI service. When roomId is given the reply "
        "is posted to that room as the assistant."
    ),
    responses={
        403: {"description": "Access denied to this room"},
        502: {"description": "AI service failed"},
    },
)
async def ai_chat(
    request: AIChatRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
    message_lifecycle: MessageLifecycle = Depends(get_message_lifecycle),
) -> dict:
    if request.room_id is not None:
        await get_accessible_room(request.room_id, db, current_user)

    prompt = AIService.strip_marker(request.message)
    if not prompt:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message is required",
        )

    try:
        reply = await ai.ask(prompt, request.context)
    except AIServiceError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )

    posted = None
    if request.room_id is not None:
        try:
            message = await message_lifecycle.send_message(
                room_id=request.room_id,
                sender=settings.ai_sender_name,
                content=reply,
            )
        except SQLAlchemyError:
            logger.error(f"Failed to post AI reply to room {request.room_id}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to post AI reply",
            )
        posted = serialize_message(message)

    return {"response": reply, "message": posted}
