"""Public portal configuration endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..services.room_service import RoomService

router = APIRouter(prefix="/api", tags=["Portal"])


@router.get("/config", summary="Client-facing portal settings")
async def get_config() -> dict:
    return {
        "departments": settings.departments,
        "imageExpiryHours": settings.image_expiry_hours,
        "chatHistoryLimit": settings.chat_history_limit,
        "aiEnabled": bool(settings.ai_api_endpoint),
        "aiMarker": settings.ai_marker,
        "aiSenderName": settings.ai_sender_name,
        "pushEnabled": settings.push_enabled,
    }


@router.get("/departments", summary="List departments")
async def list_departments(db: AsyncSession = Depends(get_db)) -> list[dict]:
    departments = await RoomService.list_departments(db)
    return [{"id": str(d.id), "name": d.name} for d in departments]
