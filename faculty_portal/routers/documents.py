"""Document sharing API endpoints.

Any signed-in user can list, download and upload documents. Only the
uploader or an administrator may delete one.
"""

import asyncio
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models.document import Document
from ..models.user import User
from ..schemas.document import DocumentResponse
from ..services.activity_service import ActivityAction, log_activity
from ..services.auth_service import get_current_user
from ..services.document_service import DocumentService
from ..services.minio_service import MinIOService, StorageServiceError, get_minio_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


async def get_document_or_404(document_id: UUID, db: AsyncSession) -> Document:
    document = await DocumentService.get_document(db, document_id)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )
    return document


@router.get(
    "",
    response_model=List[DocumentResponse],
    summary="List shared documents",
    description="Newest first. Pass department to limit the list to one department.",
)
async def list_documents(
    department: Optional[str] = Query(None, description="Department filter"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[DocumentResponse]:
    return await DocumentService.list_documents(db, department)


@router.post(
    "/upload",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document",
    responses={
        201: {"description": "Document stored"},
        400: {"description": "No file uploaded"},
        413: {"description": "File too large"},
        503: {"description": "Document storage unavailable"},
    },
)
async def upload_document(
    document: UploadFile = File(..., description="The file to share"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MinIOService = Depends(get_minio_service),
) -> DocumentResponse:
    """
    Upload a document to share with the portal.

    - **document**: The file (multipart form data)

    The uploader's department is recorded with the document.
    """
    data = await document.read()
    if not document.filename or not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )
    if len(data) > settings.max_document_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_document_bytes} bytes",
        )

    content_type = document.content_type or "application/octet-stream"
    object_key = storage.generate_document_name(current_user.department_name, document.filename)
    try:
        await asyncio.to_thread(storage.upload_document, object_key, data, content_type)
    except StorageServiceError as e:
        logger.error(f"Document upload failed for {current_user.username}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document storage unavailable",
        )

    record = await DocumentService.create_document(
        db,
        owner=current_user,
        name=document.filename,
        object_key=object_key,
        content_type=content_type,
        size=len(data),
    )
    await log_activity(
        db,
        ActivityAction.DOCUMENT_UPLOADED,
        user_id=current_user.id,
        details={"documentId": str(record.id), "fileName": record.name},
    )
    return record


@router.get(
    "/{document_id}/download",
    summary="Download a document",
    description="Redirects to a short-lived download URL.",
    responses={
        404: {"description": "Document not found"},
        503: {"description": "Document storage unavailable"},
    },
)
async def download_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MinIOService = Depends(get_minio_service),
) -> RedirectResponse:
    document = await get_document_or_404(document_id, db)
    try:
        url = await asyncio.to_thread(storage.get_presigned_url, document.object_key)
    except StorageServiceError as e:
        logger.error(f"Presign failed for document {document_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document storage unavailable",
        )
    return RedirectResponse(url)


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a document",
    responses={
        403: {"description": "Only the uploader or an admin may delete"},
        404: {"description": "Document not found"},
    },
)
async def delete_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MinIOService = Depends(get_minio_service),
) -> dict:
    document = await get_document_or_404(document_id, db)
    if not DocumentService.can_delete(current_user, document):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to delete this document",
        )

    object_key = document.object_key
    await DocumentService.delete_document(db, document)
    await log_activity(
        db,
        ActivityAction.DOCUMENT_DELETED,
        user_id=current_user.id,
        details={"documentId": str(document_id)},
    )
    # Commit before touching storage
    await db.commit()

    try:
        await asyncio.to_thread(storage.delete_document, object_key)
    except StorageServiceError as e:
        logger.warning(f"Could not delete stored object for document {document_id}: {e}")

    return {"message": "Document deleted"}
