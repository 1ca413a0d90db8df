"""Shared document records.

Storage of the bytes is the router's concern; this service only keeps the
Documents table and the delete rule (owner or admin).
"""

import logging
import os
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.document import Document
from ..models.user import User

logger = logging.getLogger(__name__)


class DocumentService:
    """Service for listing, recording and removing shared documents."""

    @staticmethod
    async def list_documents(
        db: AsyncSession,
        department_name: Optional[str] = None,
    ) -> Sequence[Document]:
        """
        Documents newest first, optionally limited to one department.

        Args:
            db: Database session
            department_name: Only documents uploaded from this department
        """
        query = select(Document).order_by(Document.created_at.desc())
        if department_name:
            query = query.where(Document.department_name == department_name)
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_document(db: AsyncSession, document_id: UUID) -> Optional[Document]:
        return await db.get(Document, document_id)

    @staticmethod
    async def create_document(
        db: AsyncSession,
        owner: User,
        name: str,
        object_key: str,
        content_type: str,
        size: int,
    ) -> Document:
        document = Document(
            name=name,
            object_key=object_key,
            owner=owner.username,
            department_name=owner.department_name,
            file_type=os.path.splitext(name)[1].lower(),
            content_type=content_type,
            size=size,
        )
        db.add(document)
        await db.flush()
        await db.refresh(document)
        logger.info(f"Document {document.id} ({name}) uploaded by {owner.username}")
        return document

    @staticmethod
    def can_delete(user: User, document: Document) -> bool:
        return user.is_admin or document.owner == user.username

    @staticmethod
    async def delete_document(db: AsyncSession, document: Document) -> None:
        await db.delete(document)
        await db.flush()
