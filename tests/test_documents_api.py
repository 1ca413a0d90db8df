"""Unit tests for Documents API endpoints.

Tests cover:
- Upload, including storage failures and size limits
- Listing and the department filter
- Download redirects
- Deletion by the uploader or an admin
"""

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from conftest import auth_headers_for
from faculty_portal.config import settings
from faculty_portal.models import ActivityLog, Document
from faculty_portal.services.minio_service import StorageServiceError

PDF_BYTES = b"%PDF-1.4 syllabus"


async def upload(
    client: AsyncClient,
    user,
    filename: str = "syllabus.pdf",
    content: bytes = PDF_BYTES,
    content_type: str = "application/pdf",
) -> httpx.Response:
    return await client.post(
        "/api/documents/upload",
        files={"document": (filename, content, content_type)},
        headers=auth_headers_for(user),
    )


@pytest.mark.asyncio
class TestUploadDocument:
    """Tests for POST /api/documents/upload endpoint."""

    async def test_upload_records_document(
        self, client: AsyncClient, physics_student, mock_storage, session_factory
    ):
        response = await upload(client, physics_student)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "syllabus.pdf"
        assert data["owner"] == "alice"
        assert data["departmentName"] == "Physics"
        assert data["fileType"] == ".pdf"
        assert data["contentType"] == "application/pdf"
        assert data["size"] == len(PDF_BYTES)
        mock_storage.upload_document.assert_called_once_with(
            "documents/Physics/abcd1234_syllabus.pdf", PDF_BYTES, "application/pdf"
        )

        async with session_factory() as db:
            entry = (
                await db.execute(
                    select(ActivityLog).where(ActivityLog.action == "DOCUMENT_UPLOADED")
                )
            ).scalar_one()
        assert entry.details == {"documentId": data["id"], "fileName": "syllabus.pdf"}

    async def test_empty_upload_is_rejected(
        self, client: AsyncClient, physics_student, mock_storage
    ):
        response = await upload(client, physics_student, content=b"")

        assert response.status_code == 400
        mock_storage.upload_document.assert_not_called()

    async def test_oversized_upload_is_rejected(
        self, client: AsyncClient, physics_student, mock_storage, monkeypatch
    ):
        monkeypatch.setattr(settings, "max_document_bytes", 4)

        response = await upload(client, physics_student)

        assert response.status_code == 413
        mock_storage.upload_document.assert_not_called()

    async def test_storage_failure_returns_503(
        self, client: AsyncClient, physics_student, mock_storage, session_factory
    ):
        mock_storage.upload_document.side_effect = StorageServiceError("minio down")

        response = await upload(client, physics_student)

        assert response.status_code == 503
        async with session_factory() as db:
            assert (await db.execute(select(Document))).scalars().all() == []

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.post(
            "/api/documents/upload",
            files={"document": ("a.pdf", PDF_BYTES, "application/pdf")},
        )

        assert response.status_code == 401


@pytest.mark.asyncio
class TestListDocuments:
    """Tests for GET /api/documents endpoint."""

    async def test_lists_newest_first(
        self, client: AsyncClient, physics_student, chemistry_student
    ):
        await upload(client, physics_student, filename="first.pdf")
        await upload(client, chemistry_student, filename="second.pdf")

        response = await client.get(
            "/api/documents", headers=auth_headers_for(physics_student)
        )

        assert response.status_code == 200
        assert [d["name"] for d in response.json()] == ["second.pdf", "first.pdf"]

    async def test_department_filter(
        self, client: AsyncClient, physics_student, chemistry_student
    ):
        await upload(client, physics_student, filename="optics.pdf")
        await upload(client, chemistry_student, filename="titration.pdf")

        response = await client.get(
            "/api/documents",
            params={"department": "Chemistry"},
            headers=auth_headers_for(physics_student),
        )

        assert [d["name"] for d in response.json()] == ["titration.pdf"]


@pytest.mark.asyncio
class TestDownloadDocument:
    """Tests for GET /api/documents/{id}/download endpoint."""

    async def test_download_redirects(
        self, client: AsyncClient, physics_student, chemistry_student, mock_storage
    ):
        document = (await upload(client, physics_student)).json()

        response = await client.get(
            f"/api/documents/{document['id']}/download",
            headers=auth_headers_for(chemistry_student),
        )

        assert response.status_code == 307
        mock_storage.get_presigned_url.assert_called_once_with(
            "documents/Physics/abcd1234_syllabus.pdf"
        )

    async def test_unknown_document(self, client: AsyncClient, physics_student):
        response = await client.get(
            "/api/documents/00000000-0000-0000-0000-000000000000/download",
            headers=auth_headers_for(physics_student),
        )

        assert response.status_code == 404


@pytest.mark.asyncio
class TestDeleteDocument:
    """Tests for DELETE /api/documents/{id} endpoint."""

    async def test_owner_can_delete(
        self, client: AsyncClient, physics_student, mock_storage, session_factory
    ):
        document = (await upload(client, physics_student)).json()

        response = await client.delete(
            f"/api/documents/{document['id']}", headers=auth_headers_for(physics_student)
        )

        assert response.status_code == 200
        mock_storage.delete_document.assert_called_once_with(
            "documents/Physics/abcd1234_syllabus.pdf"
        )
        async with session_factory() as db:
            assert (await db.execute(select(Document))).scalars().all() == []
            entry = (
                await db.execute(
                    select(ActivityLog).where(ActivityLog.action == "DOCUMENT_DELETED")
                )
            ).scalar_one()
        assert entry.details == {"documentId": document["id"]}

    async def test_admin_can_delete(
        self, client: AsyncClient, physics_student, admin_user
    ):
        document = (await upload(client, physics_student)).json()

        response = await client.delete(
            f"/api/documents/{document['id']}", headers=auth_headers_for(admin_user)
        )

        assert response.status_code == 200

    async def test_other_user_cannot_delete(
        self,
        client: AsyncClient,
        physics_student,
        chemistry_student,
        mock_storage,
        session_factory,
    ):
        document = (await upload(client, physics_student)).json()

        response = await client.delete(
            f"/api/documents/{document['id']}", headers=auth_headers_for(chemistry_student)
        )

        assert response.status_code == 403
        mock_storage.delete_document.assert_not_called()
        async with session_factory() as db:
            assert len((await db.execute(select(Document))).scalars().all()) == 1

    async def test_storage_failure_still_deletes_record(
        self, client: AsyncClient, physics_student, mock_storage, session_factory
    ):
        document = (await upload(client, physics_student)).json()
        mock_storage.delete_document.side_effect = StorageServiceError("gone")

        response = await client.delete(
            f"/api/documents/{document['id']}", headers=auth_headers_for(physics_student)
        )

        assert response.status_code == 200
        async with session_factory() as db:
            assert (await db.execute(select(Document))).scalars().all() == []
