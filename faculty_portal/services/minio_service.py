"""MinIO service for chat images and shared documents.

Both live in a single bucket: images keyed by room under rooms/, documents
keyed by department under documents/. Rows only store the object key;
clients fetch the bytes through a short-lived presigned URL.
"""

import io
from datetime import timedelta
from typing import Optional
from uuid import uuid4

from minio import Minio
from minio.error import S3Error

from ..config import settings


class StorageServiceError(Exception):
    """Raised when an object storage operation fails."""

    pass


class MinIOService:
    """
    Service for interacting with MinIO object storage.

    The client is created lazily so importing the module never opens a
    connection.
    """

    DEFAULT_URL_EXPIRY = timedelta(hours=1)

    def __init__(self, bucket: Optional[str] = None):
        self.bucket = bucket or settings.minio_chat_bucket
        self._client: Optional[Minio] = None
        self._initialized = False

    @property
    def client(self) -> Minio:
        """
        Get the MinIO client instance, creating it if necessary.

        Raises:
            StorageServiceError: If client creation fails
        """
        if self._client is None:
            try:
                self._client = Minio(
                    endpoint=settings.minio_endpoint,
                    access_key=settings.minio_access_key,
                    secret_key=settings.minio_secret_key,
                    secure=settings.minio_secure,
                )
            except Exception as e:
                raise StorageServiceError(f"Failed to create MinIO client: {str(e)}")
        return self._client

    def ensure_bucket_exists(self) -> None:
        """
        Create the storage bucket if it does not exist yet.

        Raises:
            StorageServiceError: If bucket creation fails
        """
        if self._initialized:
            return

        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
        except S3Error as e:
            raise StorageServiceError(
                f"Failed to create bucket '{self.bucket}': {str(e)}"
            )

        self._initialized = True

    def _put_object(self, object_name: str, data: bytes, content_type: str) -> str:
        self.ensure_bucket_exists()
        self.client.put_object(
            bucket_name=self.bucket,
            object_name=object_name,
            data=io.BytesIO(data),
            length=len(data),
            content_type=content_type,
        )
        return object_name

    def upload_image(
        self,
        object_name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        Upload image bytes.

        Args:
            object_name: Object key in the chat bucket
            data: Raw image bytes
            content_type: MIME type of the image

        Returns:
            The object name (key) of the uploaded image

        Raises:
            StorageServiceError: If upload fails
        """
        try:
            return self._put_object(object_name, data, content_type)
        except S3Error as e:
            raise StorageServiceError(f"Failed to upload image: {str(e)}")

    def upload_document(
        self,
        object_name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        Upload a shared document.

        Raises:
            StorageServiceError: If upload fails
        """
        try:
            return self._put_object(object_name, data, content_type)
        except S3Error as e:
            raise StorageServiceError(f"Failed to upload document: {str(e)}")

    def delete_image(self, object_name: str) -> bool:
        """
        Delete an image object.

        Raises:
            StorageServiceError: If deletion fails
        """
        try:
            self.client.remove_object(self.bucket, object_name)
            return True
        except S3Error as e:
            raise StorageServiceError(f"Failed to delete image: {str(e)}")

    def delete_document(self, object_name: str) -> bool:
        try:
            self.client.remove_object(self.bucket, object_name)
            return True
        except S3Error as e:
            raise StorageServiceError(f"Failed to delete document: {str(e)}")

    def get_presigned_url(
        self,
        object_name: str,
        expiry: Optional[timedelta] = None,
    ) -> str:
        """
        Generate a presigned GET URL for a stored object.

        Args:
            object_name: Object key in the bucket
            expiry: URL lifetime (default: 1 hour)

        Raises:
            StorageServiceError: If URL generation fails
        """
        try:
            return self.client.presigned_get_object(
                bucket_name=self.bucket,
                object_name=object_name,
                expires=expiry or self.DEFAULT_URL_EXPIRY,
            )
        except S3Error as e:
            raise StorageServiceError(f"Failed to generate download URL: {str(e)}")

    @staticmethod
    def _clean_filename(filename: str) -> str:
        # Strip path separators so a name cannot escape its prefix
        return filename.replace("/", "_").replace("\\", "_")

    @staticmethod
    def generate_object_name(room_id: str, filename: str) -> str:
        """
        Build a unique key of the form rooms/{room_id}/{uuid}_{filename}.
        """
        unique_id = str(uuid4())[:8]
        return f"rooms/{room_id}/{unique_id}_{MinIOService._clean_filename(filename)}"

    @staticmethod
    def generate_document_name(department_name: Optional[str], filename: str) -> str:
        """
        Build a unique key of the form documents/{department}/{uuid}_{filename}.

        Documents of users without a department go under documents/general.
        """
        unique_id = str(uuid4())[:8]
        folder = MinIOService._clean_filename(department_name or "general")
        return f"documents/{folder}/{unique_id}_{MinIOService._clean_filename(filename)}"


# Global service instance
minio_service = MinIOService()


def get_minio_service() -> MinIOService:
    """
    FastAPI dependency for getting the MinIO service instance.

    Returns:
        MinIO service instance
    """
    return minio_service
