"""Object storage client: pushes file bytes to an S3-compatible bucket (MinIO API)."""

import asyncio
import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from fastapi import Request
from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError as TransportError

from pinshare.config import Settings
from pinshare.errors import StorageError

log = logging.getLogger(__name__)

# MinIO raises its own errors for S3 responses and urllib3 errors for transport failures
_STORAGE_ERRORS = (MinioException, TransportError, OSError)


@dataclass(frozen=True)
class StoredObject:
    url: str
    object_id: str


def _object_key(folder: str, filename: Optional[str]) -> str:
    """Random key under folder, keeping the original extension."""
    ext = PurePosixPath(filename or "").suffix.lower()
    # Extensions only ever contain a dot and word characters
    if not ext[1:].isalnum():
        ext = ""
    key = f"{uuid.uuid4().hex}{ext}"
    folder = folder.strip().strip("/")
    return f"{folder}/{key}" if folder else key


class ObjectStorage:
    """
    Stores uploaded bytes and returns a stable retrieval URL.
    Calls are synchronous from the caller's view and never retried.
    """

    def __init__(self, client: Minio, bucket: str, public_url: str, folder: str = "") -> None:
        self._client = client
        self.bucket = bucket
        self.public_url = public_url.rstrip("/")
        self.folder = folder

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStorage":
        client = Minio(
            settings.storage_endpoint,
            access_key=settings.storage_access_key,
            secret_key=settings.storage_secret_key,
            secure=settings.storage_secure,
        )
        return cls(
            client,
            bucket=settings.storage_bucket,
            public_url=settings.storage_base_url,
            folder=settings.storage_folder,
        )

    def url_for(self, object_id: str) -> str:
        return f"{self.public_url}/{self.bucket}/{object_id}"

    async def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist."""
        try:
            if not await asyncio.to_thread(self._client.bucket_exists, self.bucket):
                await asyncio.to_thread(self._client.make_bucket, self.bucket)
                log.info("Created bucket %s", self.bucket)
        except _STORAGE_ERRORS as e:
            raise StorageError("Object storage unavailable", details=str(e)) from e

    async def store(self, data: bytes, mime_type: str, filename: Optional[str] = None) -> StoredObject:
        """Upload data; return its URL and object id. Raises StorageError on any failure."""
        object_id = _object_key(self.folder, filename)
        try:
            await asyncio.to_thread(
                self._client.put_object,
                self.bucket,
                object_id,
                io.BytesIO(data),
                len(data),
                content_type=mime_type or "application/octet-stream",
            )
        except _STORAGE_ERRORS as e:
            log.error("Object upload failed key=%s: %s", object_id, e)
            raise StorageError("Failed to store file", details=str(e)) from e
        log.info("Stored object key=%s size=%d", object_id, len(data))
        return StoredObject(url=self.url_for(object_id), object_id=object_id)

    async def remove(self, object_id: str) -> None:
        """Delete an object. Raises StorageError on failure."""
        try:
            await asyncio.to_thread(self._client.remove_object, self.bucket, object_id)
        except _STORAGE_ERRORS as e:
            raise StorageError("Failed to remove file", details=str(e)) from e
        log.info("Removed object key=%s", object_id)


def get_storage(request: Request) -> ObjectStorage:
    """FastAPI dependency returning the app's object storage client."""
    return request.app.state.storage
