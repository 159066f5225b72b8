"""
Media upload pipeline
The content services only see the MediaUploader protocol; Supabase Storage
is the production implementation.
"""
from fastapi.concurrency import run_in_threadpool
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol
from uuid import uuid4
import logging
import mimetypes

from app.apps.media.utils import get_supabase_client
from app.config import MEDIA_BUCKET

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    url: str
    path: str


class MediaUploader(Protocol):
    async def upload(
        self,
        content: bytes,
        folder: str,
        *,
        filename: str,
        content_type: str,
    ) -> UploadResult:
        """Store the bytes under the folder and return a public URL. Raises on provider failure."""
        ...

    async def remove(self, path: str) -> None:
        ...


def build_object_path(folder: str, filename: str, content_type: str) -> str:
    """
    Build a collision free object path inside a folder.

    Examples:
    - ("blogs", "Cover Photo.JPG", "image/jpeg") -> "blogs/<hex>.jpg"
    - ("/blogs/", "upload", "image/png") -> "blogs/<hex>.png"
    """
    extension = Path(filename or "").suffix.lower()
    if not extension:
        extension = mimetypes.guess_extension(content_type or "") or ""
    folder = folder.strip("/")
    name = f"{uuid4().hex}{extension}"
    return f"{folder}/{name}" if folder else name


class SupabaseMediaUploader:
    def __init__(self, bucket_name: Optional[str] = None, client=None):
        self._client = client
        self.bucket_name = bucket_name or MEDIA_BUCKET

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def _upload_sync(self, file_path: str, content: bytes, content_type: str) -> str:
        bucket = self.client.storage.from_(self.bucket_name)
        bucket.upload(
            path=file_path,
            file=content,
            file_options={"content-type": content_type}
        )
        return bucket.get_public_url(file_path)

    async def upload(
        self,
        content: bytes,
        folder: str,
        *,
        filename: str,
        content_type: str,
    ) -> UploadResult:
        file_path = build_object_path(folder, filename, content_type)
        # supabase-py storage calls are blocking
        public_url = await run_in_threadpool(self._upload_sync, file_path, content, content_type)
        logger.info(f"Media uploaded successfully: {self.bucket_name}/{file_path}")
        return UploadResult(url=public_url, path=file_path)

    async def remove(self, path: str) -> None:
        await run_in_threadpool(self.client.storage.from_(self.bucket_name).remove, [path])
        logger.info(f"Media removed: {self.bucket_name}/{path}")


# Shared uploader instance; the Supabase client is created on first use
supabase_media_uploader = SupabaseMediaUploader()
