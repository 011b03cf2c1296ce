import io
import logging
import uuid
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import boto3
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class StorageError(Exception):
    """Raised when the external image store rejects an upload."""


class ImageStorage:
    """Uploads and removes profile images on the configured backend.

    ``local`` writes under ``UPLOAD_DIR`` and returns ``/static/...`` paths,
    ``s3`` stores objects in ``AWS_S3_BUCKET`` and returns their public URL.
    """

    def __init__(self, settings: Settings, s3_client=None):
        self.backend = settings.STORAGE_BACKEND
        self.folder = settings.IMAGE_FOLDER
        self.upload_dir = Path(settings.UPLOAD_DIR)
        self.bucket = settings.AWS_S3_BUCKET
        self.region = settings.AWS_REGION
        self.public_base_url = settings.AWS_PUBLIC_BASE_URL
        self._settings = settings
        self._s3 = s3_client

    def _get_s3_client(self):
        if self._s3 is None:
            self._s3 = boto3.client(
                "s3",
                aws_access_key_id=self._settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=self._settings.AWS_SECRET_ACCESS_KEY,
                region_name=self.region,
            )
        return self._s3

    def _object_name(self, content_type: Optional[str]) -> str:
        # Extension follows the validated content type, never the client filename
        ext = _EXTENSIONS.get((content_type or "").lower(), "")
        return f"{uuid.uuid4().hex}{ext}"

    async def upload_image(
        self,
        content: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        folder: Optional[str] = None,
    ) -> str:
        folder = folder or self.folder
        name = self._object_name(content_type)
        try:
            if self.backend == "local":
                return await run_in_threadpool(self._upload_local, content, folder, name)
            return await run_in_threadpool(self._upload_s3, content, folder, name, content_type)
        except Exception as exc:
            logger.error("Image upload failed for %s", filename, exc_info=exc)
            raise StorageError("Failed to upload image") from exc

    def _upload_local(self, content: bytes, folder: str, name: str) -> str:
        base_dir = self.upload_dir / folder
        base_dir.mkdir(parents=True, exist_ok=True)
        with (base_dir / name).open("wb") as f:
            f.write(content)

        # Return a URL path your frontend can serve via static files
        return f"/static/{folder}/{name}"

    def _upload_s3(self, content: bytes, folder: str, name: str, content_type: Optional[str]) -> str:
        if not self.bucket:
            raise StorageError("AWS_S3_BUCKET is not configured")
        key = f"{folder}/{name}"
        extra = {"ContentType": content_type} if content_type else None
        self._get_s3_client().upload_fileobj(io.BytesIO(content), self.bucket, key, ExtraArgs=extra)

        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"

        # Standard S3 URL construction
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def delete_image(self, url: Optional[str]) -> None:
        """Remove a previously uploaded image. Unknown URLs are ignored."""
        if not url:
            return
        if self.backend == "local":
            await run_in_threadpool(self._delete_local, url)
        else:
            await run_in_threadpool(self._delete_s3, url)

    def _delete_local(self, url: str) -> None:
        prefix = "/static/"
        if not url.startswith(prefix):
            return
        path = self.upload_dir / url[len(prefix):]
        if path.is_file():
            path.unlink()

    def _delete_s3(self, url: str) -> None:
        key = self.key_from_url(url)
        if key is None:
            return
        self._get_s3_client().delete_object(Bucket=self.bucket, Key=key)

    def key_from_url(self, url: str) -> Optional[str]:
        if self.public_base_url and url.startswith(self.public_base_url.rstrip("/") + "/"):
            return url[len(self.public_base_url.rstrip("/")) + 1:] or None
        parsed = urlparse(url)
        if self.bucket and parsed.netloc.startswith(f"{self.bucket}.s3"):
            return parsed.path.lstrip("/") or None
        return None
