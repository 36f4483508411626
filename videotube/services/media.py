"""
Media Storage Service

Uploads staged files (avatars, cover images, thumbnails, video files) to
Cloudinary and returns the hosted URL plus the metadata the platform keeps
(duration for videos).

Uploads go through the Cloudinary SDK with ``resource_type="auto"`` so
Cloudinary detects images vs. videos. Credentials are passed on every call
from the application's settings rather than through ``cloudinary.config``.

The SDK call blocks; it runs in a worker thread so the event loop keeps
serving other requests while a large video uploads.

Reference: https://cloudinary.com/documentation/django_image_and_video_upload
"""

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import cloudinary.exceptions
import cloudinary.uploader

from videotube.core.config import Settings
from videotube.core.errors import MediaUploadError
from videotube.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MediaAsset:
    """A file stored on the media host."""
    url: str
    public_id: str
    resource_type: str = "image"
    duration: float = 0.0


class MediaStore(Protocol):
    """Anything that can take a local file and return a hosted asset."""

    async def upload(self, path: Path, *, folder: Optional[str] = None) -> MediaAsset: ...

    async def aclose(self) -> None: ...


class CloudinaryMediaStore:
    """
    Cloudinary client.

    Usage:
        store = CloudinaryMediaStore.from_settings(settings)
        asset = await store.upload(Path("/tmp/avatar.png"), folder="avatars")
        asset.url  # https://res.cloudinary.com/...
    """

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        *,
        timeout: float = 120.0,
        uploader: Optional[Callable[..., dict[str, Any]]] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self._uploader = uploader or cloudinary.uploader.upload

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        uploader: Optional[Callable[..., dict[str, Any]]] = None,
    ) -> "CloudinaryMediaStore":
        return cls(
            settings.CLOUDINARY_CLOUD_NAME,
            settings.CLOUDINARY_API_KEY,
            settings.CLOUDINARY_API_SECRET,
            timeout=settings.MEDIA_UPLOAD_TIMEOUT_SECONDS,
            uploader=uploader,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    async def upload(self, path: Path, *, folder: Optional[str] = None) -> MediaAsset:
        """
        Upload ``path`` and return the hosted asset.

        Raises:
            MediaUploadError: credentials missing, unreadable file, an error
                reported by Cloudinary, or an answer without a URL
        """
        if not self.configured:
            raise MediaUploadError("Media storage is not configured")

        options: dict[str, Any] = {
            "resource_type": "auto",
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "timeout": self.timeout,
        }
        if folder:
            options["folder"] = folder

        started = time.monotonic()
        try:
            result = await asyncio.to_thread(self._uploader, str(path), **options)
        except (OSError, cloudinary.exceptions.Error) as e:
            logger.error("media_upload_failed", file=path.name, error=str(e))
            raise MediaUploadError() from e

        url = result.get("secure_url") or result.get("url")
        if not url:
            logger.error("media_upload_missing_url", file=path.name, keys=sorted(result))
            raise MediaUploadError()

        try:
            duration = float(result.get("duration") or 0.0)
        except (TypeError, ValueError):
            duration = 0.0

        asset = MediaAsset(
            url=url,
            public_id=result.get("public_id", ""),
            resource_type=result.get("resource_type", "image"),
            duration=duration,
        )

        logger.info(
            "media_uploaded",
            file=path.name,
            public_id=asset.public_id,
            resource_type=asset.resource_type,
            elapsed_ms=round((time.monotonic() - started) * 1000),
        )
        return asset

    async def aclose(self) -> None:
        """The SDK keeps no per-store connections; nothing to release."""
