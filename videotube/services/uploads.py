"""
Upload staging.

Multipart files are written to ``UPLOAD_TEMP_DIR`` first and forwarded to
the media store from disk. The staged copy is removed when the upload
finishes, whether the media store accepted it or not. A failed cleanup is
logged and never replaces the upload's own outcome.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from uuid import uuid4

from fastapi import UploadFile

from videotube.core.logging import get_logger
from videotube.services.media import MediaAsset, MediaStore

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


def remove_staged_file(path: Path) -> None:
    """Best-effort removal of a staged file."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("staged_file_cleanup_failed", path=str(path), error=str(e))


@asynccontextmanager
async def staged_upload(upload: UploadFile, temp_dir: str | Path) -> AsyncIterator[Path]:
    """
    Write ``upload`` to a uniquely named file under ``temp_dir``.

    Usage:
        async with staged_upload(avatar, settings.UPLOAD_TEMP_DIR) as path:
            asset = await media.upload(path)
        # path no longer exists here
    """
    directory = Path(temp_dir)
    directory.mkdir(parents=True, exist_ok=True)

    suffix = Path(upload.filename or "").suffix
    path = directory / f"{uuid4().hex}{suffix}"

    try:
        with path.open("wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)
        logger.debug("upload_staged", filename=upload.filename, path=str(path))
        yield path
    finally:
        remove_staged_file(path)


def has_content(upload: Optional[UploadFile]) -> bool:
    """True when the client actually sent a file for this field."""
    return upload is not None and bool(upload.filename)


async def store_upload(
    media: MediaStore,
    upload: UploadFile,
    temp_dir: str | Path,
    folder: Optional[str] = None,
) -> MediaAsset:
    """Stage ``upload`` locally, push it to ``media`` and clean up."""
    async with staged_upload(upload, temp_dir) as path:
        return await media.upload(path, folder=folder)
