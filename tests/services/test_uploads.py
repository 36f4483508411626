"""
Tests for upload staging.
"""

import io
from pathlib import Path

import pytest
from fastapi import UploadFile

from videotube.core.errors import MediaUploadError
from videotube.services.uploads import has_content, staged_upload, store_upload


def make_upload(content: bytes = b"file body", filename: str = "holiday.mp4") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


@pytest.mark.asyncio
async def test_staged_file_exists_only_inside_block(tmp_path: Path):
    async with staged_upload(make_upload(b"abc" * 1000), tmp_path / "temp") as path:
        assert path.parent == tmp_path / "temp"
        assert path.suffix == ".mp4"
        assert path.read_bytes() == b"abc" * 1000

    assert not path.exists()


@pytest.mark.asyncio
async def test_staged_file_removed_when_block_fails(tmp_path: Path):
    with pytest.raises(RuntimeError):
        async with staged_upload(make_upload(), tmp_path) as path:
            raise RuntimeError("upload went wrong")

    assert not path.exists()


@pytest.mark.asyncio
async def test_staged_names_are_unique(tmp_path: Path):
    async with staged_upload(make_upload(filename="same.png"), tmp_path) as first:
        async with staged_upload(make_upload(filename="same.png"), tmp_path) as second:
            assert first != second


@pytest.mark.asyncio
async def test_store_upload_forwards_folder(tmp_path: Path, media_store):
    asset = await store_upload(media_store, make_upload(b"avatar"), tmp_path, folder="avatars")

    assert asset.url.startswith("https://media.test/avatars/")
    upload = media_store.uploads[0]
    assert upload["existed"] is True
    assert upload["content"] == b"avatar"
    assert not upload["path"].exists()


@pytest.mark.asyncio
async def test_store_upload_cleans_up_after_failure(tmp_path: Path, media_store):
    media_store.fail_folders.add("thumbnails")

    with pytest.raises(MediaUploadError):
        await store_upload(media_store, make_upload(), tmp_path, folder="thumbnails")

    assert list(tmp_path.iterdir()) == []


def test_has_content():
    assert has_content(make_upload())
    assert not has_content(None)
    assert not has_content(make_upload(filename=""))
