"""
Utilities for validating uploads and scoping the files written for them.
"""
import contextlib
import logging
from typing import Iterator, List, Optional

from fastapi import HTTPException, UploadFile

from app.config import settings
from app.storage.blobs import BlobStore

# Set up logging
logger = logging.getLogger(__name__)

IMAGE_MIME_PREFIX = "image/"


def is_image_upload(file: UploadFile) -> bool:
    """True if the client declared an image content type."""
    return bool(file.content_type) and file.content_type.startswith(IMAGE_MIME_PREFIX)


async def read_image_upload(file: UploadFile, max_size: Optional[int] = None) -> bytes:
    """
    Read an uploaded image, rejecting non-images and oversized files.

    Args:
        file: The uploaded file
        max_size: Size cap in bytes (defaults to MAX_FILE_SIZE)

    Returns:
        The file content

    Raises:
        HTTPException: 400 for a non-image content type or a file over the cap
    """
    max_size = settings.MAX_FILE_SIZE if max_size is None else max_size

    if not is_image_upload(file):
        raise HTTPException(status_code=400, detail=f"Only image files are allowed: {file.filename}")

    # Read one byte past the cap so an oversized body is never fully buffered
    content = await file.read(max_size + 1)
    if len(content) > max_size:
        raise HTTPException(
            status_code=400,
            detail=f"File too large: {file.filename} (limit {max_size // (1024 * 1024)}MB)"
        )
    if not content:
        raise HTTPException(status_code=400, detail=f"Empty file: {file.filename}")
    return content


@contextlib.contextmanager
def discard_on_error(store: BlobStore) -> Iterator[List[str]]:
    """
    Context manager that removes the blobs written inside it if the block raises.

    Yields:
        A list the caller appends blob names to as it writes them
    """
    written: List[str] = []
    try:
        yield written
    except BaseException:
        for name in written:
            store.delete(name)
        if written:
            logger.info(f"Removed {len(written)} file(s) left by a failed upload")
        raise
