"""
Flat on-disk store for original and compressed image files.

Originals are named ``original-<ms>-<rand><ext>`` and compressed files
``compressed-<format>-<ms>-<rand>.<ext>``; both live in the same directory,
which is served at ``/uploads``.
"""
import os
import random
import time
import logging
from typing import Optional

from app import UPLOAD_DIR

logger = logging.getLogger(__name__)

ORIGINAL_PREFIX = "original-"
COMPRESSED_PREFIX = "compressed-"
PUBLIC_PREFIX = "uploads"


class BlobStore:
    """Saves image bytes under generated names and resolves them to paths and URLs."""

    def __init__(self, root: str = UPLOAD_DIR):
        self.root = root
        os.makedirs(self.root, exist_ok=True)

    def original_name(self, filename: Optional[str]) -> str:
        """Generate a unique name for an uploaded original, keeping its extension."""
        ext = os.path.splitext(filename or "")[1].lower()
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"{ORIGINAL_PREFIX}{suffix}{ext}"

    def compressed_name(self, original_name: str, extension: str, image_format: str) -> str:
        """Derive the compressed file name from an original's name."""
        stem = os.path.splitext(original_name)[0]
        if stem.startswith(ORIGINAL_PREFIX):
            stem = stem[len(ORIGINAL_PREFIX):]
        return f"{COMPRESSED_PREFIX}{image_format}-{stem}.{extension}"

    def path(self, name: str) -> str:
        # Names are generated here, never taken from the client
        return os.path.join(self.root, os.path.basename(name))

    def save(self, name: str, data: bytes) -> str:
        path = self.path(name)
        with open(path, "wb") as f:
            f.write(data)
        logger.debug(f"Saved {len(data)} bytes to {path}")
        return path

    def exists(self, name: str) -> bool:
        return os.path.isfile(self.path(name))

    def delete(self, name: str) -> None:
        path = self.path(name)
        try:
            if os.path.exists(path):
                os.remove(path)
                logger.debug(f"Removed {path}")
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")

    def public_url(self, base_url: str, name: str) -> str:
        """Absolute URL of a stored file given the request's base URL."""
        return f"{base_url.rstrip('/')}/{PUBLIC_PREFIX}/{name}"
