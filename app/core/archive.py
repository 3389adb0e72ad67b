"""
Streaming ZIP archives of compressed images.

The archive is produced chunk by chunk while files are read from disk, so
the response can start before the whole archive exists and no
Content-Length is known up front.
"""
import io
import os
import logging
import zipfile
from typing import Iterable, Iterator, List, Tuple

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class _ChunkSink(io.RawIOBase):
    """Write-only, unseekable buffer that hands out whatever was written since the last drain."""

    def __init__(self):
        self._chunks: List[bytes] = []

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


def stream_zip(entries: Iterable[Tuple[str, str]]) -> Iterator[bytes]:
    """
    Yield a ZIP archive of the given files as a sequence of byte chunks.

    Args:
        entries: ``(path_on_disk, name_in_archive)`` pairs. Paths that no
            longer exist are skipped.

    Yields:
        Consecutive pieces of the archive
    """
    sink = _ChunkSink()
    added = 0
    # zipfile writes data descriptors instead of seeking back when the target is unseekable
    with zipfile.ZipFile(sink, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path, arcname in entries:
            if not os.path.isfile(path):
                logger.warning(f"Skipping missing file {path}")
                continue
            with open(path, "rb") as source, archive.open(arcname, mode="w") as target:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    target.write(chunk)
                    data = sink.drain()
                    if data:
                        yield data
            added += 1
            data = sink.drain()
            if data:
                yield data
    # Central directory is written on close
    tail = sink.drain()
    if tail:
        yield tail
    logger.info(f"Streamed ZIP archive with {added} file(s)")


def archive_names(names: Iterable[Tuple[str, str]]) -> List[str]:
    """
    Build unique archive entry names.

    Args:
        names: ``(preferred_name, fallback_name)`` pairs; the fallback is used
            when the preferred name is already taken

    Returns:
        One unique name per pair
    """
    used = set()
    result = []
    for preferred, fallback in names:
        name = preferred if preferred not in used else fallback
        base, ext = os.path.splitext(name)
        counter = 1
        while name in used:
            name = f"{base}-{counter}{ext}"
            counter += 1
        used.add(name)
        result.append(name)
    return result
