"""
Content fingerprinting for change detection.

MD5 over the raw bytes of a local file plus its size. The MD5 matches what
object stores report for single-part uploads (S3 ETag, Azure/GCS content MD5).
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path

import aiofiles

from bucketpush.exceptions import FingerprintError

# Files are streamed in fixed-size chunks; never loaded whole
BUFFER_SIZE = 4 * 1024 * 1024


@dataclass(frozen=True)
class Fingerprint:
    md5: str
    size: int


async def fingerprint_file(file_path: str | Path, *, chunk_size: int = BUFFER_SIZE) -> Fingerprint:
    """
    Calculate the MD5 hash and byte size of a file (async).

    Args:
        file_path: Path to file
        chunk_size: Read size per chunk

    Returns:
        Fingerprint with hex MD5 and size in bytes

    Raises:
        FingerprintError: If the file cannot be opened or read
    """
    md5 = hashlib.md5()
    size = 0
    try:
        async with aiofiles.open(file_path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                md5.update(chunk)
                size += len(chunk)
    except OSError as e:
        raise FingerprintError(str(file_path), cause=e) from e
    return Fingerprint(md5=md5.hexdigest(), size=size)


def md5_bytes(data: bytes) -> str:
    """Hex MD5 of an in-memory payload."""
    return hashlib.md5(data).hexdigest()
