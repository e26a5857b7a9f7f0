"""
Content-encoding transforms for upload variants.

A variant's source is produced by streaming the raw file through a
compressor into a spooled temporary file, so the exact encoded length is
known before the provider reads it. Output is deterministic for identical
input (gzip header mtime is fixed at 0).
"""

from __future__ import annotations

import tempfile
import zlib
from pathlib import Path
from typing import BinaryIO, Protocol

import brotli

from bucketpush.core.fingerprint import BUFFER_SIZE
from bucketpush.exceptions import ConfigurationError

# Encoded payloads above this size spill from memory to disk
SPOOL_MAX_SIZE = 16 * 1024 * 1024

# zlib window bits selecting a gzip container
GZIP_WBITS = 16 + zlib.MAX_WBITS


class Compressor(Protocol):
    def process(self, chunk: bytes) -> bytes: ...

    def finish(self) -> bytes: ...


class GzipCompressor:
    """gzip stream compressor (zlib-backed, mtime 0)."""

    def __init__(self, level: int = 9) -> None:
        self._obj = zlib.compressobj(level, zlib.DEFLATED, GZIP_WBITS)

    def process(self, chunk: bytes) -> bytes:
        return self._obj.compress(chunk)

    def finish(self) -> bytes:
        return self._obj.flush()


class BrotliCompressor:
    """Brotli stream compressor."""

    def __init__(self, quality: int = 11) -> None:
        self._obj = brotli.Compressor(quality=quality)

    def process(self, chunk: bytes) -> bytes:
        return self._obj.process(chunk)

    def finish(self) -> bytes:
        return self._obj.finish()


def get_compressor(encoding: str) -> Compressor:
    if encoding == "gzip":
        return GzipCompressor()
    if encoding == "br":
        return BrotliCompressor()
    raise ConfigurationError(f"Unsupported content encoding: {encoding}")


def compress_stream(source: BinaryIO, encoding: str, *, chunk_size: int = BUFFER_SIZE) -> tuple[BinaryIO, int]:
    """
    Pipe ``source`` through the compressor for ``encoding``.

    Returns:
        (encoded stream rewound to offset 0, encoded length in bytes)
    """
    compressor = get_compressor(encoding)
    sink = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)
    length = 0
    try:
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            out = compressor.process(chunk)
            sink.write(out)
            length += len(out)
        out = compressor.finish()
        sink.write(out)
        length += len(out)
    except BaseException:
        sink.close()
        raise
    sink.seek(0)
    return sink, length  # type: ignore[return-value]


def compress_file(path: str | Path, encoding: str) -> tuple[BinaryIO, int]:
    """Open ``path`` and return its encoded form (see ``compress_stream``)."""
    with open(path, "rb") as source:
        return compress_stream(source, encoding)
