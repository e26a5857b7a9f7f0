"""
Type definitions shared by the push engine and the storage providers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Literal, Protocol, runtime_checkable

Encoding = Literal["raw", "gzip", "br"]

ENCODING_SUFFIXES: dict[str, str] = {
    "raw": "",
    "gzip": ".gz",
    "br": ".br",
}


@dataclass(frozen=True)
class RemoteObject:
    """Last-known state of one remote object, as returned by ``list``."""

    name: str
    md5: str | None = None
    size: int = 0
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class UploadRequest:
    """
    One object to write to the backend.

    ``source`` is a readable binary file object positioned at offset 0 holding
    exactly ``content_length`` bytes. ``md5_hash`` is always the hash of the
    raw (uncompressed) content, even for encoded variants.
    """

    source: BinaryIO
    dest_file_name: str
    content_type: str
    content_length: int
    md5_hash: str
    content_encoding: str | None = None
    metadata: dict[str, str] | None = None
    tags: dict[str, str] | None = None
    cache_control: str | None = None
    make_public: bool | None = None


@dataclass(frozen=True)
class EncodingVariant:
    """One encoded form of a local file, uploaded as its own object."""

    dest_file_name: str
    encoding: Encoding = "raw"

    @property
    def content_encoding(self) -> str | None:
        """HTTP Content-Encoding value for this variant (None for raw)."""
        return None if self.encoding == "raw" else self.encoding


@dataclass(frozen=True)
class PushResult:
    """Outcome of one push run."""

    elapsed_ms: int
    uploaded_files: list[str]
    uploaded_keys: list[str]
    skipped_keys: list[str]
    deleted_keys: list[str]
    error_keys: list[str]

    @property
    def has_errors(self) -> bool:
        return bool(self.error_keys)

    def summary(self) -> dict[str, Any]:
        """Counts for logs and the CLI summary line."""
        return {
            "elapsed_ms": self.elapsed_ms,
            "uploaded": len(self.uploaded_keys),
            "deleted": len(self.deleted_keys),
            "skipped": len(self.skipped_keys),
            "errors": len(self.error_keys),
        }


@runtime_checkable
class StorageProvider(Protocol):
    """
    Capability contract every storage backend implements.

    ``list`` must return every object under ``prefix`` (paginating
    internally); order is unspecified. ``upload`` and ``delete`` raise
    ``ProviderError`` on backend failure.
    """

    async def upload(self, request: UploadRequest) -> None: ...

    async def list(self, prefix: str, include_metadata: bool) -> list[RemoteObject]: ...

    async def delete(self, key: str) -> None: ...


class AbstractLogger(Protocol):
    """Anything with info/warning/error methods, e.g. a ``logging.Logger``."""

    def info(self, msg: str, *args: Any) -> Any: ...

    def warning(self, msg: str, *args: Any) -> Any: ...

    def error(self, msg: str, *args: Any) -> Any: ...
