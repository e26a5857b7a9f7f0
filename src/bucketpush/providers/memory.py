"""
In-memory storage provider for testing.

Stores uploaded bytes in-process. Useful for exercising push runs without a
real bucket.

Example:
    from bucketpush import push
    from bucketpush.providers import MemoryProvider

    provider = MemoryProvider()
    result = await push(files=["dist/**/*"], provider=provider)
    provider.get_object("dist/index.html").body
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bucketpush.core.fingerprint import md5_bytes
from bucketpush.exceptions import ProviderError
from bucketpush.types import RemoteObject, UploadRequest


@dataclass
class StoredObject:
    """One object held by MemoryProvider."""

    name: str
    body: bytes
    md5: str | None
    content_type: str | None = None
    content_encoding: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)
    cache_control: str | None = None
    public: bool = False
    request_md5: str | None = None

    def to_remote(self, include_metadata: bool) -> RemoteObject:
        return RemoteObject(
            name=self.name,
            md5=self.md5,
            size=len(self.body),
            metadata=dict(self.metadata) if include_metadata else {},
        )


class MemoryProvider:
    """
    StorageProvider backed by a dict.

    Like S3 single-part uploads, each object's listed md5 is the hash of the
    stored bytes; ``request_md5`` keeps the raw hash the engine sent.
    Seed ``initial`` with RemoteObjects to model existing remote state.
    """

    def __init__(self, initial: list[RemoteObject] | None = None):
        self._objects: dict[str, StoredObject] = {}
        self.upload_calls: list[str] = []
        self.list_calls: list[tuple[str, bool]] = []
        self.delete_calls: list[str] = []
        for remote in initial or []:
            self._objects[remote.name] = StoredObject(
                name=remote.name,
                body=b"\0" * remote.size,
                md5=remote.md5,
                metadata=dict(remote.metadata),
            )

    async def upload(self, request: UploadRequest) -> None:
        self.upload_calls.append(request.dest_file_name)
        body = request.source.read()
        if len(body) != request.content_length:
            raise ProviderError(
                f"Content length mismatch for {request.dest_file_name}: "
                f"declared {request.content_length}, streamed {len(body)}",
                key=request.dest_file_name,
            )
        self._objects[request.dest_file_name] = StoredObject(
            name=request.dest_file_name,
            body=body,
            md5=md5_bytes(body),
            content_type=request.content_type,
            content_encoding=request.content_encoding,
            metadata=dict(request.metadata or {}),
            tags=dict(request.tags or {}),
            cache_control=request.cache_control,
            public=bool(request.make_public),
            request_md5=request.md5_hash,
        )

    async def list(self, prefix: str, include_metadata: bool) -> list[RemoteObject]:
        self.list_calls.append((prefix, include_metadata))
        return [obj.to_remote(include_metadata) for name, obj in self._objects.items() if name.startswith(prefix)]

    async def delete(self, key: str) -> None:
        self.delete_calls.append(key)
        if key not in self._objects:
            raise ProviderError(f"No such key: {key}", key=key)
        del self._objects[key]

    def get_object(self, key: str) -> StoredObject | None:
        """Get a stored object (for testing)."""
        return self._objects.get(key)

    @property
    def keys(self) -> list[str]:
        """Stored keys, sorted."""
        return sorted(self._objects)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(objects={len(self._objects)})"
