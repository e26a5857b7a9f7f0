"""
Dry-run provider: lists through the real provider, never writes.
"""

from __future__ import annotations

from bucketpush.types import AbstractLogger, RemoteObject, StorageProvider, UploadRequest


class DryRunProvider:
    """
    Decorator over a real provider.

    ``upload`` and ``delete`` only log the intended action; ``list`` passes
    through unmodified so diffing still sees the real remote state.
    """

    def __init__(self, real_provider: StorageProvider, logger: AbstractLogger):
        self.real_provider = real_provider
        self.logger = logger

    async def upload(self, request: UploadRequest) -> None:
        self.logger.info(f"Pretend upload: {request.dest_file_name} ({request.content_type})")

    async def list(self, prefix: str, include_metadata: bool) -> list[RemoteObject]:
        return await self.real_provider.list(prefix, include_metadata)

    async def delete(self, key: str) -> None:
        self.logger.info(f"Pretend delete: {key}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.real_provider!r})"
