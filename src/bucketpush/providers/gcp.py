"""
Google Cloud Storage provider.

Uses google-cloud-storage with application default credentials unless a
client or project/credentials are passed in.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from typing import Any, Optional

from bucketpush.exceptions import ConfigurationError, ProviderError
from bucketpush.types import RemoteObject, UploadRequest


class GCSProvider:
    """
    GCS provider for one bucket.

    GCS has no object tags; tags are merged into the object metadata
    (metadata wins on key clashes).
    """

    def __init__(
        self,
        bucket: str,
        *,
        project: Optional[str] = None,
        credentials: Any = None,
        client: Any = None,
    ):
        if not bucket:
            raise ConfigurationError("bucket is required for the GCS provider")
        self.bucket_name = bucket
        self.project = project
        self._credentials = credentials
        self._client = client
        self._bucket = None

    @property
    def client(self):
        """
        Get google.cloud.storage.Client (lazy initialization).
        """
        if self._client is None:
            from google.cloud import storage

            kwargs: dict[str, Any] = {}
            if self.project:
                kwargs["project"] = self.project
            if self._credentials is not None:
                kwargs["credentials"] = self._credentials
            self._client = storage.Client(**kwargs)
        return self._client

    @property
    def bucket(self):
        if self._bucket is None:
            self._bucket = self.client.bucket(self.bucket_name)
        return self._bucket

    def _upload(self, request: UploadRequest) -> None:
        blob = self.bucket.blob(request.dest_file_name)
        blob.content_type = request.content_type
        if request.content_encoding:
            blob.content_encoding = request.content_encoding
        if request.cache_control:
            blob.cache_control = request.cache_control
        metadata = {**(request.tags or {}), **(request.metadata or {})}
        if metadata:
            blob.metadata = metadata

        blob.upload_from_file(request.source, size=request.content_length, content_type=request.content_type)
        if request.make_public:
            blob.make_public()

    async def upload(self, request: UploadRequest) -> None:
        try:
            await asyncio.to_thread(self._upload, request)
        except Exception as e:
            raise ProviderError(
                f"GCS upload of {request.dest_file_name} failed: {e}", key=request.dest_file_name, cause=e
            ) from e

    def _list_blobs(self, prefix: str) -> list[RemoteObject]:
        results: list[RemoteObject] = []
        for blob in self.client.list_blobs(self.bucket_name, prefix=prefix or None):
            results.append(
                RemoteObject(
                    name=blob.name,
                    md5=_b64_to_hex(blob.md5_hash),
                    size=blob.size or 0,
                    metadata=dict(blob.metadata or {}),
                )
            )
        return results

    async def list(self, prefix: str, include_metadata: bool) -> list[RemoteObject]:
        # list_blobs already carries user metadata
        try:
            return await asyncio.to_thread(self._list_blobs, prefix)
        except Exception as e:
            raise ProviderError(f"GCS listing of gs://{self.bucket_name}/{prefix} failed: {e}", cause=e) from e

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.bucket.blob(key).delete)
        except Exception as e:
            raise ProviderError(f"GCS delete of {key} failed: {e}", key=key, cause=e) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(bucket='{self.bucket_name}')"


def _b64_to_hex(value: str | None) -> str | None:
    if not value:
        return None
    try:
        return binascii.hexlify(base64.b64decode(value)).decode()
    except (binascii.Error, ValueError):
        return None
