"""
S3 storage provider.

Uses boto3 for upload, listing and deletion. Works with any S3-compatible
service (AWS, MinIO, Cloudflare R2, ...) through ``endpoint_url``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional
from urllib.parse import urlencode

from boto3.s3.transfer import TransferConfig

from bucketpush.exceptions import ConfigurationError, ProviderError
from bucketpush.types import RemoteObject, UploadRequest
from bucketpush.utils.logging import get_logger

logger = get_logger("bucketpush.providers.s3")

# Single PUT up to the S3 limit keeps ETag equal to the body MD5
SINGLE_PART_TRANSFER = TransferConfig(multipart_threshold=5 * 1024**3)


class S3Provider:
    """
    S3 provider.

    Provides lazy-initialized boto3 client with credential management.
    Supports AWS credentials from arguments, environment, or IAM role.

    Example:
        provider = S3Provider(
            bucket="my-bucket",
            region="us-east-1",
            access_key_id="AKIA...",     # Optional, uses env/IAM if not set
            secret_access_key="...",      # Optional
            endpoint_url="http://...",    # Optional (S3-compatible services)
        )
    """

    def __init__(
        self,
        bucket: str,
        *,
        list_metadata_concurrency: int = 3,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        session_token: Optional[str] = None,
        client: Any = None,
    ):
        if not bucket:
            raise ConfigurationError("bucket is required for the S3 provider")
        self.bucket = bucket
        self.list_metadata_concurrency = max(1, list_metadata_concurrency)
        self.region = region
        self.endpoint_url = endpoint_url
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._session_token = session_token
        self._client = client

    def _get_client_kwargs(self) -> dict[str, Any]:
        """Build kwargs for boto3 client initialization."""
        kwargs: dict[str, Any] = {}

        if self.region:
            kwargs["region_name"] = self.region

        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url

        # Explicit credentials override env/IAM
        if self._access_key_id and self._secret_access_key:
            kwargs["aws_access_key_id"] = self._access_key_id
            kwargs["aws_secret_access_key"] = self._secret_access_key
            if self._session_token:
                kwargs["aws_session_token"] = self._session_token

        return kwargs

    @property
    def client(self):
        """
        Get boto3 S3 client (lazy initialization).

        Returns:
            boto3.client('s3') instance
        """
        if self._client is None:
            import boto3

            self._client = boto3.client("s3", **self._get_client_kwargs())
        return self._client

    @staticmethod
    def build_extra_args(request: UploadRequest) -> dict[str, Any]:
        """Map an UploadRequest onto boto3 ``ExtraArgs``."""
        extra: dict[str, Any] = {"ContentType": request.content_type}
        if request.content_encoding:
            extra["ContentEncoding"] = request.content_encoding
        if request.metadata:
            extra["Metadata"] = dict(request.metadata)
        if request.tags:
            extra["Tagging"] = urlencode(request.tags)
        if request.make_public:
            extra["ACL"] = "public-read"
        if request.cache_control:
            extra["CacheControl"] = request.cache_control
        return extra

    async def upload(self, request: UploadRequest) -> None:
        """Upload one object as a single part so its ETag stays comparable to the local MD5."""
        try:
            await asyncio.to_thread(
                self.client.upload_fileobj,
                request.source,
                self.bucket,
                request.dest_file_name,
                ExtraArgs=self.build_extra_args(request),
                Config=SINGLE_PART_TRANSFER,
            )
        except Exception as e:
            raise ProviderError(
                f"S3 upload of {request.dest_file_name} failed: {e}", key=request.dest_file_name, cause=e
            ) from e

    def _list_objects(self, prefix: str) -> list[RemoteObject]:
        results: list[RemoteObject] = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                results.append(
                    RemoteObject(
                        name=obj.get("Key", ""),
                        md5=(obj.get("ETag") or "").replace('"', "") or None,
                        size=obj.get("Size", 0) or 0,
                    )
                )
        return results

    def _head_metadata(self, key: str) -> dict[str, str]:
        response = self.client.head_object(Bucket=self.bucket, Key=key)
        return response.get("Metadata") or {}

    async def list(self, prefix: str, include_metadata: bool) -> list[RemoteObject]:
        """
        List every object under ``prefix``.

        With ``include_metadata`` each object is HEADed for its user metadata,
        at most ``list_metadata_concurrency`` at a time.
        """
        try:
            results = await asyncio.to_thread(self._list_objects, prefix)
        except Exception as e:
            raise ProviderError(f"S3 listing of s3://{self.bucket}/{prefix} failed: {e}", cause=e) from e

        if not include_metadata:
            return results

        semaphore = asyncio.Semaphore(self.list_metadata_concurrency)

        async def with_metadata(obj: RemoteObject) -> RemoteObject:
            async with semaphore:
                try:
                    metadata = await asyncio.to_thread(self._head_metadata, obj.name)
                except Exception as e:
                    raise ProviderError(f"S3 head of {obj.name} failed: {e}", key=obj.name, cause=e) from e
            return RemoteObject(name=obj.name, md5=obj.md5, size=obj.size, metadata=dict(metadata))

        return list(await asyncio.gather(*(with_metadata(obj) for obj in results)))

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        except Exception as e:
            raise ProviderError(f"S3 delete of {key} failed: {e}", key=key, cause=e) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(bucket='{self.bucket}')"
