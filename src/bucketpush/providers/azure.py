"""
Azure Blob Storage provider.

Uses azure-storage-blob. Authenticates with a shared account key, a SAS or
token credential, or anonymously against ``service_url`` (e.g. Azurite).
"""

from __future__ import annotations

import asyncio
import binascii
from typing import Any, Optional

from bucketpush.exceptions import ConfigurationError, ProviderError
from bucketpush.types import RemoteObject, UploadRequest
from bucketpush.utils.logging import get_logger

logger = get_logger("bucketpush.providers.azure")


class AzureBlobProvider:
    """
    Azure Blob provider for one container.

    Example:
        provider = AzureBlobProvider(
            container_name="$web",
            account="mystorageaccount",
            account_key="...",        # Optional; or pass credential=...
        )
    """

    def __init__(
        self,
        container_name: str,
        *,
        account: Optional[str] = None,
        account_key: Optional[str] = None,
        credential: Any = None,
        service_url: Optional[str] = None,
        container_client: Any = None,
    ):
        if not container_name:
            raise ConfigurationError("container_name is required for the Azure provider")
        if not (service_url or account or container_client is not None):
            raise ConfigurationError("Azure provider requires an account name or a service_url")
        self.container_name = container_name
        self.account = account
        self.service_url = service_url or f"https://{account}.blob.core.windows.net"
        if credential is None and account and account_key:
            credential = {"account_name": account, "account_key": account_key}
        self._credential = credential
        self._container_client = container_client
        self._warned_public = False

    @property
    def container_client(self):
        """
        Get the ContainerClient (lazy initialization).

        Returns:
            azure.storage.blob.ContainerClient instance
        """
        if self._container_client is None:
            from azure.storage.blob import BlobServiceClient

            service = BlobServiceClient(account_url=self.service_url, credential=self._credential)
            self._container_client = service.get_container_client(self.container_name)
        return self._container_client

    def _upload(self, request: UploadRequest) -> None:
        from azure.storage.blob import ContentSettings

        settings: dict[str, Any] = {"content_type": request.content_type}
        if request.content_encoding:
            settings["content_encoding"] = request.content_encoding
        else:
            # Only the raw object's stored bytes hash to md5_hash
            settings["content_md5"] = bytearray(binascii.unhexlify(request.md5_hash))
        if request.cache_control:
            settings["cache_control"] = request.cache_control

        self.container_client.upload_blob(
            name=request.dest_file_name,
            data=request.source,
            length=request.content_length,
            overwrite=True,
            content_settings=ContentSettings(**settings),
            metadata=dict(request.metadata) if request.metadata else None,
            tags=dict(request.tags) if request.tags else None,
        )

    async def upload(self, request: UploadRequest) -> None:
        if request.make_public and not self._warned_public:
            # Azure has no per-blob ACL; public access is a container setting
            logger.warning(f"make_public is ignored for Azure container '{self.container_name}'")
            self._warned_public = True
        try:
            await asyncio.to_thread(self._upload, request)
        except Exception as e:
            raise ProviderError(
                f"Azure upload of {request.dest_file_name} failed: {e}", key=request.dest_file_name, cause=e
            ) from e

    def _list_blobs(self, prefix: str, include_metadata: bool) -> list[RemoteObject]:
        include = ["metadata"] if include_metadata else None
        results: list[RemoteObject] = []
        for blob in self.container_client.list_blobs(name_starts_with=prefix or None, include=include):
            content_md5 = getattr(blob.content_settings, "content_md5", None)
            results.append(
                RemoteObject(
                    name=blob.name,
                    md5=binascii.hexlify(bytes(content_md5)).decode() if content_md5 else None,
                    size=blob.size or 0,
                    metadata=dict(blob.metadata or {}) if include_metadata else {},
                )
            )
        return results

    async def list(self, prefix: str, include_metadata: bool) -> list[RemoteObject]:
        try:
            return await asyncio.to_thread(self._list_blobs, prefix, include_metadata)
        except Exception as e:
            raise ProviderError(f"Azure listing of {self.container_name}/{prefix} failed: {e}", cause=e) from e

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.container_client.delete_blob, key)
        except Exception as e:
            raise ProviderError(f"Azure delete of {key} failed: {e}", key=key, cause=e) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(container='{self.container_name}')"
