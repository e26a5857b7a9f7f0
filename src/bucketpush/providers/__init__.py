"""
Storage providers and destination URI wiring.

Each backend is a separate class implementing the StorageProvider protocol
(``upload``, ``list``, ``delete``); SDKs are imported lazily on first use.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any, NamedTuple

from bucketpush.exceptions import ConfigurationError, ProviderNotFoundError
from bucketpush.providers.azure import AzureBlobProvider
from bucketpush.providers.dryrun import DryRunProvider
from bucketpush.providers.gcp import GCSProvider
from bucketpush.providers.memory import MemoryProvider
from bucketpush.providers.s3 import S3Provider
from bucketpush.types import StorageProvider

DESTINATION_PATTERN = re.compile(r"^([a-zA-Z0-9]+)://([a-zA-Z0-9$._-]+)/*(.*)$")


class Destination(NamedTuple):
    scheme: str
    bucket: str
    # Key prefix given after the bucket, e.g. "site/" in s3://bucket/site/
    path: str


def parse_destination(destination: str) -> Destination:
    """
    Split ``<provider>://<bucket>[/path]`` into its parts.

    Raises:
        ConfigurationError: If the URI is malformed
    """
    match = DESTINATION_PATTERN.match(destination.strip())
    if match is None:
        raise ConfigurationError(
            "destination should be in the format of <provider>://<bucket> "
            f"e.g. s3://my-bucket-name, got '{destination}'"
        )
    scheme, bucket, path = match.groups()
    if path and not path.endswith("/"):
        path += "/"
    return Destination(scheme=scheme.lower(), bucket=bucket, path=path)


def _s3(bucket: str, options: dict[str, Any]) -> StorageProvider:
    return S3Provider(
        bucket,
        list_metadata_concurrency=options.get("concurrency") or 3,
        region=options.get("region"),
        endpoint_url=options.get("endpoint_url"),
        access_key_id=options.get("access_key_id"),
        secret_access_key=options.get("secret_access_key"),
        session_token=options.get("session_token"),
    )


def _gcp(bucket: str, options: dict[str, Any]) -> StorageProvider:
    return GCSProvider(bucket, project=options.get("project"))


def _azure(bucket: str, options: dict[str, Any]) -> StorageProvider:
    return AzureBlobProvider(
        bucket,
        account=options.get("account_name"),
        account_key=options.get("account_key"),
        service_url=options.get("service_url"),
    )


def _memory(bucket: str, options: dict[str, Any]) -> StorageProvider:
    return MemoryProvider()


PROVIDER_FACTORIES: dict[str, Callable[[str, dict[str, Any]], StorageProvider]] = {
    "s3": _s3,
    "gcp": _gcp,
    "gs": _gcp,
    "azure": _azure,
    "memory": _memory,
}


def create_provider(destination: str, **options: Any) -> StorageProvider:
    """
    Build the provider for a destination URI.

    Args:
        destination: ``s3://bucket``, ``gcp://bucket`` (or ``gs://``),
            ``azure://container`` or ``memory://name``
        **options: Provider options (concurrency, account_name, account_key,
            region, endpoint_url, service_url, project, ...); None values are
            ignored

    Raises:
        ConfigurationError: Malformed destination or missing provider option
        ProviderNotFoundError: Unsupported scheme
    """
    parsed = parse_destination(destination)
    factory = PROVIDER_FACTORIES.get(parsed.scheme)
    if factory is None:
        raise ProviderNotFoundError(parsed.scheme)
    return factory(parsed.bucket, {k: v for k, v in options.items() if v is not None})


__all__ = [
    "AzureBlobProvider",
    "Destination",
    "DryRunProvider",
    "GCSProvider",
    "MemoryProvider",
    "S3Provider",
    "create_provider",
    "parse_destination",
]
