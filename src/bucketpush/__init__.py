"""
bucketpush - Push a local file tree to S3, Google Cloud Storage or Azure Blob Storage.

Uploads only what changed, optionally pre-compressed variants, and can delete
remote files that no longer exist locally.
"""

__version__ = "0.1.0"

# Push API
from bucketpush.core.encoding import EncodingOptions
from bucketpush.core.options import PushOptions
from bucketpush.core.push import push, push_sync

# Exceptions
from bucketpush.exceptions import (
    BucketPushError,
    ConfigurationError,
    FingerprintError,
    ProviderError,
    ProviderNotFoundError,
)

# Providers
from bucketpush.providers import (
    AzureBlobProvider,
    DryRunProvider,
    GCSProvider,
    MemoryProvider,
    S3Provider,
    create_provider,
)
from bucketpush.types import EncodingVariant, PushResult, RemoteObject, StorageProvider, UploadRequest

# Logging utilities
from bucketpush.utils.logging import get_logger, setup_logging, setup_logging_from_config

__all__ = [
    # Push
    "push",
    "push_sync",
    "PushOptions",
    "PushResult",
    "EncodingOptions",
    "EncodingVariant",
    # Provider contract
    "StorageProvider",
    "UploadRequest",
    "RemoteObject",
    # Providers
    "S3Provider",
    "AzureBlobProvider",
    "GCSProvider",
    "MemoryProvider",
    "DryRunProvider",
    "create_provider",
    # Exceptions
    "BucketPushError",
    "ConfigurationError",
    "ProviderError",
    "ProviderNotFoundError",
    "FingerprintError",
    # Logging
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    "__version__",
]
