"""
bucketpush exception hierarchy.

All domain-specific exceptions inherit from BucketPushError, so callers can
catch any tool error with a single base class while still handling the
narrower cases when needed.

Hierarchy::

    BucketPushError
    ├── ConfigurationError        - bad destination, options, config file
    ├── ProviderError             - upload/list/delete failed on the backend
    │   └── ProviderNotFoundError - destination scheme has no adapter
    └── FingerprintError          - local file could not be read/hashed
"""

from __future__ import annotations


class BucketPushError(Exception):
    """Base exception for all bucketpush errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(BucketPushError):
    """Raised when options, destination URIs or config files are invalid.

    These are setup errors: they are raised before any file is touched.
    """


# --- Providers ---------------------------------------------------------------


class ProviderError(BucketPushError):
    """Raised when a storage backend rejects an upload, list or delete."""

    def __init__(self, message: str, *, key: str | None = None, cause: Exception | None = None) -> None:
        super().__init__(message, details={"key": key})
        self.key = key
        if cause is not None:
            self.__cause__ = cause


class ProviderNotFoundError(ProviderError, ConfigurationError):
    """Raised when a destination scheme has no registered provider."""

    def __init__(self, scheme: str) -> None:
        super().__init__(f"{scheme} is not supported")
        self.details = {"scheme": scheme}
        self.scheme = scheme


# --- Local files -------------------------------------------------------------


class FingerprintError(BucketPushError, OSError):
    """Raised when a local file cannot be opened or read for hashing."""

    def __init__(self, path: str, *, cause: Exception | None = None) -> None:
        reason = f": {cause}" if cause is not None else ""
        super().__init__(f"Cannot fingerprint '{path}'{reason}", details={"path": path})
        self.path = path
        if cause is not None:
            self.__cause__ = cause
