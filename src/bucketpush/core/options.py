"""
Push options and their normalization.

Options that accept either a literal or a function (metadata, tags,
cache_control, make_public, should_delete_extra_files) are wrapped into
function form once, so the engine only ever calls functions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar, Union

from bucketpush.core.encoding import EncodingConfig, EncodingFunction, EncodingOptions, normalize_encoding
from bucketpush.core.paths import split_patterns
from bucketpush.exceptions import ConfigurationError
from bucketpush.types import AbstractLogger, RemoteObject, StorageProvider
from bucketpush.utils.logging import get_logger

T = TypeVar("T")

PerFile = Union[T, Callable[[str], T], None]


def per_file(value: Any) -> Callable[[str], Any]:
    """Wrap a literal in a constant-returning function; pass functions through."""
    if callable(value):
        return value
    return lambda _name: value


def delete_predicate(value: bool | Callable[[RemoteObject], bool] | None) -> Callable[[RemoteObject], bool] | None:
    """Normalize ``should_delete_extra_files``; None means deletion is off."""
    if value is None or value is False:
        return None
    if callable(value):
        return value
    return lambda _remote: True


@dataclass
class PushOptions:
    """
    Everything a push run needs.

    ``files`` and ``provider`` are required; all other fields have the
    defaults of an incremental, non-destructive, sequential upload.
    """

    files: str | Sequence[str]
    provider: StorageProvider
    current_working_directory: str | Path | None = None
    dest_path_prefix: str = ""
    concurrency: int = 1
    only_upload_changes: bool = True
    should_delete_extra_files: bool | Callable[[RemoteObject], bool] = False
    upload_new_files_first: bool = True
    list_include_metadata: bool = False
    ignore_file: Callable[[str], bool] | None = None
    substitute_file: Callable[[str], str | Path | None] | None = None
    metadata: PerFile[Mapping[str, str]] = None
    tags: PerFile[Mapping[str, str]] = None
    cache_control: PerFile[str] = None
    make_public: PerFile[bool] = None
    mime_types: Mapping[str, Sequence[str]] | None = None
    encoding: EncodingConfig = None
    dry_run: bool = False
    logger: AbstractLogger | None = field(default=None, repr=False)

    def resolve(self) -> "ResolvedOptions":
        """Validate options and normalize them into function form."""
        if self.provider is None:
            raise ConfigurationError("provider is required")
        if not isinstance(self.provider, StorageProvider):
            raise ConfigurationError(
                f"provider must implement upload/list/delete, got {type(self.provider).__name__}"
            )
        patterns = split_patterns(self.files)
        if not patterns:
            raise ConfigurationError("files must contain at least one glob pattern")
        if not isinstance(self.concurrency, int) or self.concurrency < 1:
            raise ConfigurationError(f"concurrency must be a positive integer, got {self.concurrency!r}")

        return ResolvedOptions(
            patterns=patterns,
            provider=self.provider,
            cwd=Path(self.current_working_directory) if self.current_working_directory else Path.cwd(),
            dest_path_prefix=self.dest_path_prefix or "",
            concurrency=self.concurrency,
            only_upload_changes=bool(self.only_upload_changes),
            should_delete=delete_predicate(self.should_delete_extra_files),
            upload_new_files_first=bool(self.upload_new_files_first),
            list_include_metadata=bool(self.list_include_metadata),
            ignore_file=self.ignore_file,
            substitute_file=self.substitute_file,
            get_metadata=per_file(_copy_mapping(self.metadata)),
            get_tags=per_file(_copy_mapping(self.tags)),
            get_cache_control=per_file(self.cache_control),
            get_make_public=per_file(self.make_public),
            mime_types=self.mime_types,
            encoding=normalize_encoding(self.encoding),
            dry_run=bool(self.dry_run),
            logger=self.logger or get_logger("bucketpush.push"),
        )


@dataclass(frozen=True)
class ResolvedOptions:
    patterns: list[str]
    provider: StorageProvider
    cwd: Path
    dest_path_prefix: str
    concurrency: int
    only_upload_changes: bool
    should_delete: Callable[[RemoteObject], bool] | None
    upload_new_files_first: bool
    list_include_metadata: bool
    ignore_file: Callable[[str], bool] | None
    substitute_file: Callable[[str], str | Path | None] | None
    get_metadata: Callable[[str], Mapping[str, str] | None]
    get_tags: Callable[[str], Mapping[str, str] | None]
    get_cache_control: Callable[[str], str | None]
    get_make_public: Callable[[str], bool | None]
    mime_types: Mapping[str, Sequence[str]] | None
    encoding: EncodingOptions | EncodingFunction | None
    dry_run: bool
    logger: AbstractLogger | logging.Logger

    @property
    def needs_remote_listing(self) -> bool:
        return self.only_upload_changes or self.should_delete is not None or self.upload_new_files_first


def _copy_mapping(value: Any) -> Any:
    # Literal dicts are snapshotted at resolve time
    if isinstance(value, Mapping):
        return dict(value)
    return value
