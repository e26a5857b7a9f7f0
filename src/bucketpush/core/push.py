"""
Reconciliation engine: push a local file set to a storage provider.

One run lists the remote prefix once, decides per file whether to skip or
upload each encoded variant, then optionally deletes remote objects that no
local file accounts for. Failures of a single file, variant or deletion are
logged and reported in ``error_keys``; listing and glob failures abort the run.
"""

from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO

from bucketpush.core.compression import compress_file
from bucketpush.core.encoding import plan_encodings
from bucketpush.core.fingerprint import Fingerprint, fingerprint_file
from bucketpush.core.options import PushOptions, ResolvedOptions
from bucketpush.core.paths import MatchedFile, expand_globs
from bucketpush.providers.dryrun import DryRunProvider
from bucketpush.types import EncodingVariant, PushResult, RemoteObject, StorageProvider, UploadRequest
from bucketpush.utils.content_type import DEFAULT_CONTENT_TYPE, get_file_mime_type


@dataclass
class FileOutcome:
    """What happened to one matched local file."""

    name: str
    dest_key: str
    ignored: bool = False
    uploaded: bool = False
    processed_keys: list[str] = field(default_factory=list)
    uploaded_keys: list[str] = field(default_factory=list)
    skipped_keys: list[str] = field(default_factory=list)
    error_keys: list[str] = field(default_factory=list)


@dataclass
class DeleteOutcome:
    """What happened to one remote object left over after uploads."""

    key: str
    deleted: bool = False
    failed: bool = False


@dataclass(frozen=True)
class LocalSource:
    """Where a file's bytes come from (the matched file or its substitute)."""

    name: str
    path: Path


class Reconciler:
    """
    Executes one push run.

    A single semaphore bounds in-flight per-file pipelines and is reused for
    the delete phase, which starts only after every upload has finished.
    """

    def __init__(self, options: ResolvedOptions):
        self.options = options
        self.logger = options.logger
        self.provider: StorageProvider = (
            DryRunProvider(options.provider, options.logger) if options.dry_run else options.provider
        )
        self.existing: dict[str, RemoteObject] = {}
        self._semaphore = asyncio.Semaphore(options.concurrency)

    def dest_key(self, name: str) -> str:
        return f"{self.options.dest_path_prefix}{name}"

    async def run(self) -> PushResult:
        start = time.monotonic()
        opts = self.options

        files = await asyncio.to_thread(expand_globs, opts.patterns, opts.cwd)

        if opts.needs_remote_listing:
            remote = await self.provider.list(opts.dest_path_prefix, opts.list_include_metadata)
            self.existing = {obj.name: obj for obj in remote}

        if opts.upload_new_files_first:
            # Stable: new files first, glob order otherwise
            files = sorted(files, key=lambda f: self.dest_key(f.name) in self.existing)

        outcomes: list[FileOutcome] = await asyncio.gather(*(self._process_file(f) for f in files))

        deletions: list[DeleteOutcome] = []
        if opts.should_delete is not None:
            processed = {key for outcome in outcomes for key in outcome.processed_keys}
            extras = [obj for name, obj in self.existing.items() if name not in processed]
            deletions = await asyncio.gather(*(self._delete_extra(obj) for obj in extras))

        return self._build_result(outcomes, deletions, start)

    async def _process_file(self, matched: MatchedFile) -> FileOutcome:
        async with self._semaphore:
            return await self._process_file_unbounded(matched)

    async def _process_file_unbounded(self, matched: MatchedFile) -> FileOutcome:
        opts = self.options
        name = matched.name

        dest_key = self.dest_key(name)
        outcome = FileOutcome(name=name, dest_key=dest_key, processed_keys=[dest_key])

        try:
            if opts.ignore_file is not None and opts.ignore_file(name):
                self.logger.info(f"Ignoring {name}")
                return FileOutcome(name=name, dest_key=dest_key, ignored=True)
            source = self._resolve_source(matched)
            content_type = await get_file_mime_type(source.path, opts.mime_types) or DEFAULT_CONTENT_TYPE
            fingerprint = await fingerprint_file(source.path)
            variants = plan_encodings(dest_key, fingerprint.size, content_type, opts.encoding)
            outcome.processed_keys = [variant.dest_file_name for variant in variants]
            shared = self._shared_fields(source.name)
        except Exception as e:
            # Still counts as processed: a file that failed here is never deleted remotely
            self.logger.error(f"Failed to prepare {name}: {e}")
            outcome.error_keys.append(dest_key)
            return outcome

        remote = self.existing.get(dest_key)
        if opts.only_upload_changes and remote is not None and _same_md5(remote.md5, fingerprint.md5):
            self.logger.info(f"Skipping {dest_key} (unchanged)")
            outcome.skipped_keys.append(dest_key)
            return outcome

        for variant in variants:
            try:
                await self._upload_variant(source, variant, fingerprint, content_type, shared)
            except Exception as e:
                self.logger.error(f"Failed to upload {variant.dest_file_name}: {e}")
                outcome.error_keys.append(variant.dest_file_name)
            else:
                self.logger.info(f"Uploaded {variant.dest_file_name}")
                outcome.uploaded_keys.append(variant.dest_file_name)

        outcome.uploaded = True
        return outcome

    def _resolve_source(self, matched: MatchedFile) -> LocalSource:
        substitute_file = self.options.substitute_file
        if substitute_file is not None:
            alternate = substitute_file(matched.name)
            if alternate:
                alternate = str(alternate)
                self.logger.info(f"Substituting {matched.name} with {alternate}")
                return LocalSource(name=alternate, path=self.options.cwd / alternate)
        return LocalSource(name=matched.name, path=matched.path)

    def _shared_fields(self, source_name: str) -> dict[str, Any]:
        """Per-file request fields, resolved from the configured functions."""
        opts = self.options
        metadata = opts.get_metadata(source_name)
        tags = opts.get_tags(source_name)
        make_public = opts.get_make_public(source_name)
        return {
            "metadata": dict(metadata) if metadata is not None else None,
            "tags": dict(tags) if tags is not None else None,
            "cache_control": opts.get_cache_control(source_name),
            "make_public": bool(make_public) if make_public is not None else None,
        }

    async def _open_variant(self, path: Path, variant: EncodingVariant) -> tuple[BinaryIO, int]:
        if variant.encoding == "raw":
            source = await asyncio.to_thread(open, path, "rb")
            return source, os.fstat(source.fileno()).st_size
        return await asyncio.to_thread(compress_file, path, variant.encoding)

    async def _upload_variant(
        self,
        source: LocalSource,
        variant: EncodingVariant,
        fingerprint: Fingerprint,
        content_type: str,
        shared: dict[str, Any],
    ) -> None:
        stream, length = await self._open_variant(source.path, variant)
        try:
            request = UploadRequest(
                source=stream,
                dest_file_name=variant.dest_file_name,
                content_type=content_type,
                content_length=length,
                md5_hash=fingerprint.md5,
                content_encoding=variant.content_encoding,
                **shared,
            )
            await self.provider.upload(request)
        finally:
            stream.close()

    async def _delete_extra(self, remote: RemoteObject) -> DeleteOutcome:
        async with self._semaphore:
            try:
                if not self.options.should_delete(remote):
                    self.logger.info(f"Keeping extra file {remote.name}")
                    return DeleteOutcome(key=remote.name)
                await self.provider.delete(remote.name)
            except Exception as e:
                self.logger.error(f"Failed to delete {remote.name}: {e}")
                return DeleteOutcome(key=remote.name, failed=True)
            self.logger.info(f"Deleted {remote.name}")
            return DeleteOutcome(key=remote.name, deleted=True)

    def _build_result(self, outcomes: list[FileOutcome], deletions: list[DeleteOutcome], start: float) -> PushResult:
        uploaded_files: list[str] = []
        uploaded_keys: list[str] = []
        skipped_keys: list[str] = []
        error_keys: list[str] = []
        for outcome in outcomes:
            if outcome.uploaded:
                uploaded_files.append(outcome.name)
            uploaded_keys.extend(outcome.uploaded_keys)
            skipped_keys.extend(outcome.skipped_keys)
            error_keys.extend(outcome.error_keys)

        deleted_keys = [d.key for d in deletions if d.deleted]
        error_keys.extend(d.key for d in deletions if d.failed)

        return PushResult(
            elapsed_ms=int((time.monotonic() - start) * 1000),
            uploaded_files=uploaded_files,
            uploaded_keys=uploaded_keys,
            skipped_keys=skipped_keys,
            deleted_keys=deleted_keys,
            error_keys=error_keys,
        )


def _same_md5(remote_md5: str | None, local_md5: str) -> bool:
    return remote_md5 is not None and remote_md5.lower() == local_md5.lower()


async def push(options: PushOptions | None = None, /, **kwargs: Any) -> PushResult:
    """
    Synchronize local files matching ``files`` globs to ``provider``.

    Accepts either a ``PushOptions`` instance or its fields as keyword
    arguments.

    Examples:
        result = await push(files=["dist/**/*"], provider=S3Provider(bucket="site"))

        result = await push(PushOptions(files="dist/**/*", provider=provider, concurrency=8))

    Raises:
        ConfigurationError: Invalid options (before any file is touched)
        ProviderError: The remote listing failed
    """
    if options is None:
        options = PushOptions(**kwargs)
    elif kwargs:
        raise TypeError("push() takes either a PushOptions instance or keyword arguments, not both")
    return await Reconciler(options.resolve()).run()


def push_sync(options: PushOptions | None = None, /, **kwargs: Any) -> PushResult:
    """
    Synchronous wrapper for push().

    See push() for parameter documentation.
    """
    return asyncio.run(push(options, **kwargs))
