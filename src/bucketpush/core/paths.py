"""
Local file discovery and destination key normalization.
"""

from __future__ import annotations

import glob
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from bucketpush.utils.logging import get_logger

logger = get_logger("bucketpush.core.paths")


def path_trim_start(path: str) -> str:
    """
    Normalize a matched path for comparison and upload.

    Strips one leading ``./`` and then one leading ``/``, and converts OS
    separators to ``/``.
    """
    path = path.replace(os.sep, "/") if os.sep != "/" else path
    if path.startswith("./"):
        path = path[2:]
    if path.startswith("/"):
        path = path[1:]
    return path


def split_patterns(files: str | Iterable[str]) -> list[str]:
    """Accept a comma-separated string or an iterable of glob patterns."""
    if isinstance(files, str):
        return [p.strip() for p in files.split(",") if p.strip()]
    return [p for p in files if p]


@dataclass(frozen=True)
class MatchedFile:
    """A local file matched by a glob."""

    # Normalized name relative to the working directory (used for keys)
    name: str
    # Path to read bytes from
    path: Path


def expand_globs(patterns: str | Iterable[str], cwd: str | Path | None = None) -> list[MatchedFile]:
    """
    Expand glob patterns to regular files.

    ``**`` matches any number of directories. Directories are never returned;
    hidden files are only matched by patterns that name them explicitly.
    Results keep pattern order (sorted within one pattern) and are
    de-duplicated by normalized name.

    Args:
        patterns: Glob patterns, relative to ``cwd`` (or absolute)
        cwd: Root directory for relative patterns (default: current directory)
    """
    root = Path(cwd) if cwd is not None else Path.cwd()
    if not root.is_dir():
        raise FileNotFoundError(f"Working directory not found: {root}")

    seen: set[str] = set()
    matched: list[MatchedFile] = []
    for pattern in split_patterns(patterns):
        hits = sorted(glob.glob(pattern, root_dir=root, recursive=True))
        logger.debug(f"Pattern {pattern!r} matched {len(hits)} paths")
        for hit in hits:
            full = root / hit
            if not full.is_file():
                continue
            name = path_trim_start(hit)
            if name in seen:
                continue
            seen.add(name)
            matched.append(MatchedFile(name=name, path=full))
    return matched
