"""
Encoding planner: which content-encoded variants of a file to upload.

Two configuration modes, mutually exclusive per run:

- Declarative ``EncodingOptions``: compress files matching an extension or
  MIME allow-list (and a minimum size) into each requested encoding, always
  alongside the raw object.
- Functional: a callable ``(dest_key, file_size, mime_type)`` returning the
  exact variants, or None for raw only.
"""

from __future__ import annotations

import fnmatch
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from bucketpush.exceptions import ConfigurationError
from bucketpush.types import ENCODING_SUFFIXES, EncodingVariant

EncodingFunction = Callable[[str, int, str], Union[Sequence[Any], None]]


@dataclass(frozen=True)
class EncodingOptions:
    """
    Declarative compression config.

    Attributes:
        content_encodings: Encodings to produce for matching files ("gzip",
            "br"; "raw" is accepted and always produced anyway)
        file_extensions: Key suffixes to match, with or without leading dot
            (e.g. "js", ".css", "d.ts")
        mime_types: MIME types to match; exact strings, compiled regular
            expressions, or wildcard patterns such as "text/*"
        min_file_size: Smallest file size in bytes worth compressing
    """

    content_encodings: tuple[str, ...] = ("gzip", "br")
    file_extensions: tuple[str, ...] = ()
    mime_types: tuple[str | re.Pattern, ...] = ()
    min_file_size: int = 0
    _suffixes: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for name in ("content_encodings", "file_extensions", "mime_types"):
            value = getattr(self, name)
            if isinstance(value, (str, re.Pattern)):
                value = (value,)
            object.__setattr__(self, name, tuple(value))

        unknown = [e for e in self.content_encodings if e not in ENCODING_SUFFIXES]
        if unknown:
            raise ConfigurationError(
                f"Unsupported content encodings {unknown}; expected any of {sorted(ENCODING_SUFFIXES)}"
            )
        if self.min_file_size < 0:
            raise ConfigurationError(f"min_file_size must be >= 0, got {self.min_file_size}")

        suffixes = tuple("." + ext.lstrip(".") for ext in self.file_extensions if ext.lstrip("."))
        object.__setattr__(self, "_suffixes", suffixes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EncodingOptions":
        """Build from a config mapping (camelCase keys accepted)."""
        aliases = {
            "contentEncodings": "content_encodings",
            "encodings": "content_encodings",
            "fileExtensions": "file_extensions",
            "extensions": "file_extensions",
            "mimeTypes": "mime_types",
            "minFileSize": "min_file_size",
        }
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = aliases.get(key, key)
            if name not in ("content_encodings", "file_extensions", "mime_types", "min_file_size"):
                raise ConfigurationError(f"Unknown encoding option: {key}")
            kwargs[name] = value
        return cls(**kwargs)

    def matches_extension(self, dest_key: str) -> bool:
        return any(dest_key.endswith(suffix) for suffix in self._suffixes)

    def matches_mime_type(self, mime_type: str | None) -> bool:
        if not mime_type:
            return False
        for pattern in self.mime_types:
            if isinstance(pattern, re.Pattern):
                if pattern.fullmatch(mime_type):
                    return True
            elif pattern == mime_type or ("*" in pattern and fnmatch.fnmatchcase(mime_type, pattern)):
                return True
        return False

    def should_compress(self, dest_key: str, file_size: int, mime_type: str | None) -> bool:
        if file_size < self.min_file_size:
            return False
        return self.matches_extension(dest_key) or self.matches_mime_type(mime_type)


EncodingConfig = Union[EncodingOptions, EncodingFunction, Mapping[str, Any], None]


def raw_only(dest_key: str) -> list[EncodingVariant]:
    return [EncodingVariant(dest_file_name=dest_key, encoding="raw")]


def _declarative_plan(
    options: EncodingOptions, dest_key: str, file_size: int, mime_type: str | None
) -> list[EncodingVariant]:
    if not options.should_compress(dest_key, file_size, mime_type):
        return raw_only(dest_key)

    variants: list[EncodingVariant] = []
    for encoding in dict.fromkeys(options.content_encodings):
        if encoding == "raw":
            continue
        variants.append(EncodingVariant(dest_file_name=dest_key + ENCODING_SUFFIXES[encoding], encoding=encoding))
    variants.extend(raw_only(dest_key))
    return variants


def _coerce_variant(item: Any) -> EncodingVariant:
    if isinstance(item, EncodingVariant):
        variant = item
    elif isinstance(item, Mapping):
        variant = EncodingVariant(
            dest_file_name=item.get("dest_file_name") or item.get("destFileName"),
            encoding=item.get("encoding", "raw"),
        )
    elif isinstance(item, (tuple, list)) and len(item) == 2:
        variant = EncodingVariant(dest_file_name=item[0], encoding=item[1])
    else:
        raise ConfigurationError(f"Encoding function returned an invalid variant: {item!r}")

    if not variant.dest_file_name:
        raise ConfigurationError(f"Encoding variant is missing a destination name: {item!r}")
    if variant.encoding not in ENCODING_SUFFIXES:
        raise ConfigurationError(f"Unsupported content encoding: {variant.encoding}")
    return variant


def normalize_encoding(encoding: EncodingConfig) -> EncodingOptions | EncodingFunction | None:
    """Accept EncodingOptions, a config mapping, a callable or None."""
    if encoding is None or isinstance(encoding, EncodingOptions):
        return encoding
    if isinstance(encoding, Mapping):
        return EncodingOptions.from_dict(encoding)
    if callable(encoding):
        return encoding
    raise ConfigurationError(f"Invalid encoding configuration: {encoding!r}")


def plan_encodings(
    dest_key: str,
    file_size: int,
    mime_type: str | None,
    encoding: EncodingConfig = None,
) -> list[EncodingVariant]:
    """
    Decide which variants of one file to upload.

    Args:
        dest_key: Destination key of the raw object
        file_size: Raw file size in bytes
        mime_type: Detected content type
        encoding: EncodingOptions, equivalent mapping, callable, or None

    Returns:
        One or more variants; exactly one raw variant when nothing matches
    """
    config = normalize_encoding(encoding)
    if config is None:
        return raw_only(dest_key)
    if isinstance(config, EncodingOptions):
        return _declarative_plan(config, dest_key, file_size, mime_type)

    planned = config(dest_key, file_size, mime_type)
    if planned is None:
        return raw_only(dest_key)
    return [_coerce_variant(item) for item in planned]
