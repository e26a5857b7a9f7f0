"""
Content type detection for uploaded files.

Extension lookup first (custom table, then the standard table); files with an
unknown extension are sniffed for an HTML preamble.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import aiofiles

from bucketpush.utils.logging import get_logger

logger = get_logger("bucketpush.utils.content_type")

DEFAULT_CONTENT_TYPE = "application/octet-stream"

SNIFF_CHARS = 200

# Keep this table sorted by content type to avoid duplicates
STANDARD_CONTENT_TYPES: dict[str, list[str]] = {
    "application/epub+zip": ["epub"],
    "application/gzip": ["gz"],
    "application/java-archive": ["jar"],
    "application/json": ["json"],
    "application/ld+json": ["jsonld"],
    "application/msword": ["doc"],
    "application/octet-stream": ["bin"],
    "application/ogg": ["ogx"],
    "application/pdf": ["pdf"],
    "application/rtf": ["rtf"],
    "application/vnd.amazon.ebook": ["azw"],
    "application/vnd.apple.installer+xml": ["mpkg"],
    "application/vnd.mozilla.xul+xml": ["xul"],
    "application/vnd.ms-excel": ["xls"],
    "application/vnd.ms-fontobject": ["eot"],
    "application/vnd.ms-powerpoint": ["ppt"],
    "application/vnd.oasis.opendocument.presentation": ["odp"],
    "application/vnd.oasis.opendocument.spreadsheet": ["ods"],
    "application/vnd.oasis.opendocument.text": ["odt"],
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": ["pptx"],
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ["xlsx"],
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ["docx"],
    "application/vnd.rar": ["rar"],
    "application/vnd.visio": ["vsd"],
    "application/wasm": ["wasm"],
    "application/x-7z-compressed": ["7z"],
    "application/x-abiword": ["abw"],
    "application/x-bzip": ["bz"],
    "application/x-bzip2": ["bz2"],
    "application/x-cdf": ["cda"],
    "application/x-csh": ["csh"],
    "application/x-freearc": ["arc"],
    "application/x-httpd-php": ["php"],
    "application/x-sh": ["sh"],
    "application/x-tar": ["tar"],
    "application/xhtml+xml": ["xhtml"],
    "application/xml": ["xml"],
    "application/zip": ["zip"],
    "audio/aac": ["aac"],
    "audio/midi": ["mid", "midi"],
    "audio/mpeg": ["mp3"],
    "audio/ogg": ["oga"],
    "audio/opus": ["opus"],
    "audio/wav": ["wav"],
    "audio/webm": ["weba"],
    "font/otf": ["otf"],
    "font/ttf": ["ttf"],
    "font/woff": ["woff"],
    "font/woff2": ["woff2"],
    "image/avif": ["avif"],
    "image/bmp": ["bmp"],
    "image/gif": ["gif"],
    "image/jpeg": ["jpeg", "jpg"],
    "image/png": ["png"],
    "image/svg+xml": ["svg"],
    "image/tiff": ["tif", "tiff"],
    "image/vnd.microsoft.icon": ["ico"],
    "image/webp": ["webp"],
    "text/calendar": ["ics"],
    "text/css": ["css"],
    "text/csv": ["csv"],
    "text/html": ["htm", "html"],
    "text/javascript": ["js", "mjs"],
    "text/markdown": ["md"],
    "text/plain": ["txt"],
    "video/3gpp": ["3gp"],
    "video/3gpp2": ["3g2"],
    "video/mp2t": ["ts"],
    "video/mp4": ["mp4"],
    "video/mpeg": ["mpeg"],
    "video/ogg": ["ogv"],
    "video/webm": ["webm"],
    "video/x-msvideo": ["avi"],
}


def reverse_mime_map(content_types: Mapping[str, Sequence[str]]) -> dict[str, str]:
    """
    Turn ``{content_type: [ext, ...]}`` into ``{ext: content_type}``.

    The first content type listed for an extension wins. Extensions are
    matched case-insensitively and may be given with or without a leading dot.
    """
    by_extension: dict[str, str] = {}
    for content_type, extensions in content_types.items():
        if isinstance(extensions, str):
            extensions = [extensions]
        for ext in extensions:
            by_extension.setdefault(ext.lower().lstrip("."), content_type)
    return by_extension


STANDARD_EXTENSION_TYPES = reverse_mime_map(STANDARD_CONTENT_TYPES)


def _extension(filename: str) -> str:
    name = Path(filename).name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


async def _read_chars(filename: str | Path, num_chars: int) -> str:
    async with aiofiles.open(filename, "r", encoding="utf-8", errors="replace") as f:
        return await f.read(num_chars)


def _looks_like_html(text: str) -> bool:
    lowered = text.lower()
    return "<html>" in lowered or "<!doctype html>" in lowered


async def get_file_mime_type(
    filename: str | Path,
    custom_mime_types: Mapping[str, Sequence[str]] | None = None,
) -> str | None:
    """
    Detect the content type of a local file.

    Args:
        filename: Local file path
        custom_mime_types: Override table ``{content_type: [ext, ...]}``;
            consulted before the standard table

    Returns:
        The content type, or None when it cannot be determined
    """
    ext = _extension(str(filename))

    if ext:
        if custom_mime_types:
            custom = reverse_mime_map(custom_mime_types).get(ext)
            if custom is not None:
                return custom
        standard = STANDARD_EXTENSION_TYPES.get(ext)
        if standard is not None:
            return standard

    try:
        chars = await _read_chars(filename, SNIFF_CHARS)
    except OSError as e:
        logger.debug(f"Could not sniff content type of {filename}: {e}")
        return None

    if _looks_like_html(chars):
        return "text/html"
    return None
