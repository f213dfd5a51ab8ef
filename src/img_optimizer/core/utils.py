"""Core utility helpers for the Image Optimizer Service.

The helpers in this module are framework-agnostic pure functions shared by
the pipeline, the cache backends, the HTTP layer and tests:

* Deterministic cache-key derivation from the normalized request.
* Content-type sniffing from leading signature bytes.
* Source URL checks (absolute http/https URL, ``.svg`` suffix).
* Project root detection for locating ``logs/`` and ``.env``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Final
from urllib.parse import urlsplit

_ROOT_MARKERS: Final = ("pyproject.toml", ".git")

_JPEG_SIGNATURE: Final = b"\xff\xd8\xff"
_PNG_SIGNATURE: Final = b"\x89PNG\r\n\x1a\n"
_SNIFF_MIN_BYTES: Final = 12

OCTET_STREAM: Final = "application/octet-stream"


def get_project_root() -> Path:
    """Return the repository root.

    Example
    -------
    >>> root = get_project_root()
    >>> (root / "pyproject.toml").exists()
    True
    """

    start = Path(__file__).resolve()
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    return start.parents[3]


def generate_cache_key(
    src: str,
    width: int | None,
    quality: int,
    format: str | None,
) -> str:
    """Derive the cache key for a transformation request.

    The key is the SHA-256 hex digest of the UTF-8 bytes of ``src``, the
    decimal ``width`` (only when present), the decimal ``quality`` and the
    ``format`` string (only when present), concatenated with no delimiters.
    Absent segments are omitted entirely. Stores shared across deployments
    depend on this exact layout.

    Example
    -------
    >>> len(generate_cache_key("https://example.com/a.png", 100, 75, "webp"))
    64
    """

    hasher = hashlib.sha256()
    hasher.update(src.encode())
    if width is not None:
        hasher.update(str(width).encode())
    hasher.update(str(quality).encode())
    if format is not None:
        hasher.update(format.encode())
    return hasher.hexdigest()


def guess_content_type(data: bytes) -> str:
    """Infer a media type from the leading signature bytes of ``data``.

    Buffers shorter than 12 bytes are never sniffed.

    Example
    -------
    >>> guess_content_type(b"\\x89PNG\\r\\n\\x1a\\n\\x00\\x00\\x00\\x0d")
    'image/png'
    """

    if len(data) < _SNIFF_MIN_BYTES:
        return OCTET_STREAM
    if data.startswith(_JPEG_SIGNATURE):
        return "image/jpeg"
    if data.startswith(_PNG_SIGNATURE):
        return "image/png"
    if data[0:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return OCTET_STREAM


def is_valid_source_url(src: str) -> bool:
    """Return True if ``src`` is an absolute URL with an http(s) scheme and a host."""

    try:
        parts = urlsplit(src)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def is_svg_source(src: str) -> bool:
    """Return True if the source URL names an SVG file (case-insensitive suffix)."""

    return src.lower().endswith(".svg")


__all__ = [
    "OCTET_STREAM",
    "generate_cache_key",
    "get_project_root",
    "guess_content_type",
    "is_svg_source",
    "is_valid_source_url",
]
