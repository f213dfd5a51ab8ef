"""Value objects for the Image Optimizer Service.

This module defines the immutable values that flow through the request
pipeline: the raw request parameters as received from a transport, the
validated request the pipeline works with, the output format set, and the
result of the transform stage.

Design Principles:
    - Immutability: All value objects are frozen dataclasses (slots=True)
    - Two stages: ``RequestParams`` holds raw, unvalidated input;
      ``ValidatedRequest`` only exists once every bound has been checked
    - No I/O: Values carry data only; validation lives in the pipeline

Key Value Objects:
    - RequestParams: Raw ``{src, w, q, f}`` record from the transport
    - ValidatedRequest: Parameters that passed validation (quality defaulted)
    - OutputFormat: Encodings the transformer can produce
    - ProcessedImage: Encoded bytes plus the format actually used
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

MAX_WIDTH = 3840
"""Largest accepted target width in pixels (inclusive)."""

DEFAULT_QUALITY = 75
"""Quality applied when the request does not specify one."""

MAX_IMAGE_SIZE = 50 * 1024 * 1024
"""Ceiling on downloaded source bytes (50 MiB)."""


class OutputFormat(StrEnum):
    """Encodings the transformer produces.

    Attributes:
        JPEG: Lossy, no alpha channel. Default for opaque sources.
        PNG: Lossless, keeps alpha. Default for sources with transparency.
        WEBP: Lossy with alpha. Only produced on explicit request.
    """

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"

    @property
    def content_type(self) -> str:
        return f"image/{self.value}"


@dataclass(slots=True, frozen=True)
class RequestParams:
    """Raw transformation request as parsed by a transport.

    Every field is optional here; absence of ``src`` and out-of-range values
    are reported by the pipeline's validation step, never by construction.

    Attributes:
        src: Source image URL. None if the parameter was absent.
        width: Requested width in pixels. None means keep source width.
        quality: Requested quality (1-100). None means ``DEFAULT_QUALITY``.
        format: Requested output format string. None means auto-detect.
    """

    src: str | None = None
    width: int | None = None
    quality: int | None = None
    format: str | None = None

    @classmethod
    def from_query(
        cls,
        src: str | None = None,
        w: int | None = None,
        q: int | None = None,
        f: str | None = None,
    ) -> RequestParams:
        """Build params from the short query-string names (``src, w, q, f``)."""
        return cls(src=src, width=w, quality=q, format=f)


@dataclass(slots=True, frozen=True)
class ValidatedRequest:
    """Request parameters that passed every validation gate.

    Attributes:
        src: Absolute http(s) URL of the source image.
        width: Target width within 1..MAX_WIDTH, or None.
        quality: Quality within 1..100 (default already applied).
        format: Requested format string, still unvalidated; the transformer
            rejects unsupported values.
    """

    src: str
    width: int | None
    quality: int
    format: str | None


@dataclass(slots=True, frozen=True)
class ProcessedImage:
    """Output of the transform stage.

    Attributes:
        data: Encoded image bytes.
        format: Output format actually used (may differ from the request when
            the format was auto-detected).
        width: Output width in pixels.
        height: Output height in pixels.
    """

    data: bytes
    format: OutputFormat
    width: int
    height: int


__all__ = [
    "DEFAULT_QUALITY",
    "MAX_IMAGE_SIZE",
    "MAX_WIDTH",
    "OutputFormat",
    "ProcessedImage",
    "RequestParams",
    "ValidatedRequest",
]
