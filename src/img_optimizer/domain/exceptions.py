"""Domain error taxonomy for the Image Optimizer Service.

This module defines the closed set of failures every pipeline stage reports
into. There is a single exception type, ``AppError``, tagged with an
``ErrorKind`` variant; the stable code, HTTP status, title and remediation
hint are derived from the variant by the pure functions below rather than by
subclassing.

Design Principles:
    - Framework-agnostic: No FastAPI, Pydantic, or other framework deps
    - Closed set: ``ErrorKind`` enumerates every failure the core can produce
    - Self-describing: Each error carries the offending value, URL or reason
      needed to render a complete diagnostic
    - Stable codes: Codes and response field names are a compatibility surface

Error Codes:
    - IMG_001..IMG_005: Source URL, fetch, decode/encode, format and size failures
    - VAL_001..VAL_003: Parameter validation failures
    - CACHE_001: Backing store I/O failures that must be reported
    - SYS_001..SYS_002: Internal and availability failures
"""

from __future__ import annotations

from enum import StrEnum
from http import HTTPStatus
from typing import Any

ERROR_DOCS_URL = "https://github.com/fgribreau/plasmic-img-optimizer"


class DomainError(Exception):
    """Base exception for all domain errors."""


class ErrorKind(StrEnum):
    """Variants of the error taxonomy. The value is the stable error code."""

    INVALID_IMAGE_URL = "IMG_001"
    IMAGE_FETCH_FAILED = "IMG_002"
    IMAGE_PROCESSING_FAILED = "IMG_003"
    INVALID_IMAGE_FORMAT = "IMG_004"
    IMAGE_TOO_LARGE = "IMG_005"
    INVALID_WIDTH = "VAL_001"
    INVALID_QUALITY = "VAL_002"
    MISSING_REQUIRED_PARAMETER = "VAL_003"
    CACHE_ERROR = "CACHE_001"
    INTERNAL_SERVER_ERROR = "SYS_001"
    SERVICE_UNAVAILABLE = "SYS_002"


_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_IMAGE_URL: "Invalid image URL - The provided URL is not valid",
    ErrorKind.IMAGE_FETCH_FAILED: "Image fetch failed - Unable to download image from {url}",
    ErrorKind.IMAGE_PROCESSING_FAILED: (
        "Image processing failed - Error processing image: {reason}"
    ),
    ErrorKind.INVALID_IMAGE_FORMAT: "Invalid image format - Format '{format}' is not supported",
    ErrorKind.IMAGE_TOO_LARGE: (
        "Image too large - Image dimensions exceed maximum allowed size"
    ),
    ErrorKind.INVALID_WIDTH: "Invalid width - Width must be between 1 and 3840, got {width}",
    ErrorKind.INVALID_QUALITY: (
        "Invalid quality - Quality must be between 1 and 100, got {quality}"
    ),
    ErrorKind.MISSING_REQUIRED_PARAMETER: "Missing required parameter - {param} is required",
    ErrorKind.CACHE_ERROR: "Cache error - Failed to access cache: {reason}",
    ErrorKind.INTERNAL_SERVER_ERROR: "Internal server error - An unexpected error occurred",
    ErrorKind.SERVICE_UNAVAILABLE: (
        "Service unavailable - The service is temporarily unavailable"
    ),
}

_HOW_TO_FIX: dict[ErrorKind, str] = {
    ErrorKind.INVALID_IMAGE_URL: "Provide a valid URL starting with http:// or https://",
    ErrorKind.IMAGE_FETCH_FAILED: (
        "Ensure the image URL is accessible and the server is responding"
    ),
    ErrorKind.IMAGE_PROCESSING_FAILED: (
        "Try a different image or check if the image file is corrupted"
    ),
    ErrorKind.INVALID_IMAGE_FORMAT: (
        "Use one of the supported formats: jpeg, jpg, png, webp. Got '{format}'"
    ),
    ErrorKind.IMAGE_TOO_LARGE: "Reduce the image dimensions or use a smaller source image",
    ErrorKind.INVALID_WIDTH: "Provide a width value between 1 and 3840",
    ErrorKind.INVALID_QUALITY: "Provide a quality value between 1 and 100",
    ErrorKind.MISSING_REQUIRED_PARAMETER: "Include the '{param}' parameter in your request",
    ErrorKind.CACHE_ERROR: "Try again later or contact support if the issue persists",
    ErrorKind.INTERNAL_SERVER_ERROR: "Try again later. If the problem persists, contact support",
    ErrorKind.SERVICE_UNAVAILABLE: (
        "The service is temporarily down. Please try again in a few minutes"
    ),
}


class AppError(DomainError):
    """A failure from the closed ``ErrorKind`` taxonomy.

    Constructed at the point of failure with whatever context the variant
    needs (offending value, URL, reason). Instances are immutable once built.

    Attributes:
        kind: Taxonomy variant.
        url: Source URL (IMAGE_FETCH_FAILED).
        reason: Underlying failure description (IMAGE_PROCESSING_FAILED, CACHE_ERROR).
        format: Rejected format string (INVALID_IMAGE_FORMAT).
        width: Rejected width, verbatim (INVALID_WIDTH).
        quality: Rejected quality, verbatim (INVALID_QUALITY).
        param: Name of the absent parameter (MISSING_REQUIRED_PARAMETER).
    """

    __slots__ = ("kind", "url", "reason", "format", "width", "quality", "param", "_frozen")

    def __init__(
        self,
        kind: ErrorKind,
        *,
        url: str = "",
        reason: str = "",
        format: str = "",
        width: int = 0,
        quality: int = 0,
        param: str = "",
    ) -> None:
        self.kind = kind
        self.url = url
        self.reason = reason
        self.format = format
        self.width = width
        self.quality = quality
        self.param = param
        super().__init__(f"{kind.value}: {self.message}")
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        # Exception machinery assigns __traceback__/__cause__ etc. through
        # slots on BaseException, so only our own fields are guarded.
        if getattr(self, "_frozen", False) and name in AppError.__slots__:
            raise AttributeError(f"AppError.{name} is read-only")
        super().__setattr__(name, value)

    @property
    def code(self) -> str:
        """Stable machine-readable error code (e.g. ``VAL_001``)."""
        return error_code(self.kind)

    @property
    def message(self) -> str:
        """Human message rendered from the variant template and context."""
        return _MESSAGES[self.kind].format(**self._context())

    def _context(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "reason": self.reason,
            "format": self.format,
            "width": self.width,
            "quality": self.quality,
            "param": self.param,
        }

    def __repr__(self) -> str:
        return f"AppError({self.kind.name}, {self.message!r})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (_rebuild_app_error, (self.kind, self._context()))

    # Constructors, one per variant

    @classmethod
    def invalid_image_url(cls) -> AppError:
        return cls(ErrorKind.INVALID_IMAGE_URL)

    @classmethod
    def image_fetch_failed(cls, url: str) -> AppError:
        return cls(ErrorKind.IMAGE_FETCH_FAILED, url=url)

    @classmethod
    def image_processing_failed(cls, reason: str) -> AppError:
        return cls(ErrorKind.IMAGE_PROCESSING_FAILED, reason=reason)

    @classmethod
    def invalid_image_format(cls, format: str) -> AppError:
        return cls(ErrorKind.INVALID_IMAGE_FORMAT, format=format)

    @classmethod
    def image_too_large(cls) -> AppError:
        return cls(ErrorKind.IMAGE_TOO_LARGE)

    @classmethod
    def invalid_width(cls, width: int) -> AppError:
        return cls(ErrorKind.INVALID_WIDTH, width=width)

    @classmethod
    def invalid_quality(cls, quality: int) -> AppError:
        return cls(ErrorKind.INVALID_QUALITY, quality=quality)

    @classmethod
    def missing_required_parameter(cls, param: str) -> AppError:
        return cls(ErrorKind.MISSING_REQUIRED_PARAMETER, param=param)

    @classmethod
    def cache_error(cls, reason: str) -> AppError:
        return cls(ErrorKind.CACHE_ERROR, reason=reason)

    @classmethod
    def internal_server_error(cls) -> AppError:
        return cls(ErrorKind.INTERNAL_SERVER_ERROR)

    @classmethod
    def service_unavailable(cls) -> AppError:
        return cls(ErrorKind.SERVICE_UNAVAILABLE)


def _rebuild_app_error(kind: ErrorKind, context: dict[str, Any]) -> AppError:
    return AppError(kind, **context)


def error_code(kind: ErrorKind) -> str:
    """Return the stable error code for a variant."""
    return kind.value


def http_status(kind: ErrorKind) -> int:
    """Map a variant to its HTTP status code.

    Uses match/case over the variant groups: client mistakes are 400,
    upstream/processing failures are 422, and the two system variants map to
    500 and 503.
    """
    match kind:
        case (
            ErrorKind.INVALID_IMAGE_URL
            | ErrorKind.INVALID_IMAGE_FORMAT
            | ErrorKind.INVALID_WIDTH
            | ErrorKind.INVALID_QUALITY
            | ErrorKind.MISSING_REQUIRED_PARAMETER
        ):
            return HTTPStatus.BAD_REQUEST
        case (
            ErrorKind.IMAGE_FETCH_FAILED
            | ErrorKind.IMAGE_PROCESSING_FAILED
            | ErrorKind.IMAGE_TOO_LARGE
            | ErrorKind.CACHE_ERROR
        ):
            return HTTPStatus.UNPROCESSABLE_ENTITY
        case ErrorKind.INTERNAL_SERVER_ERROR:
            return HTTPStatus.INTERNAL_SERVER_ERROR
        case ErrorKind.SERVICE_UNAVAILABLE:
            return HTTPStatus.SERVICE_UNAVAILABLE


def error_title(kind: ErrorKind) -> str:
    """Short problem title for a variant ("Bad Request", "Processing Error", ...)."""
    match http_status(kind):
        case HTTPStatus.BAD_REQUEST:
            return "Bad Request"
        case HTTPStatus.UNPROCESSABLE_ENTITY:
            return "Processing Error"
        case HTTPStatus.SERVICE_UNAVAILABLE:
            return "Service Unavailable"
        case _:
            return "Internal Server Error"


def how_to_fix(error: AppError) -> str:
    """Remediation hint for an error, rendered with its context."""
    return _HOW_TO_FIX[error.kind].format(**error._context())


def to_problem_details(error: AppError) -> dict[str, Any]:
    """Render an error as a problem-details mapping.

    Field names are part of the compatibility surface:
    ``type, title, status, detail, instance, errorCode, howToFix, moreInfo``.
    ``instance`` is always None.
    """
    code = error_code(error.kind)
    return {
        "type": f"{ERROR_DOCS_URL}/errors/{code}",
        "title": error_title(error.kind),
        "status": int(http_status(error.kind)),
        "detail": str(error),
        "instance": None,
        "errorCode": code,
        "howToFix": how_to_fix(error),
        "moreInfo": f"{ERROR_DOCS_URL}#error-{code.lower()}",
    }


def list_all_errors() -> list[str]:
    """Enumerate every variant as ``"<errorCode>: <message>"``.

    Context fields take their empty defaults, so parameterised messages render
    with blank/zero placeholders. Purely informational.
    """
    return [f"{error_code(kind)}: {AppError(kind).message}" for kind in ErrorKind]


__all__ = [
    "ERROR_DOCS_URL",
    "AppError",
    "DomainError",
    "ErrorKind",
    "error_code",
    "error_title",
    "how_to_fix",
    "http_status",
    "list_all_errors",
    "to_problem_details",
]
