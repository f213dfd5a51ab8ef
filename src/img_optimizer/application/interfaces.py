"""Interfaces (Protocols) for application layer dependencies.

This module defines Protocol-based interfaces that infrastructure
implementations must satisfy. The request pipeline depends on these
interfaces, not concrete implementations, so cache backends, the fetcher and
the transformer can be swapped or faked in tests.

Design Principles:
    - Structural Typing: Uses Python Protocol for duck typing
    - Dependency Inversion: Application depends on abstractions
    - Interface Segregation: Focused, single-purpose protocols

Key Interfaces:
    - CacheStoreInterface: Opaque key to bytes store
    - ImageFetcherInterface: Bounded download of a source URL
    - ImageTransformerInterface: Decode, resize, encode
    - KeyLockInterface: Per-key lock strategy for the miss path
    - RequestLoggerInterface: Structured request logging

Note:
    Implementations don't need to explicitly inherit from these protocols;
    they just need to implement the required methods.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from img_optimizer.domain.value_objects import ProcessedImage


class CacheStoreInterface(Protocol):
    """Protocol for cache backends.

    A long-lived store shared by all in-flight requests. Keys are opaque
    strings; values are raw encoded image bytes with no metadata. There is no
    enumeration, deletion or policy eviction; expiry, where a backend has one,
    is the only eviction mechanism.

    Each call is its own critical section. Callers never hold a store lock
    across a fetch or a transform.
    """

    async def get(self, key: str) -> bytes | None:
        """Return the bytes stored under ``key``, or None.

        None covers absent, expired and unreadable entries alike.
        """
        ...

    async def put(self, key: str, data: bytes) -> bool:
        """Store ``data`` under ``key``, overwriting any previous value.

        Returns:
            True if the write was committed, False if it was dropped. A
            dropped write is not a request failure: the caller already holds
            the bytes it tried to store.
        """
        ...


class ImageFetcherInterface(Protocol):
    """Protocol for source downloaders."""

    async def fetch(self, url: str) -> bytes:
        """Download ``url`` into memory.

        Raises:
            AppError: IMAGE_FETCH_FAILED on transport errors or non-2xx
                status; IMAGE_TOO_LARGE once received bytes pass the ceiling.
        """
        ...


class ImageTransformerInterface(Protocol):
    """Protocol for image transformers."""

    def process(
        self,
        data: bytes,
        width: int | None,
        quality: int,
        format: str | None,
    ) -> ProcessedImage:
        """Decode, optionally downscale, and encode ``data``.

        Raises:
            AppError: IMAGE_PROCESSING_FAILED on decode/encode failure;
                INVALID_IMAGE_FORMAT for an unsupported ``format``.
        """
        ...


class KeyLockInterface(Protocol):
    """Protocol for per-key lock strategies wrapping the miss path."""

    def acquire(self, key: str) -> AbstractAsyncContextManager[bool]:
        """Context manager held around fetch/transform/store for ``key``.

        Yields True when another holder was waited on.
        """
        ...


class RequestLoggerInterface(Protocol):
    """Protocol for structured request logging."""

    def log_request(self, data: dict[str, Any]) -> None:
        """Record one structured request event."""
        ...


__all__ = [
    "CacheStoreInterface",
    "ImageFetcherInterface",
    "ImageTransformerInterface",
    "KeyLockInterface",
    "RequestLoggerInterface",
]
