"""Use cases for the Image Optimizer Service.

This module defines the request pipeline that turns a raw transformation
request into encoded image bytes. It orchestrates the cache, the fetcher and
the transformer through their interfaces and contains no framework or
infrastructure dependencies.

Design Principles:
    - Dependency Inversion: Depend on interfaces (Protocols), not implementations
    - Fail fast: Every validation gate runs before any I/O
    - Best-effort cache: A dropped cache write never fails the request
    - Framework-agnostic: No FastAPI, Pydantic, or other framework dependencies

Pipeline:
    params -> validate -> cache key -> cache.get (hit: return)
    -> fetcher.fetch -> transformer.process -> cache.put -> return
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from img_optimizer.core.locks import NoKeyLock
from img_optimizer.core.utils import (
    generate_cache_key,
    guess_content_type,
    is_svg_source,
    is_valid_source_url,
)
from img_optimizer.domain.exceptions import AppError
from img_optimizer.domain.value_objects import (
    DEFAULT_QUALITY,
    MAX_WIDTH,
    RequestParams,
    ValidatedRequest,
)

if TYPE_CHECKING:
    from img_optimizer.application.interfaces import (
        CacheStoreInterface,
        ImageFetcherInterface,
        ImageTransformerInterface,
        KeyLockInterface,
        RequestLoggerInterface,
    )

logger = logging.getLogger(__name__)


class OptimizeImageUseCase:
    """Request pipeline: validate, look up, fetch, transform, store.

    One instance is shared by every in-flight request. It holds no
    per-request state; all shared state lives in the injected cache.

    Attributes:
        _cache: Cache backend implementing CacheStoreInterface.
        _fetcher: Source downloader implementing ImageFetcherInterface.
        _transformer: Image transformer implementing ImageTransformerInterface.
        _key_lock: Lock strategy wrapping the miss path. ``NoKeyLock`` unless
            single-flight is wanted.
        _logger: Optional structured request logger.

    Note:
        Without a ``PerKeyLock`` concurrent misses for the same key each fetch
        and transform independently and the cache keeps the last write.
    """

    def __init__(
        self,
        cache: CacheStoreInterface,
        fetcher: ImageFetcherInterface,
        transformer: ImageTransformerInterface,
        key_lock: KeyLockInterface | None = None,
        logger: RequestLoggerInterface | None = None,
    ) -> None:
        self._cache = cache
        self._fetcher = fetcher
        self._transformer = transformer
        self._key_lock = key_lock if key_lock is not None else NoKeyLock()
        self._logger = logger

    def validate(self, params: RequestParams) -> ValidatedRequest:
        """Check raw parameters and apply defaults.

        Gates run in a fixed order and the first failure wins: missing
        ``src``, malformed URL, SVG source, width bounds, quality bounds.
        ``format`` is passed through for the transformer to check.

        Args:
            params: Raw request parameters.

        Returns:
            ValidatedRequest with the default quality applied.

        Raises:
            AppError: VAL_003, IMG_001, IMG_004, VAL_001 or VAL_002.
        """
        src = params.src
        if src is None:
            raise AppError.missing_required_parameter("src")
        if not is_valid_source_url(src):
            raise AppError.invalid_image_url()
        if is_svg_source(src):
            raise AppError.invalid_image_format("svg")

        width = params.width
        if width is not None and not 0 < width <= MAX_WIDTH:
            raise AppError.invalid_width(width)

        quality = params.quality
        if quality is None:
            quality = DEFAULT_QUALITY
        elif not 0 < quality <= 100:
            raise AppError.invalid_quality(quality)

        return ValidatedRequest(src=src, width=width, quality=quality, format=params.format)

    async def execute(
        self,
        params: RequestParams,
        request_id: str | None = None,
        client_ip: str | None = None,
    ) -> tuple[bytes, str]:
        """Serve one transformation request.

        Args:
            params: Raw request parameters.
            request_id: Identifier for log correlation. Optional.
            client_ip: Client address for log correlation. Optional.

        Returns:
            Tuple of (bytes, content_type). The content type is always sniffed
            from the bytes, on hits and misses alike.

        Raises:
            AppError: Any taxonomy variant produced by validation, fetch or
                transform. Nothing is written to the cache on failure.
        """
        start_time = time.perf_counter()
        event: dict[str, Any] = {
            "event": "image_request",
            "request_id": request_id,
            "client_ip": client_ip,
            "src": params.src,
            "width": params.width,
            "quality": params.quality,
            "format": params.format,
        }

        try:
            request = self.validate(params)
            key = generate_cache_key(
                request.src, request.width, request.quality, request.format
            )
            event["cache_key"] = key[:16]

            data = await self._cache.get(key)
            if data is not None:
                event["cache"] = "hit"
            else:
                event["cache"] = "miss"
                data = await self._process_miss(key, request)
        except AppError as exc:
            event.update(
                status="error",
                error_code=exc.code,
                error_message=str(exc),
                latency_ms=round((time.perf_counter() - start_time) * 1000, 3),
            )
            self._log(event)
            raise

        content_type = guess_content_type(data)
        event.update(
            status="success",
            content_type=content_type,
            size_bytes=len(data),
            latency_ms=round((time.perf_counter() - start_time) * 1000, 3),
        )
        self._log(event)
        return data, content_type

    async def _process_miss(self, key: str, request: ValidatedRequest) -> bytes:
        async with self._key_lock.acquire(key) as waited:
            if waited:
                cached = await self._cache.get(key)
                if cached is not None:
                    return cached

            source = await self._fetcher.fetch(request.src)
            processed = await asyncio.to_thread(
                self._transformer.process,
                source,
                request.width,
                request.quality,
                request.format,
            )
            logger.debug(
                "Transformed %s: %d -> %d bytes (%s %dx%d)",
                request.src,
                len(source),
                len(processed.data),
                processed.format,
                processed.width,
                processed.height,
            )

            if not await self._cache.put(key, processed.data):
                logger.warning("Cache write dropped for key %s...", key[:16])
            return processed.data

    def _log(self, event: dict[str, Any]) -> None:
        if self._logger is not None:
            self._logger.log_request(event)


__all__ = ["OptimizeImageUseCase"]
