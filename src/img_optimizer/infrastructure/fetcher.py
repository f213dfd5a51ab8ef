"""Bounded HTTP download of source images.

``BoundedFetcher`` performs a single GET per call, streams the body and aborts
as soon as the cumulative size passes the configured ceiling. A declared
``Content-Length`` is never trusted: the check runs on bytes actually
received, after every chunk.

Failure mapping:
    - Transport error, timeout or non-2xx status -> IMG_002 (fetch failed)
    - Body larger than ``max_bytes`` -> IMG_005 (too large)

No retries and no partial results.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from img_optimizer.core.config import DEFAULT_USER_AGENT
from img_optimizer.domain.exceptions import AppError
from img_optimizer.domain.value_objects import MAX_IMAGE_SIZE

logger = logging.getLogger(__name__)


class BoundedFetcher:
    """Streams a source URL into memory under a byte ceiling.

    Attributes:
        timeout_seconds: Total deadline for the whole download.
        max_bytes: Largest accepted body size.
        user_agent: User-Agent header sent upstream.

    Note:
        Pass an existing ``httpx.AsyncClient`` to share a connection pool;
        otherwise the fetcher creates its own and ``aclose`` closes it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
        max_bytes: int = MAX_IMAGE_SIZE,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_bytes = max_bytes
        self.user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
        )

    async def fetch(self, url: str) -> bytes:
        """Download ``url`` and return the full body.

        Raises:
            AppError: IMG_002 on transport failure or non-2xx status; IMG_005
                as soon as the received byte count exceeds ``max_bytes``.
        """
        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await self._download(url)
        except (httpx.HTTPError, TimeoutError) as exc:
            logger.warning("Fetch failed for %s: %s", url, exc)
            raise AppError.image_fetch_failed(url) from exc

    async def _download(self, url: str) -> bytes:
        headers = {"User-Agent": self.user_agent}
        async with self._client.stream("GET", url, headers=headers) as response:
            if not response.is_success:
                logger.warning("Upstream returned %s for %s", response.status_code, url)
                raise AppError.image_fetch_failed(url)

            buffer = bytearray()
            async for chunk in response.aiter_bytes():
                buffer.extend(chunk)
                if len(buffer) > self.max_bytes:
                    logger.warning(
                        "Source %s exceeded %d bytes, aborting download", url, self.max_bytes
                    )
                    raise AppError.image_too_large()
            return bytes(buffer)

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()


__all__ = ["BoundedFetcher"]
