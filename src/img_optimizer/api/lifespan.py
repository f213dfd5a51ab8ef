"""Application lifespan management.

Lifespan Responsibilities:
    - Startup:
        1. Build the cache backend selected by configuration
        2. Create the bounded fetcher (owns a shared httpx.AsyncClient)
        3. Create the transformer and the per-key lock strategy
        4. Assemble the request pipeline and register it for injection
    - Shutdown:
        1. Unregister the pipeline
        2. Close the fetcher's HTTP client
        3. Close the cache backend connection, if it has one

Error Handling:
    - Startup failures are logged but don't prevent the server from starting;
      image routes then answer SYS_002 until the process is restarted
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from img_optimizer.api.dependencies import set_dependencies
from img_optimizer.application.use_cases import OptimizeImageUseCase
from img_optimizer.core.config import settings
from img_optimizer.core.locks import NoKeyLock, PerKeyLock
from img_optimizer.infrastructure.adapters import RequestLoggerAdapter
from img_optimizer.infrastructure.fetcher import BoundedFetcher
from img_optimizer.infrastructure.image_cache import build_cache_store
from img_optimizer.infrastructure.image_processing import ImageTransformer

if TYPE_CHECKING:
    from fastapi import FastAPI

    from img_optimizer.application.interfaces import CacheStoreInterface

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan_context(app: FastAPI):
    """Manage application lifespan (startup and shutdown)."""
    logger.info("LIFESPAN: Starting %s %s", settings.api.title, settings.api.version)

    store: CacheStoreInterface | None = None
    fetcher: BoundedFetcher | None = None
    try:
        store = build_cache_store(settings.cache)
        fetcher = BoundedFetcher(
            timeout_seconds=settings.fetch.timeout_seconds,
            max_bytes=settings.fetch.max_bytes,
            user_agent=settings.fetch.user_agent,
        )
        key_lock = PerKeyLock() if settings.cache.single_flight else NoKeyLock()
        pipeline = OptimizeImageUseCase(
            cache=store,
            fetcher=fetcher,
            transformer=ImageTransformer(),
            key_lock=key_lock,
            logger=RequestLoggerAdapter(),
        )
        set_dependencies(pipeline)
        logger.info(
            "LIFESPAN: Pipeline initialized (cache=%s, single_flight=%s)",
            settings.cache.backend,
            settings.cache.single_flight,
        )
    except Exception as exc:
        logger.exception("LIFESPAN: Failed to initialize request pipeline: %s", exc)
        logger.warning("LIFESPAN: Continuing without pipeline - image requests will return 503")

    yield

    # Shutdown
    logger.info("Shutting down %s", settings.api.title)
    set_dependencies(None)
    if fetcher is not None:
        try:
            await fetcher.aclose()
        except Exception as exc:
            logger.warning("Error closing HTTP client: %s", exc)
    aclose = getattr(store, "aclose", None)
    if aclose is not None:
        try:
            await aclose()
        except Exception as exc:
            logger.warning("Error closing cache backend: %s", exc)


__all__ = ["lifespan_context"]
