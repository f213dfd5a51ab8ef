"""Infrastructure implementations: cache backends, fetcher, transformer."""

from img_optimizer.infrastructure.adapters import RequestLoggerAdapter
from img_optimizer.infrastructure.fetcher import BoundedFetcher
from img_optimizer.infrastructure.image_cache import (
    CACHE_TTL_SECONDS,
    FileSystemCacheStore,
    MemoryCacheStore,
    RedisCacheStore,
    build_cache_store,
)
from img_optimizer.infrastructure.image_processing import ImageTransformer

__all__ = [
    "CACHE_TTL_SECONDS",
    "BoundedFetcher",
    "FileSystemCacheStore",
    "ImageTransformer",
    "MemoryCacheStore",
    "RedisCacheStore",
    "RequestLoggerAdapter",
    "build_cache_store",
]
