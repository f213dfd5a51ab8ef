"""Cache backends for processed images.

This module provides the stores the request pipeline uses to avoid
re-fetching and re-transforming the same request. Every backend maps an
opaque key (the SHA-256 request hash) to raw encoded image bytes; no metadata
is stored and the content type is re-derived from the bytes on every read.

Backends:
    - FileSystemCacheStore: One file per key in a local directory. No expiry.
    - RedisCacheStore: Remote key-value store; expiry set at write time.
    - MemoryCacheStore: In-process cachetools TTLCache (development, tests).

Contract:
    - ``get`` returns None for absent, expired or unreadable entries
    - ``put`` returns False when the write was dropped; the request still
      succeeds because the caller already holds the bytes
    - Writes are atomic from a reader's point of view
    - No enumeration, deletion or policy eviction is exposed
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from cachetools import TTLCache
from redis.exceptions import RedisError

from img_optimizer.domain.exceptions import AppError

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from img_optimizer.application.interfaces import CacheStoreInterface
    from img_optimizer.core.config import CacheConfig

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 24 * 60 * 60
"""Expiry applied by backends that support it (24 hours)."""


class FileSystemCacheStore:
    """Directory of key-named files.

    Files are written to a temporary sibling and moved into place with
    ``os.replace`` so a concurrent reader sees either the old file, the new
    file or nothing, never a partial write. Entries never expire.

    Attributes:
        cache_dir: Root directory. Created on construction.
        strict: Raise CACHE_001 on write failure instead of dropping the write.
    """

    def __init__(self, cache_dir: str | Path, strict: bool = False) -> None:
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.strict = strict

    def _path(self, key: str) -> Path:
        return self.cache_dir / key

    def _read(self, key: str) -> bytes | None:
        try:
            return self._path(key).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Cache read failed for key %s...: %s", key[:16], exc)
            return None

    def _write(self, key: str, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{key[:16]}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def get(self, key: str) -> bytes | None:
        data = await asyncio.to_thread(self._read, key)
        if data is not None:
            logger.debug("Cache hit: %s...", key[:16])
        return data

    async def put(self, key: str, data: bytes) -> bool:
        try:
            await asyncio.to_thread(self._write, key, data)
        except OSError as exc:
            if self.strict:
                raise AppError.cache_error(str(exc)) from exc
            logger.warning("Cache write failed for key %s...: %s", key[:16], exc)
            return False
        logger.debug("Cached image: %s...", key[:16])
        return True


class RedisCacheStore:
    """Redis-backed store with write-time expiry.

    Each ``put`` issues ``SET <prefix><key> <bytes> EX <ttl>``; expiry is the
    only eviction. Connection errors degrade to misses and dropped writes.

    The client must return raw bytes: one built with ``decode_responses=True``
    is rejected, since image payloads are not text.

    Attributes:
        ttl_seconds: Expiry applied to every write.
        prefix: Namespace prepended to every key.
    """

    def __init__(
        self,
        redis: Redis,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        prefix: str = "img:",
    ) -> None:
        pool = getattr(redis, "connection_pool", None)
        if pool is not None and pool.connection_kwargs.get("decode_responses"):
            msg = "RedisCacheStore requires a client created with decode_responses=False"
            raise ValueError(msg)
        self._redis = redis
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> bytes | None:
        try:
            value = await self._redis.get(self._key(key))
        except RedisError as exc:
            logger.warning("Redis GET failed for key %s...: %s", key[:16], exc)
            return None
        if value is None:
            return None
        return bytes(value)

    async def put(self, key: str, data: bytes) -> bool:
        try:
            await self._redis.set(self._key(key), data, ex=self.ttl_seconds)
        except RedisError as exc:
            logger.warning("Redis SET failed for key %s...: %s", key[:16], exc)
            return False
        return True

    async def aclose(self) -> None:
        await self._redis.aclose()


class MemoryCacheStore:
    """In-process store using cachetools TTLCache.

    Bounded by entry count and expired by TTL. Contents are lost on restart
    and are not shared between worker processes.

    Attributes:
        max_size: Maximum number of entries before LRU eviction.
        ttl_seconds: Entry lifetime in seconds.
    """

    def __init__(self, max_size: int = 1000, ttl_seconds: float = CACHE_TTL_SECONDS) -> None:
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._cache: TTLCache[str, bytes] = TTLCache(maxsize=max_size, ttl=ttl_seconds)

    async def get(self, key: str) -> bytes | None:
        return self._cache.get(key)

    async def put(self, key: str, data: bytes) -> bool:
        self._cache[key] = data
        return True

    def __len__(self) -> int:
        return len(self._cache)


def build_cache_store(config: CacheConfig, redis: Redis | None = None) -> CacheStoreInterface:
    """Create the backend selected by ``config.backend``.

    Args:
        config: Cache configuration section.
        redis: Existing client for the redis backend. Created from
            ``config.redis_url`` when omitted.
    """
    match config.backend:
        case "redis":
            if redis is None:
                from redis.asyncio import Redis

                redis = Redis.from_url(config.redis_url, decode_responses=False)
            logger.info("Using Redis cache at %s (ttl=%ss)", config.redis_url, config.ttl_seconds)
            return RedisCacheStore(redis, ttl_seconds=config.ttl_seconds)
        case "memory":
            logger.info(
                "Using in-memory cache (max_size=%s, ttl=%ss)",
                config.memory_max_size,
                config.ttl_seconds,
            )
            return MemoryCacheStore(config.memory_max_size, config.ttl_seconds)
        case _:
            logger.info("Using filesystem cache at %s", Path(config.directory).resolve())
            return FileSystemCacheStore(config.directory)


__all__ = [
    "CACHE_TTL_SECONDS",
    "FileSystemCacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "build_cache_store",
]
