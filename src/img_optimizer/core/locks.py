"""Per-key lock strategies for cache-miss handling.

The pipeline wraps its miss path (fetch, transform, store) in
``lock.acquire(key)``. ``NoKeyLock`` is the default and does nothing, so
concurrent misses on the same key each fetch and transform independently and
the store keeps the last write. ``PerKeyLock`` serialises work per key: the
second request waits for the first and then finds the result in the cache.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class NoKeyLock:
    """Lock strategy that never blocks (no single-flight)."""

    __slots__ = ()

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[bool]:
        """Yield immediately. The yielded flag is False: no other holder was waited on."""
        yield False


class PerKeyLock:
    """One ``asyncio.Lock`` per active key, reference counted.

    Locks are created on first use and dropped once the last waiter releases,
    so idle keys do not accumulate.

    Example
    -------
    >>> locks = PerKeyLock()
    >>> async with locks.acquire("abc") as waited:
    ...     ...
    """

    __slots__ = ("_locks", "_waiters")

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[bool]:
        """Hold the lock for ``key``.

        Yields True when the caller had to wait for another holder, which
        tells the pipeline to re-check the cache before doing any work.
        """
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._waiters[key] = self._waiters.get(key, 0) + 1
        waited = lock.locked()
        try:
            async with lock:
                if waited:
                    logger.debug("Waited on in-flight request for key %s...", key[:16])
                yield waited
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


__all__ = ["NoKeyLock", "PerKeyLock"]
