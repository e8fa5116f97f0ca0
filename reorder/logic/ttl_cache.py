"""Explicit time-to-live cache for slowly changing reference data.

Replaces module-level "cached list + last fetch time + loading flag" globals
with an object owned by whoever needs the data. Concurrent ``get()`` calls
share one in-flight load; a failed load clears the cache and re-raises.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Generic, Optional, TypeVar
import logging
import time

import anyio

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TTLCache(Generic[V]):
    def __init__(
        self,
        loader: Callable[[], Awaitable[V]],
        ttl_seconds: float,
        *,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self.name = name
        self._value: Optional[V] = None
        self._loaded_at: Optional[float] = None
        self._lock = anyio.Lock()
        self.load_count = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def is_fresh(self) -> bool:
        if self._loaded_at is None:
            return False
        return (self._clock() - self._loaded_at) < self._ttl

    def peek(self) -> Optional[V]:
        """Return the cached value without loading, fresh or not."""
        return self._value

    async def get(self, force_refresh: bool = False) -> V:
        if not force_refresh and self.is_fresh:
            logger.debug("ttl_cache.hit name=%s", self.name)
            return self._value  # type: ignore[return-value]
        loads_seen = self.load_count
        async with self._lock:
            # Another caller completed a load while this one waited
            if self.load_count != loads_seen and self.is_fresh:
                return self._value  # type: ignore[return-value]
            logger.info("ttl_cache.load name=%s force=%s", self.name, force_refresh)
            try:
                value = await self._loader()
            except Exception:
                logger.error("ttl_cache.load_failed name=%s", self.name, exc_info=True)
                self.invalidate()
                raise
            self._value = value
            self._loaded_at = self._clock()
            self.load_count += 1
            return value

    async def refresh(self) -> V:
        return await self.get(force_refresh=True)

    def invalidate(self) -> None:
        self._value = None
        self._loaded_at = None


__all__ = ["TTLCache"]
