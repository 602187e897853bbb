"""
In-process cache for per-user flashcard statistics.

Entries live for ``STATS_CACHE_TTL_SECONDS`` and are dropped either by the
periodic sweep or explicitly when the user records a new study session.
"""
import asyncio
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from medlearn.core.config import settings

logger = logging.getLogger(__name__)


def stats_key(user_id: int) -> str:
    return f"stats_{user_id}"


class StatsCache:
    """Thread-safe TTL cache keyed by string."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def get_or_build(self, key: str, builder: Callable[[], Any]) -> Any:
        """
        Return the cached value for ``key`` or build, store and return it.

        The builder runs outside the lock, so two concurrent misses may both
        build. The last one to finish wins.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        value = builder()
        self.set(key, value)
        return value

    def invalidate(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)

    def sweep(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at >= self.ttl_seconds]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


stats_cache = StatsCache(ttl_seconds=settings.STATS_CACHE_TTL_SECONDS)


async def run_periodic_sweep(cache: StatsCache, interval_seconds: float) -> None:
    """Sweep ``cache`` every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = cache.sweep()
        if removed:
            logger.debug(f"Stats cache sweep removed {removed} expired entries")
