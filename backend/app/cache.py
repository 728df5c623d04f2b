from __future__ import annotations

from asyncio import Lock
import time
from typing import Any


class TTLCache:
    """A simple in-memory TTL cache with async-safe access.

    ``clear`` bumps a generation counter. Callers that compute a value from
    the database read ``generation`` first and pass it to ``set``; the value
    is dropped when a clear happened in between, so a read that raced a
    write can't repopulate the cache with stale data.
    """

    def __init__(self, ttl_seconds: float = 60.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._store: dict[Any, tuple[Any, float]] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def get(self, key: Any) -> Any | None:
        now = time.monotonic()
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return value

    async def set(self, key: Any, value: Any, *, generation: int | None = None) -> bool:
        """Store ``value``; returns ``False`` when it was computed before a clear."""
        async with self._lock:
            if self._ttl <= 0:
                return False
            if generation is not None and generation != self._generation:
                return False
            self._store[key] = (value, time.monotonic() + self._ttl)
            return True

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()
            self._generation += 1


# keyed by (team_id or None, limit, offset); cleared whenever ratings move
rankings_cache = TTLCache(ttl_seconds=60.0)
