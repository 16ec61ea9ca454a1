"""
In-Memory State Store

Single-process actor state backend with per-key expiry. Used for tests and for
deployments where one worker serves every request of a given actor.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from trustgate.core.logging.logger import get_logger

logger = get_logger(__name__)


class InMemoryStateStore:
    """
    Dict-backed StateStore with TTL support.

    Expired entries are dropped lazily when read. The clock is injectable so
    tests can move time forward without sleeping. ``incr`` never awaits
    between its read and its write, so it is atomic on the event loop; ``lock``
    hands out one asyncio.Lock per key.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _expires_at(self, ttl: int | None) -> float | None:
        return self._clock() + ttl if ttl else None

    def _read(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> str | None:
        return self._read(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        self._data[key] = (value, self._expires_at(ttl))
        return True

    async def delete(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            if self._data.pop(key, None) is not None:
                deleted += 1
        return deleted

    async def incr(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        current = self._read(key)
        value = (int(current) if current else 0) + amount

        if ttl:
            expires_at = self._expires_at(ttl)
        else:
            expires_at = self._data[key][1] if key in self._data else None
        self._data[key] = (str(value), expires_at)
        return value

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            yield

    async def clear(self) -> None:
        """Drop every key."""
        self._data.clear()
        logger.debug("In-memory state store cleared")

    def __len__(self) -> int:
        return len(self._data)
