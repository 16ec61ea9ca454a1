"""
State Store Protocol

This module defines the abstract protocol for the actor-scoped state backend
that the rate limiter and circuit breaker persist their counters in.

Architectural Decision: Protocol-based abstraction
- Enables multiple backend implementations (In-Memory, Redis)
- Facilitates testing with a deterministic in-memory store and fake clock
- Keeps actor state out of module globals: every guard receives its store
- Type-safe interface with runtime checking
"""

from contextlib import AbstractAsyncContextManager
from typing import Protocol, runtime_checkable


@runtime_checkable
class StateStore(Protocol):
    """
    Protocol defining the key-value interface the guards depend on.

    Values are opaque strings (the guards store JSON documents). Keys are
    already scoped to one actor by the caller.

    Implementations:
    - InMemoryStateStore: Testing/development, single process
    - RedisStateStore: Production, shared between workers

    Usage:
        async def load(store: StateStore, key: str) -> dict:
            raw = await store.get(key)
            return orjson.loads(raw) if raw else {}
    """

    async def get(self, key: str) -> str | None:
        """
        Get value from the store.

        Args:
            key: State key

        Returns:
            Value or None if not found (or expired)

        Raises:
            StateStoreError: If the backend cannot be reached
        """
        ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        Set value in the store.

        Args:
            key: State key
            value: Value to store
            ttl: Time-to-live in seconds (optional)

        Returns:
            bool: True if set successfully
        """
        ...

    async def delete(self, *keys: str) -> int:
        """
        Delete keys from the store.

        Returns:
            int: Number of keys deleted
        """
        ...

    async def incr(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        """
        Atomically add amount (may be negative) to an integer value.

        A missing key counts as 0. ttl, when given, refreshes the expiry.

        Returns:
            int: Value after the increment
        """
        ...

    def lock(self, key: str) -> AbstractAsyncContextManager[None]:
        """
        Exclusive section for a read-modify-write of key.

        Every writer of a JSON document holds the document's lock for the
        whole load, change and save, so overlapping requests of one actor
        cannot overwrite each other.

        Usage:
            async with store.lock(key):
                document = orjson.loads(await store.get(key) or "{}")
                ...
                await store.set(key, orjson.dumps(document).decode())
        """
        ...