"""
Actor State Backends

Factory:
    store = create_state_store(settings)
    if isinstance(store, RedisStateStore):
        await store.connect()
"""

import time
from collections.abc import Callable

from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.interfaces.state_store import StateStore
from trustgate.infrastructure.state.memory_store import InMemoryStateStore
from trustgate.infrastructure.state.redis_store import RedisStateStore


def create_state_store(
    settings: Settings | None = None, clock: Callable[[], float] = time.time
) -> StateStore:
    """
    Build the state backend selected by STATE_BACKEND.

    The Redis store is returned unconnected; call ``connect()`` before use.
    """
    settings = settings or get_settings()
    if settings.state.STATE_BACKEND == "redis":
        return RedisStateStore(settings)
    return InMemoryStateStore(clock=clock)


__all__ = ["InMemoryStateStore", "RedisStateStore", "create_state_store"]
