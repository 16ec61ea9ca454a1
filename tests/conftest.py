"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import asyncio
import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures.settings_factory import make_settings  # noqa: E402
from trustgate.core.context import ActorContext  # noqa: E402
from trustgate.infrastructure.state.memory_store import InMemoryStateStore  # noqa: E402
from trustgate.security.encryption import EncryptionService, derive_key  # noqa: E402

# ============================================================================
# Time
# ============================================================================


class FakeClock:
    """Manually advanced clock so window and timeout tests never sleep."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings():
    return make_settings()


# ============================================================================
# State Fixtures
# ============================================================================


@pytest.fixture
def store(clock):
    """In-memory state store sharing the fake clock."""
    return InMemoryStateStore(clock=clock)


class YieldingStateStore(InMemoryStateStore):
    """In-memory store that gives up the event loop before every command, like a network backend."""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key, value, ttl=None):
        await asyncio.sleep(0)
        return await super().set(key, value, ttl)

    async def delete(self, *keys):
        await asyncio.sleep(0)
        return await super().delete(*keys)

    async def incr(self, key, amount=1, ttl=None):
        await asyncio.sleep(0)
        return await super().incr(key, amount, ttl)


@pytest.fixture
def yielding_store(clock):
    return YieldingStateStore(clock=clock)


@pytest.fixture
def actor(store, settings, clock):
    return ActorContext("session-42", store, settings=settings, clock=clock)


# ============================================================================
# Security Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def encryption_key():
    """Derived once per session."""
    return derive_key("test-installation", "test-salt", 1_000)


@pytest.fixture
def encryption(settings, encryption_key):
    return EncryptionService(settings, key=encryption_key)
