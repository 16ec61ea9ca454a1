"""
Configuration Persistence Backends
"""

from trustgate.infrastructure.config.json_store import JsonFileConfigStore
from trustgate.infrastructure.config.memory_store import InMemoryConfigStore

__all__ = ["InMemoryConfigStore", "JsonFileConfigStore"]
