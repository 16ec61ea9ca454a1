"""
Config Store Protocol

Key-value configuration persistence consumed by SecretConfig. The store knows
nothing about encryption; SecretConfig decides which keys hold secrets.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ConfigStore(Protocol):
    """
    Protocol for configuration persistence.

    Implementations:
    - InMemoryConfigStore: Tests and ephemeral use
    - JsonFileConfigStore: Single JSON document on disk
    """

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Stage a value for key. Persisted on save()."""
        ...

    def keys(self) -> list[str]:
        """Return every key currently known to the store."""
        ...

    def save(self) -> None:
        """Persist staged changes."""
        ...
