"""
In-Memory Config Store
"""

from typing import Any


class InMemoryConfigStore:
    """Dict-backed ConfigStore. save() is a no-op."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def keys(self) -> list[str]:
        return list(self._values)

    def save(self) -> None:
        return None
