"""
JSON File Config Store

Keeps configuration in one JSON document. Loaded lazily on first access,
written atomically (temp file + rename) on save(), and only when something
actually changed.
"""

import os
from pathlib import Path
from typing import Any

import orjson

from trustgate.core.exceptions import ConfigurationError
from trustgate.core.logging.logger import get_logger

logger = get_logger(__name__)


class JsonFileConfigStore:
    """ConfigStore backed by a JSON file on disk."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._values: dict[str, Any] | None = None
        self._dirty = False

    def _load(self) -> dict[str, Any]:
        if self._values is not None:
            return self._values

        if not self._path.exists():
            self._values = {}
            return self._values

        try:
            loaded = orjson.loads(self._path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ConfigurationError(
                f"Config file {self._path} is not valid JSON",
                details={"path": str(self._path), "error": str(e)},
            ) from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Config file {self._path} must contain a JSON object",
                details={"path": str(self._path)},
            )
        self._values = loaded
        return self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        values = self._load()
        if key in values and values[key] == value:
            return
        values[key] = value
        self._dirty = True

    def keys(self) -> list[str]:
        return list(self._load())

    def save(self) -> None:
        if not self._dirty:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_bytes(orjson.dumps(self._load(), option=orjson.OPT_INDENT_2))
        os.replace(tmp_path, self._path)
        self._dirty = False

        logger.debug("Config saved", path=str(self._path))
