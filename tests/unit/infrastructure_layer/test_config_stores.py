"""
Unit Tests for the Config Stores
"""

import orjson
import pytest

from trustgate.core.exceptions import ConfigurationError
from trustgate.core.interfaces.config_store import ConfigStore
from trustgate.infrastructure.config import InMemoryConfigStore, JsonFileConfigStore


@pytest.mark.unit
class TestInMemoryConfigStore:
    def test_get_set(self):
        store = InMemoryConfigStore({"a": 1})
        store.set("b", 2)

        assert store.get("a") == 1
        assert store.get("b") == 2
        assert store.get("c", "default") == "default"
        assert sorted(store.keys()) == ["a", "b"]

    def test_initial_dict_copied(self):
        initial = {"a": 1}
        store = InMemoryConfigStore(initial)
        store.set("a", 2)

        assert initial == {"a": 1}

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryConfigStore(), ConfigStore)


@pytest.mark.unit
class TestJsonFileConfigStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileConfigStore(tmp_path / "config.json")

        assert store.keys() == []
        assert store.get("x") is None

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        store = JsonFileConfigStore(path)
        store.set("system_prompt", "Be brief")
        store.set("limits", {"api": 20})
        store.save()

        reloaded = JsonFileConfigStore(path)
        assert reloaded.get("system_prompt") == "Be brief"
        assert reloaded.get("limits") == {"api": 20}
        assert not (tmp_path / "nested" / "config.json.tmp").exists()

    def test_save_without_changes_does_not_write(self, tmp_path):
        path = tmp_path / "config.json"
        JsonFileConfigStore(path).save()

        assert not path.exists()

    def test_unchanged_value_is_not_dirty(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(orjson.dumps({"a": 1}))
        store = JsonFileConfigStore(path)
        store.set("a", 1)
        path.unlink()

        store.save()

        assert not path.exists()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            JsonFileConfigStore(path).get("a")

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigurationError):
            JsonFileConfigStore(path).keys()
