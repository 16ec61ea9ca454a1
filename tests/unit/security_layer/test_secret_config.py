"""
Unit Tests for SecretConfig

Tests transparent encryption of secret keys and the plaintext migration.
"""

from unittest.mock import MagicMock

import pytest

from trustgate.infrastructure.config.memory_store import InMemoryConfigStore
from trustgate.security.secret_config import SecretConfig


@pytest.fixture
def backing():
    return InMemoryConfigStore({"system_prompt": "Be brief"})


@pytest.fixture
def config(backing, encryption):
    return SecretConfig(backing, encryption=encryption)


@pytest.mark.unit
class TestSecretConfig:
    def test_secret_stored_encrypted(self, config, backing, encryption):
        config.set("openai_api_key", "sk-live-secret")

        stored = backing.get("openai_api_key")
        assert stored != "sk-live-secret"
        assert encryption.is_encrypted(stored)
        assert config.get("openai_api_key") == "sk-live-secret"

    def test_already_encrypted_not_double_encrypted(self, config, backing, encryption):
        ciphertext = encryption.encrypt("sk-live-secret")

        config.set("openai_api_key", ciphertext)

        assert backing.get("openai_api_key") == ciphertext

    def test_non_secret_passthrough(self, config, backing):
        config.set("system_prompt", "Be thorough")

        assert backing.get("system_prompt") == "Be thorough"
        assert config.get("system_prompt") == "Be thorough"

    def test_bool_stored_as_int(self, config, backing):
        config.set("malware_scan", True)
        assert backing.get("malware_scan") == 1

    def test_legacy_plaintext_still_readable(self, encryption):
        config = SecretConfig(InMemoryConfigStore({"google_api_key": "AIza-legacy"}), encryption=encryption)

        assert config.get("google_api_key") == "AIza-legacy"

    def test_missing_key_default(self, config):
        assert config.get("gwdg_api_key", "") == ""


@pytest.mark.unit
class TestMigration:
    def test_migrates_plaintext_secrets(self, encryption):
        backing = InMemoryConfigStore(
            {"openai_api_key": "sk-plain", "gwdg_api_key": encryption.encrypt("gwdg"), "system_prompt": "x"}
        )
        config = SecretConfig(backing, encryption=encryption)

        migrated = config.migrate_secrets()

        assert migrated == ["openai_api_key"]
        assert encryption.is_encrypted(backing.get("openai_api_key"))
        assert config.get("openai_api_key") == "sk-plain"
        assert config.get("gwdg_api_key") == "gwdg"
        assert backing.get("system_prompt") == "x"

    def test_nothing_to_migrate(self, config):
        assert config.migrate_secrets() == []

    def test_migration_is_idempotent(self, encryption):
        config = SecretConfig(InMemoryConfigStore({"openai_api_key": "sk-plain"}), encryption=encryption)

        assert config.migrate_secrets() == ["openai_api_key"]
        assert config.migrate_secrets() == []

    def test_save_failure_never_raises(self, encryption):
        backing = MagicMock()
        backing.get.side_effect = lambda key, default=None: "sk-plain" if key == "openai_api_key" else None
        backing.save.side_effect = OSError("disk full")
        config = SecretConfig(backing, encryption=encryption)

        assert config.migrate_secrets() == []

    def test_per_key_failure_is_skipped(self, encryption):
        backing = MagicMock()

        def get(key, default=None):
            if key == "gwdg_api_key":
                raise RuntimeError("corrupt row")
            return "sk-plain" if key == "openai_api_key" else None

        backing.get.side_effect = get
        config = SecretConfig(backing, encryption=encryption)

        assert config.migrate_secrets() == ["openai_api_key"]
        backing.save.assert_called_once()
