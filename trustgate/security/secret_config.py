"""
Secret-Aware Configuration

Wraps a ConfigStore so that the well-known secret keys are encrypted on write
and decrypted on read. Every other key passes through untouched.

Usage:
    config = SecretConfig(JsonFileConfigStore("config.json"))
    config.set("openai_api_key", "sk-...")   # stored encrypted
    config.save()
    config.get("openai_api_key")             # "sk-..."
"""

from typing import Any

from trustgate.core.config.constants import SECRET_CONFIG_KEYS, Stage
from trustgate.core.interfaces.config_store import ConfigStore
from trustgate.core.logging.logger import get_logger
from trustgate.security.encryption import EncryptionService

logger = get_logger(__name__)


class SecretConfig:
    def __init__(
        self,
        store: ConfigStore,
        encryption: EncryptionService | None = None,
        secret_keys: tuple[str, ...] = SECRET_CONFIG_KEYS,
    ):
        self._store = store
        self._encryption = encryption or EncryptionService()
        self.secret_keys = frozenset(secret_keys)

    def is_secret(self, key: str) -> bool:
        return key in self.secret_keys

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for key, decrypted if it is a secret."""
        value = self._store.get(key, default)
        if self.is_secret(key) and isinstance(value, str) and value:
            return self._encryption.decrypt(value)
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Stage a value. Secrets are encrypted unless they already are.

        Raises:
            EncryptionError: If a secret cannot be encrypted (nothing is staged)
        """
        if isinstance(value, bool):
            value = int(value)

        if self.is_secret(key) and isinstance(value, str) and value:
            if not self._encryption.is_encrypted(value):
                value = self._encryption.encrypt(value)

        self._store.set(key, value)

    def save(self) -> None:
        self._store.save()

    def migrate_secrets(self) -> list[str]:
        """
        Encrypt any secret still stored as plaintext.

        Meant to run once after every upgrade. Failures are logged and skipped;
        this method never raises.

        Returns:
            Names of the keys that were migrated
        """
        migrated: list[str] = []

        for key in sorted(self.secret_keys):
            try:
                raw = self._store.get(key)
                if isinstance(raw, str) and raw and not self._encryption.is_encrypted(raw):
                    self._store.set(key, self._encryption.encrypt(raw))
                    migrated.append(key)
            except Exception as e:
                logger.error(
                    "Secret migration failed for key",
                    stage=Stage.ENCRYPTION.value,
                    key=key,
                    error=str(e),
                )

        if migrated:
            try:
                self._store.save()
            except Exception as e:
                logger.error("Saving migrated secrets failed", stage=Stage.ENCRYPTION.value, error=str(e))
                return []
            logger.info("Secrets migrated", stage=Stage.ENCRYPTION.value, keys=migrated)

        return migrated
