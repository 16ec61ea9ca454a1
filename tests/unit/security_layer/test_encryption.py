"""
Unit Tests for EncryptionService

Tests the AES-256-CBC format, tolerant decryption and the ciphertext shape check.
"""

import base64

import pytest

from trustgate.core.config.settings import Settings
from trustgate.security.encryption import EncryptionService, derive_key


@pytest.mark.unit
class TestKeyDerivation:
    def test_key_is_deterministic(self):
        assert derive_key("install", "salt", 1_000) == derive_key("install", "salt", 1_000)

    def test_key_length(self):
        assert len(derive_key("install", "salt", 1_000)) == 32

    def test_different_installations_different_keys(self):
        assert derive_key("install-a", "salt", 1_000) != derive_key("install-b", "salt", 1_000)

    def test_service_derives_from_settings(self):
        settings = Settings(_env_file=None, INSTALLATION_ID="site-1", INSTALLATION_SALT="pepper", KDF_ITERATIONS=1_000)

        service = EncryptionService(settings)

        assert service.key == derive_key("site-1", "pepper", 1_000)


@pytest.mark.unit
class TestEncryptDecrypt:
    def test_roundtrip(self, encryption):
        stored = encryption.encrypt("sk-live-secret")

        assert stored != "sk-live-secret"
        assert encryption.decrypt(stored) == "sk-live-secret"

    def test_roundtrip_unicode(self, encryption):
        assert encryption.decrypt(encryption.encrypt("schlüssel-🔑")) == "schlüssel-🔑"

    def test_fresh_iv_per_call(self, encryption):
        assert encryption.encrypt("same") != encryption.encrypt("same")

    def test_format_is_iv_plus_whole_blocks(self, encryption):
        raw = base64.b64decode(encryption.encrypt("sk-live-secret"))

        assert len(raw) > 16
        assert (len(raw) - 16) % 16 == 0

    def test_empty_string(self, encryption):
        assert encryption.encrypt("") == ""
        assert encryption.decrypt("") == ""

    @pytest.mark.parametrize(
        "value",
        [
            "sk-plain-legacy-key",  # not base64
            base64.b64encode(b"short").decode(),  # shorter than an IV
            base64.b64encode(b"\0" * 40).decode(),  # not whole blocks after the IV
        ],
    )
    def test_decrypt_returns_non_ciphertext_unchanged(self, encryption, value):
        assert encryption.decrypt(value) == value

    def test_wrong_key_returns_input(self, encryption):
        stored = encryption.encrypt("sk-live-secret")
        other = EncryptionService(encryption.settings, key=derive_key("other", "salt", 1_000))

        assert other.decrypt(stored) != "sk-live-secret"


@pytest.mark.unit
class TestIsEncrypted:
    def test_ciphertext_detected(self, encryption):
        assert encryption.is_encrypted(encryption.encrypt("sk-live-secret")) is True

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "sk-live-secret",
            base64.b64encode(b"x" * 16).decode(),  # IV only
            base64.b64encode(b"x" * 20).decode(),  # partial block
        ],
    )
    def test_non_ciphertext(self, encryption, value):
        assert encryption.is_encrypted(value) is False
