"""
Secret Encryption Service

Symmetric encryption of secret configuration values (vendor API keys) at rest.

Format:
    base64(iv || ciphertext)
    - iv: 16 random bytes, fresh per call
    - ciphertext: AES-256-CBC over the UTF-8 plaintext, PKCS7 padded

Key derivation:
    PBKDF2-HMAC-SHA256(installation id, installation salt, 10,000 iterations, 32 bytes)

    Deterministic per installation, so every process reconstructs the same key
    without it ever being stored.

Decryption is total: empty input, input that is not strict base64, input too
short to hold an IV, and input that fails to decrypt are all returned unchanged.
This keeps legacy plaintext values readable while they wait for migration.
"""

import base64
import binascii
import os

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from trustgate.core.config.constants import AES_IV_LENGTH, AES_KEY_LENGTH, Stage
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import EncryptionError
from trustgate.core.logging.logger import get_logger

logger = get_logger(__name__)

_BLOCK_BITS = algorithms.AES.block_size


def derive_key(installation_id: str, salt: str, iterations: int) -> bytes:
    """Derive the 32-byte AES key for an installation."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=AES_KEY_LENGTH,
        salt=salt.encode("utf-8"),
        iterations=iterations,
    )
    return kdf.derive(installation_id.encode("utf-8"))


def _strict_b64decode(value: str) -> bytes | None:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None


class EncryptionService:
    """
    AES-256-CBC encryption with an installation-derived key.

    Usage:
        service = EncryptionService()
        stored = service.encrypt("sk-live-...")
        plaintext = service.decrypt(stored)
    """

    def __init__(self, settings: Settings | None = None, key: bytes | None = None):
        self.settings = settings or get_settings()
        self._key = key

    @property
    def key(self) -> bytes:
        # Derived once per instance
        if self._key is None:
            enc = self.settings.encryption
            self._key = derive_key(enc.INSTALLATION_ID, enc.INSTALLATION_SALT, enc.KDF_ITERATIONS)
        return self._key

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a secret string.

        Raises:
            EncryptionError: If the cipher fails
        """
        if not plaintext:
            return ""

        try:
            iv = os.urandom(AES_IV_LENGTH)
            padder = padding.PKCS7(_BLOCK_BITS).padder()
            padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

            encryptor = Cipher(algorithms.AES(self.key), modes.CBC(iv)).encryptor()
            ciphertext = encryptor.update(padded) + encryptor.finalize()
        except (ValueError, TypeError) as e:
            logger.error("Encryption failed", stage=Stage.ENCRYPTION.value, error=str(e))
            raise EncryptionError.from_exception(e, message="Encryption failed") from e

        return base64.b64encode(iv + ciphertext).decode("ascii")

    def decrypt(self, value: str) -> str:
        """Decrypt a stored value, returning it unchanged if it is not ciphertext."""
        if not value:
            return ""

        data = _strict_b64decode(value)
        if data is None or len(data) < AES_IV_LENGTH:
            return value

        iv, ciphertext = data[:AES_IV_LENGTH], data[AES_IV_LENGTH:]
        try:
            decryptor = Cipher(algorithms.AES(self.key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            logger.debug("Value did not decrypt, treating as plaintext", stage=Stage.ENCRYPTION.value)
            return value

    def is_encrypted(self, value: str) -> bool:
        """
        True if value has the shape of stored ciphertext.

        Shape check only: strict base64, longer than one IV, whole AES blocks
        after the IV.
        """
        if not value:
            return False

        data = _strict_b64decode(value)
        if data is None or len(data) <= AES_IV_LENGTH:
            return False
        return (len(data) - AES_IV_LENGTH) % (_BLOCK_BITS // 8) == 0
