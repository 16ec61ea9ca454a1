"""
Security Exceptions

Secret encryption, request signing and transport pinning failures.
"""

from trustgate.core.exceptions.base import TrustGateError


class SecurityError(TrustGateError):
    """Base exception for cryptographic and transport security errors."""
    pass


class EncryptionError(SecurityError):
    """
    Raised when a secret cannot be encrypted.

    Fatal to the write that triggered it. Decryption never raises this; it
    degrades to returning the stored value unchanged.
    """
    pass


class SignatureInvalidError(SecurityError):
    """
    Raised when a request signature does not verify.

    Common causes:
    - Payload, service or key altered
    - Signature older than the replay window
    - Malformed signature encoding
    """
    pass


class CertificateMismatchError(SecurityError):
    """
    Raised when a pinned host presents a certificate that is not on its allow-list.

    This may indicate a man-in-the-middle attack, or an allow-list that was not
    updated after the host rotated its certificate.
    """
    pass
