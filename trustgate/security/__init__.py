"""
Security Layer

Secret encryption at rest, outbound request signing and transport pinning.
"""

from trustgate.security.certificate_pinner import (
    CertificatePinner,
    fingerprint_of,
    normalize_fingerprint,
)
from trustgate.security.encryption import EncryptionService, derive_key
from trustgate.security.request_signer import RequestSigner, canonicalize, generate_request_id
from trustgate.security.secret_config import SecretConfig

__all__ = [
    "EncryptionService",
    "derive_key",
    "SecretConfig",
    "RequestSigner",
    "canonicalize",
    "generate_request_id",
    "CertificatePinner",
    "fingerprint_of",
    "normalize_fingerprint",
]
