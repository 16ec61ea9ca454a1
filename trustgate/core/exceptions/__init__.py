"""
Exception Module

Structured exception hierarchy for the trust boundary, organised by theme.

Module Structure:
-----------------
- **base.py**: TrustGateError base class + ConfigurationError, StateStoreError
- **rate_limit.py**: Rate limiter rejections
- **circuit_breaker.py**: Circuit breaker rejections
- **validation.py**: Response / content / page validation failures
- **file.py**: Upload screening failures
- **security.py**: Encryption, signing and pinning failures
- **provider.py**: Remote AI service failures

Usage:
------
```python
from trustgate.core.exceptions import CircuitBreakerOpenError, UnsafeContentError

try:
    await service.generate(actor, provider, prompt)
except CircuitBreakerOpenError as e:
    show(e.message)  # includes the remaining seconds
```
"""

# Base exception
from trustgate.core.exceptions.base import ConfigurationError, StateStoreError, TrustGateError

# Circuit breaker exceptions
from trustgate.core.exceptions.circuit_breaker import (
    CircuitBreakerError,
    CircuitBreakerOpenError,
)

# File exceptions
from trustgate.core.exceptions.file import (
    ArchiveUnsafeError,
    FileValidationError,
    MalwareDetectedError,
    SignatureMismatchError,
)

# Provider exceptions
from trustgate.core.exceptions.provider import (
    ProviderAPIError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderTimeoutError,
)

# Rate limit exceptions
from trustgate.core.exceptions.rate_limit import (
    ConcurrencyExceededError,
    CooldownActiveError,
    RateLimitError,
    RateLimitExceededError,
)

# Security exceptions
from trustgate.core.exceptions.security import (
    CertificateMismatchError,
    EncryptionError,
    SecurityError,
    SignatureInvalidError,
)

# Validation exceptions
from trustgate.core.exceptions.validation import (
    MalformedResponseError,
    NoValidPagesError,
    OversizedInputError,
    UnsafeContentError,
    ValidationError,
)

__all__ = [
    # Base
    "TrustGateError",
    "ConfigurationError",
    "StateStoreError",
    # Rate Limit
    "RateLimitError",
    "RateLimitExceededError",
    "CooldownActiveError",
    "ConcurrencyExceededError",
    # Circuit Breaker
    "CircuitBreakerError",
    "CircuitBreakerOpenError",
    # Validation
    "ValidationError",
    "MalformedResponseError",
    "UnsafeContentError",
    "NoValidPagesError",
    "OversizedInputError",
    # File
    "FileValidationError",
    "SignatureMismatchError",
    "ArchiveUnsafeError",
    "MalwareDetectedError",
    # Security
    "SecurityError",
    "EncryptionError",
    "SignatureInvalidError",
    "CertificateMismatchError",
    # Provider
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderAPIError",
    "ProviderTimeoutError",
]
