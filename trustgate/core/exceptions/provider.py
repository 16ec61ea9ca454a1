"""
Provider Exceptions

Failures of the outbound call to a remote AI service. These count as failures
for the circuit breaker.
"""

from trustgate.core.exceptions.base import TrustGateError


class ProviderError(TrustGateError):
    """Base exception for remote AI service errors."""

    retryable = True


class ProviderNotConfiguredError(ProviderError):
    """Raised when a service is selected but its API key or model is missing."""

    retryable = False


class ProviderAPIError(ProviderError):
    """
    Raised when the remote service answers with a non-success HTTP status or
    an undecodable body.

    Details include status_code when available.
    """
    pass


class ProviderTimeoutError(ProviderError):
    """Raised when the remote call exceeds its timeout."""
    pass
