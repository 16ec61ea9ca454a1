"""
Circuit Breaker Exceptions

All exceptions related to circuit breaker operations
"""

from trustgate.core.exceptions.base import TrustGateError


class CircuitBreakerError(TrustGateError):
    """Base exception for circuit breaker errors."""

    retryable = True


class CircuitBreakerOpenError(CircuitBreakerError):
    """
    Raised when circuit breaker is open (fail fast).

    The remote service failed repeatedly and calls are being rejected to prevent
    pile-up. The next availability check after the recovery timeout moves the
    circuit to half-open, at which point calls are allowed again.

    Details include:
    - service: The remote service name
    - retry_after_seconds: Seconds until the recovery timeout expires
    """

    @property
    def retry_after_seconds(self) -> int:
        return int(self.details.get("retry_after_seconds", 0))
