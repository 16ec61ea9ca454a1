"""
Resilience Layer

Circuit breaking and retry policy around the outbound remote call.
"""

from trustgate.core.resilience.circuit_breaker import CircuitBreaker, CircuitRecord
from trustgate.core.resilience.retry import RETRYABLE_EXCEPTIONS, create_retry_decorator

__all__ = [
    "CircuitBreaker",
    "CircuitRecord",
    "create_retry_decorator",
    "RETRYABLE_EXCEPTIONS",
]
