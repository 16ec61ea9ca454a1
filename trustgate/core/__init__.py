"""
Core Module

Foundational components: configuration, logging, exceptions and resilience.
"""

from .exceptions import (
    CircuitBreakerOpenError,
    ConfigurationError,
    ProviderError,
    RateLimitExceededError,
    TrustGateError,
    ValidationError,
)
from .logging import (
    clear_actor_id,
    get_actor_id,
    get_logger,
    log_stage,
    set_actor_id,
    setup_logging,
)

__all__ = [
    "TrustGateError",
    "ConfigurationError",
    "CircuitBreakerOpenError",
    "RateLimitExceededError",
    "ProviderError",
    "ValidationError",
    "get_logger",
    "setup_logging",
    "log_stage",
    "set_actor_id",
    "get_actor_id",
    "clear_actor_id",
]
