"""
Rate Limiting

Per-actor rolling windows, generation cooldown and concurrency gate.
"""

from trustgate.rate_limiting.rate_limiter import (
    ConcurrencyStatus,
    CooldownStatus,
    RateLimiter,
    RateLimitStatus,
    WindowStatus,
)

__all__ = [
    "RateLimiter",
    "RateLimitStatus",
    "WindowStatus",
    "CooldownStatus",
    "ConcurrencyStatus",
]
