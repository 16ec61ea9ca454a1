"""
Rate Limiting Exceptions

All exceptions raised by the per-actor rate limiter. Every one of them is
recoverable: the caller must not make the remote call and should surface the
message, which carries a computed wait hint.
"""

from trustgate.core.exceptions.base import TrustGateError


class RateLimitError(TrustGateError):
    """Base exception for rate limiting errors."""

    retryable = True

    @property
    def retry_after_seconds(self) -> int:
        """Seconds the caller should wait before retrying."""
        return int(self.details.get("retry_after_seconds", 0))


class RateLimitExceededError(RateLimitError):
    """
    Raised when a rolling-window budget is exhausted.

    Details include:
    - kind: Which budget (api_calls, file_processing)
    - limit: Events allowed per window
    - retry_after_minutes: Minutes until the oldest event leaves the window
    """
    pass


class CooldownActiveError(RateLimitError):
    """
    Raised when a generation is requested before the cooldown elapsed.

    Details include retry_after_seconds.
    """
    pass


class ConcurrencyExceededError(RateLimitError):
    """
    Raised when the actor already has the maximum number of in-flight generations.

    Common causes:
    - Double-submitted form
    - Several browser tabs generating at once
    """
    pass
