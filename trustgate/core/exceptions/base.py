"""
Root of the trustgate exception hierarchy.

Only TrustGateError and the two cross-cutting errors (configuration, state
backend) live here; guard-specific failures are in the themed modules next to
this one.
"""

from typing import Any


class TrustGateError(Exception):
    """
    Base exception for every failure raised by the trust boundary.

    The message is shown to the end user as-is, so it is specific and, for
    guard rejections, carries the computed wait. Machine-readable facts (wait
    hints, limits, offending service) go into ``details``.

    Attributes:
        message: User-displayable message
        actor_id: Actor the failure belongs to, when known
        details: Structured facts about the failure
        retryable: True for guard rejections the caller may retry later,
            False for terminal failures (bad remote data, rejected upload)

    Example:
        raise CooldownActiveError(
            "Generation cooldown active. Please wait 7 seconds before generating again.",
            actor_id="session-42",
            details={"retry_after_seconds": 7},
        )
    """

    retryable: bool = False

    def __init__(
        self, message: str, actor_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.actor_id = actor_id
        self.details = dict(details or {})
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for structured logs."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "actor_id": self.actor_id,
            "retryable": self.retryable,
            "details": self.details,
        }

    def with_suggestion(self, suggestion: str) -> "TrustGateError":
        """Attach a hint telling the user how to resolve the failure; chainable."""
        self.details["suggestion"] = suggestion
        return self

    def with_context(self, **context) -> "TrustGateError":
        """Merge extra keys into details; chainable."""
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        parts = [f"message={self.message!r}"]
        if self.actor_id:
            parts.append(f"actor_id={self.actor_id!r}")
        if self.details:
            parts.append(f"details={self.details}")
        return f"{type(self).__name__}({', '.join(parts)})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        actor_id: str | None = None,
        **details
    ) -> "TrustGateError":
        """
        Wrap a lower-level exception, keeping its type and text in details.

        Example:
            >>> try:
            ...     await client.ping()
            ... except RedisError as e:
            ...     raise StateStoreError.from_exception(e, host="localhost") from e
        """
        wrapped_details = {
            "original_error": type(exc).__name__,
            "original_message": str(exc),
        }
        wrapped_details.update(details)
        return cls(message or str(exc), actor_id=actor_id, details=wrapped_details)


class ConfigurationError(TrustGateError):
    """Raised when configuration is invalid or missing."""


class StateStoreError(TrustGateError):
    """Raised when the actor state backend cannot be reached."""

    retryable = True
