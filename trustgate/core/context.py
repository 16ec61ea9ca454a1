"""
Actor Context

Holds everything the guards need for one actor during one request: the actor
id, the state store, settings and the clock. The rate limiter and circuit
breaker are built lazily and share the same store and clock.

Usage:
    actor = ActorContext("session-42", store)
    await actor.rate_limiter.record(RateLimitKind.API_CALL)
    await actor.circuit_breaker.check_availability("openai")
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.interfaces.state_store import StateStore
from trustgate.core.resilience.circuit_breaker import CircuitBreaker
from trustgate.rate_limiting.rate_limiter import RateLimiter


@dataclass
class ActorContext:
    actor_id: str
    store: StateStore
    settings: Settings = field(default_factory=get_settings)
    clock: Callable[[], float] = time.time

    _rate_limiter: RateLimiter | None = field(default=None, init=False, repr=False)
    _circuit_breaker: CircuitBreaker | None = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if not self.actor_id:
            raise ValueError("actor_id must not be empty")

    @property
    def rate_limiter(self) -> RateLimiter:
        if self._rate_limiter is None:
            self._rate_limiter = RateLimiter(
                self.store, self.actor_id, settings=self.settings, clock=self.clock
            )
        return self._rate_limiter

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        if self._circuit_breaker is None:
            self._circuit_breaker = CircuitBreaker(
                self.store, self.actor_id, settings=self.settings, clock=self.clock
            )
        return self._circuit_breaker

    async def reset(self) -> None:
        """Administrative override: clear every budget and circuit for this actor."""
        await self.rate_limiter.reset()
        await self.circuit_breaker.reset_all()
