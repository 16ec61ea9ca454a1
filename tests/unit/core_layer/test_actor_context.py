"""
Unit Tests for ActorContext
"""

import pytest

from trustgate.core.config.constants import RateLimitKind
from trustgate.core.context import ActorContext


@pytest.mark.unit
class TestActorContext:
    def test_empty_actor_rejected(self, store, settings):
        with pytest.raises(ValueError):
            ActorContext("", store, settings=settings)

    def test_guards_are_built_once(self, actor):
        assert actor.rate_limiter is actor.rate_limiter
        assert actor.circuit_breaker is actor.circuit_breaker

    def test_guards_share_actor_and_settings(self, actor, settings):
        assert actor.rate_limiter.actor_id == "session-42"
        assert actor.circuit_breaker.actor_id == "session-42"
        assert actor.rate_limiter.settings is settings

    async def test_reset_clears_limits_and_circuits(self, actor):
        for _ in range(3):
            await actor.circuit_breaker.record_failure("openai")
            await actor.rate_limiter.record(RateLimitKind.API_CALL)

        await actor.reset()

        assert await actor.rate_limiter.check_limit(RateLimitKind.API_CALL) is True
        await actor.circuit_breaker.check_availability("openai")
