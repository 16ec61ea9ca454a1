"""
Rate Limiter

Per-actor budgets for the expensive operations behind the trust boundary.

Features:
- Rolling 1-hour windows for remote AI calls and for file processing
- Fixed cooldown between generation requests
- Concurrency ceiling for in-flight generations, released via async context manager
- Computed wait hints (minutes for windows, seconds for the cooldown)

Algorithm (rolling window):
1. Load the actor's timestamp list for the budget
2. Discard timestamps older than ``now - window``
3. Compare the remaining count against the limit
4. On record: run 1-3 and append ``now`` under the store lock for the key,
   persisting the purge together with the new timestamp

The in-flight counter uses the store's atomic ``incr``; an increment that
lands above the ceiling is rolled back.

All state lives in the StateStore under ``{prefix}:{actor_id}:{name}`` keys;
nothing is kept on the instance between calls.
"""

import math
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import orjson
from pydantic import BaseModel

from trustgate.core.config.constants import (
    STATE_KEY_CONCURRENCY,
    STATE_KEY_COOLDOWN,
    STATE_KEY_RATE_LIMIT,
    RateLimitKind,
    Stage,
)
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import (
    ConcurrencyExceededError,
    CooldownActiveError,
    RateLimitExceededError,
)
from trustgate.core.interfaces.state_store import StateStore
from trustgate.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

_EXCEEDED_MESSAGES = {
    RateLimitKind.API_CALL: (
        "API rate limit exceeded. You can make {limit} API calls per hour. "
        "Please wait {minutes} minutes."
    ),
    RateLimitKind.FILE_PROCESSING: (
        "File processing rate limit exceeded. You can process {limit} files per hour. "
        "Please wait {minutes} minutes."
    ),
}


class WindowStatus(BaseModel):
    used: int
    limit: int
    remaining: int
    reset_in_minutes: int


class CooldownStatus(BaseModel):
    cooldown_seconds: int
    remaining_seconds: int
    can_generate: bool


class ConcurrencyStatus(BaseModel):
    current: int
    limit: int


class RateLimitStatus(BaseModel):
    """Snapshot of every budget for one actor."""

    api_calls: WindowStatus
    file_processing: WindowStatus
    generation: CooldownStatus
    concurrent: ConcurrencyStatus


class RateLimiter:
    """
    Per-actor rate limiter over a StateStore.

    Usage:
        limiter = RateLimiter(store, actor_id="session-42")
        await limiter.record_cooldown_event()
        await limiter.record(RateLimitKind.API_CALL)
        async with limiter.concurrent_slot():
            await do_generation()
    """

    def __init__(
        self,
        store: StateStore,
        actor_id: str,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self.actor_id = actor_id
        self.settings = settings or get_settings()
        self._clock = clock

        limits = self.settings.rate_limit
        self._limits = {
            RateLimitKind.API_CALL: limits.RATE_LIMIT_API_CALLS_PER_HOUR,
            RateLimitKind.FILE_PROCESSING: limits.RATE_LIMIT_FILE_PROCESSING_PER_HOUR,
        }
        self._window = limits.RATE_LIMIT_WINDOW_SECONDS
        self._cooldown = limits.GENERATION_COOLDOWN_SECONDS
        self._max_concurrent = limits.MAX_CONCURRENT_GENERATIONS
        self._ttl = self.settings.state.ACTOR_STATE_TTL

    # ------------------------------------------------------------------
    # Keys and persistence
    # ------------------------------------------------------------------

    def _window_key(self, kind: RateLimitKind) -> str:
        return f"{STATE_KEY_RATE_LIMIT}:{self.actor_id}:{kind.value}"

    @property
    def _cooldown_key(self) -> str:
        return f"{STATE_KEY_COOLDOWN}:{self.actor_id}:generation"

    @property
    def _concurrency_key(self) -> str:
        return f"{STATE_KEY_CONCURRENCY}:{self.actor_id}:generation"

    async def _load_window(self, kind: RateLimitKind) -> list[float]:
        """Load the window without timestamps older than ``now - window``."""
        raw = await self._store.get(self._window_key(kind))
        timestamps: list[float] = orjson.loads(raw) if raw else []

        cutoff = self._clock() - self._window
        return [ts for ts in timestamps if ts > cutoff]

    async def _save_window(self, kind: RateLimitKind, timestamps: list[float]) -> None:
        await self._store.set(self._window_key(kind), orjson.dumps(timestamps).decode(), ttl=self._ttl)

    async def _load_counter(self) -> int:
        raw = await self._store.get(self._concurrency_key)
        return max(0, int(raw)) if raw else 0

    def _minutes_until_reset(self, timestamps: list[float]) -> int:
        """Minutes until the oldest in-window event ages out."""
        if not timestamps:
            return 0
        seconds_remaining = min(timestamps) + self._window - self._clock()
        return max(0, math.ceil(seconds_remaining / 60))

    # ------------------------------------------------------------------
    # Rolling windows
    # ------------------------------------------------------------------

    async def check_limit(self, kind: RateLimitKind) -> bool:
        """True while the actor has budget left in the window."""
        timestamps = await self._load_window(kind)
        return len(timestamps) < self._limits[kind]

    async def record(self, kind: RateLimitKind) -> None:
        """
        Record one event, re-validating the window first.

        Raises:
            RateLimitExceededError: Window full; details carry retry_after_minutes
        """
        async with self._store.lock(self._window_key(kind)):
            await self._record_locked(kind)

    async def _record_locked(self, kind: RateLimitKind) -> None:
        timestamps = await self._load_window(kind)
        limit = self._limits[kind]

        if len(timestamps) >= limit:
            minutes = self._minutes_until_reset(timestamps)
            log_stage(
                logger,
                Stage.RATE_LIMITING,
                "Rate limit exceeded",
                level="warning",
                actor_id=self.actor_id,
                kind=kind.value,
                limit=limit,
                retry_after_minutes=minutes,
            )
            raise RateLimitExceededError(
                _EXCEEDED_MESSAGES[kind].format(limit=limit, minutes=minutes),
                actor_id=self.actor_id,
                details={
                    "kind": kind.value,
                    "limit": limit,
                    "retry_after_minutes": minutes,
                    "retry_after_seconds": minutes * 60,
                },
            )

        timestamps.append(self._clock())
        await self._save_window(kind, timestamps)

    # ------------------------------------------------------------------
    # Cooldown
    # ------------------------------------------------------------------

    async def cooldown_remaining(self) -> int:
        """Whole seconds left before the next generation is allowed (0 if none)."""
        raw = await self._store.get(self._cooldown_key)
        if not raw:
            return 0
        elapsed = self._clock() - float(raw)
        return max(0, math.ceil(self._cooldown - elapsed))

    async def check_cooldown(self) -> bool:
        return await self.cooldown_remaining() == 0

    async def record_cooldown_event(self) -> None:
        """
        Start a new cooldown period.

        Raises:
            CooldownActiveError: Previous cooldown has not elapsed yet
        """
        async with self._store.lock(self._cooldown_key):
            remaining = await self.cooldown_remaining()
            if remaining > 0:
                log_stage(
                    logger,
                    Stage.RATE_LIMITING,
                    "Generation cooldown active",
                    level="warning",
                    actor_id=self.actor_id,
                    retry_after_seconds=remaining,
                )
                raise CooldownActiveError(
                    f"Generation cooldown active. Please wait {remaining} seconds "
                    "before generating again.",
                    actor_id=self.actor_id,
                    details={"retry_after_seconds": remaining},
                )

            await self._store.set(self._cooldown_key, repr(self._clock()), ttl=self._ttl)

    # ------------------------------------------------------------------
    # Concurrency
    # ------------------------------------------------------------------

    async def try_enter_concurrent(self) -> None:
        """
        Take one in-flight slot.

        Raises:
            ConcurrencyExceededError: All slots are taken
        """
        taken = await self._store.incr(self._concurrency_key, 1, ttl=self._ttl)
        if taken > self._max_concurrent:
            await self._store.incr(self._concurrency_key, -1)
            current = taken - 1
            log_stage(
                logger,
                Stage.RATE_LIMITING,
                "Concurrency limit reached",
                level="warning",
                actor_id=self.actor_id,
                current=current,
                limit=self._max_concurrent,
            )
            raise ConcurrencyExceededError(
                f"Too many concurrent requests. Maximum {self._max_concurrent} allowed.",
                actor_id=self.actor_id,
                details={"limit": self._max_concurrent, "current": current},
            )

    async def exit_concurrent(self) -> None:
        """Release one in-flight slot. Never drops below zero."""
        remaining = await self._store.incr(self._concurrency_key, -1)
        if remaining < 0:
            await self._store.incr(self._concurrency_key, 1)

    @asynccontextmanager
    async def concurrent_slot(self) -> AsyncIterator[None]:
        """Hold one in-flight slot for the duration of the block."""
        await self.try_enter_concurrent()
        try:
            yield
        finally:
            await self.exit_concurrent()

    # ------------------------------------------------------------------
    # Status and administration
    # ------------------------------------------------------------------

    async def _window_status(self, kind: RateLimitKind) -> WindowStatus:
        timestamps = await self._load_window(kind)
        limit = self._limits[kind]
        return WindowStatus(
            used=len(timestamps),
            limit=limit,
            remaining=max(0, limit - len(timestamps)),
            reset_in_minutes=self._minutes_until_reset(timestamps),
        )

    async def status(self) -> RateLimitStatus:
        remaining = await self.cooldown_remaining()
        return RateLimitStatus(
            api_calls=await self._window_status(RateLimitKind.API_CALL),
            file_processing=await self._window_status(RateLimitKind.FILE_PROCESSING),
            generation=CooldownStatus(
                cooldown_seconds=self._cooldown,
                remaining_seconds=remaining,
                can_generate=remaining == 0,
            ),
            concurrent=ConcurrencyStatus(
                current=await self._load_counter(),
                limit=self._max_concurrent,
            ),
        )

    async def reset(self) -> None:
        """Clear all four budgets for this actor."""
        await self._store.delete(
            self._window_key(RateLimitKind.API_CALL),
            self._window_key(RateLimitKind.FILE_PROCESSING),
            self._cooldown_key,
            self._concurrency_key,
        )
        logger.info("Rate limits reset", actor_id=self.actor_id)
