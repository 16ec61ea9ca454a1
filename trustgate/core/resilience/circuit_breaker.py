"""
Circuit Breaker for Remote AI Services.

This module implements a store-backed circuit breaker, one independent state
machine per (actor, remote service).

MECHANISM OF ACTION:
-------------------
1.  **Actor-Scoped State**:
    The state of every service an actor has called lives in one JSON document in
    the StateStore (``circuit:{actor_id}``). Failures on service A never affect
    service B, and one actor's failures never trip another actor's circuit.
    Every read-modify-write of the document holds the store lock for the key,
    so overlapping outcomes for the same actor are all counted.

2.  **State Transitions**:
    - **CLOSED**: Requests are allowed.
      - On Failure: failure counter increments, last_failure_time = now.
      - On Success: failure counter resets to 0.
      - Threshold Reached: failures >= CB_FAILURE_THRESHOLD -> OPEN.

    - **OPEN**: Requests are rejected with `CircuitBreakerOpenError` (Fail Fast).
      - Recovery: the first availability check made at least `CB_RECOVERY_TIMEOUT`
        seconds after the last failure moves the circuit to HALF-OPEN.
      - Outcomes recorded while OPEN are ignored.

    - **HALF-OPEN**: Probing mode.
      - On Failure: straight back to OPEN, timer restarts.
      - On Success: success counter increments; CB_SUCCESS_THRESHOLD successes
        close the circuit.

3.  **Lazy Recovery**:
    There is no background timer. A service that is never checked again stays
    OPEN indefinitely; `status()` reports it as OPEN until the next check.
"""

import math
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import orjson
from pydantic import BaseModel

from trustgate.core.config.constants import STATE_KEY_CIRCUIT, CircuitState, Stage
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import CircuitBreakerOpenError
from trustgate.core.interfaces.state_store import StateStore
from trustgate.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)


class CircuitRecord(BaseModel):
    """Persisted state of one service's circuit."""

    state: CircuitState = CircuitState.CLOSED
    failures: int = 0
    successes: int = 0
    last_failure_time: float | None = None


class CircuitBreaker:
    """
    Per-actor circuit breaker over a StateStore.

    Usage:
        breaker = CircuitBreaker(store, actor_id="session-42")
        async with breaker.guard("openai"):
            response = await call_openai()
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

        cb = self.settings.circuit_breaker
        self._failure_threshold = cb.CB_FAILURE_THRESHOLD
        self._recovery_timeout = cb.CB_RECOVERY_TIMEOUT
        self._success_threshold = cb.CB_SUCCESS_THRESHOLD
        self._ttl = self.settings.state.ACTOR_STATE_TTL

        self._key = f"{STATE_KEY_CIRCUIT}:{actor_id}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def _load(self) -> dict[str, CircuitRecord]:
        raw = await self._store.get(self._key)
        if not raw:
            return {}
        document = orjson.loads(raw)
        return {service: CircuitRecord(**data) for service, data in document.items()}

    async def _save(self, records: dict[str, CircuitRecord]) -> None:
        document = {service: record.model_dump(mode="json") for service, record in records.items()}
        await self._store.set(self._key, orjson.dumps(document).decode(), ttl=self._ttl)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_state(self, service: str) -> CircuitState:
        """Current state of the service's circuit (CLOSED if never seen)."""
        records = await self._load()
        record = records.get(service)
        return record.state if record else CircuitState.CLOSED

    async def status(self) -> dict[str, CircuitRecord]:
        """Snapshot of every service this actor has a circuit for."""
        return await self._load()

    # ------------------------------------------------------------------
    # Guard operations
    # ------------------------------------------------------------------

    async def check_availability(self, service: str) -> None:
        """
        Reject the call if the circuit is open.

        An OPEN circuit whose recovery timeout has elapsed moves to HALF-OPEN
        here and the call is allowed through as a probe.

        Raises:
            CircuitBreakerOpenError: Circuit open; details carry retry_after_seconds
        """
        async with self._store.lock(self._key):
            records = await self._load()
            record = records.get(service)
            if record is None or record.state != CircuitState.OPEN:
                return

            elapsed = self._clock() - (record.last_failure_time or 0.0)
            if elapsed >= self._recovery_timeout:
                record.state = CircuitState.HALF_OPEN
                record.successes = 0
                await self._save(records)
                log_stage(
                    logger,
                    Stage.CIRCUIT_BREAKER,
                    "Circuit half-open, allowing probe",
                    service=service,
                    actor_id=self.actor_id,
                )
                return

            remaining = math.ceil(self._recovery_timeout - elapsed)
            log_stage(
                logger,
                Stage.CIRCUIT_CHECK,
                "Circuit open, rejecting call",
                level="warning",
                service=service,
                actor_id=self.actor_id,
                retry_after_seconds=remaining,
            )
            raise CircuitBreakerOpenError(
                f"Service '{service}' is temporarily unavailable due to repeated failures. "
                f"Please try again in {remaining} seconds.",
                actor_id=self.actor_id,
                details={"service": service, "retry_after_seconds": remaining},
            )

    async def record_success(self, service: str) -> None:
        async with self._store.lock(self._key):
            records = await self._load()
            record = records.setdefault(service, CircuitRecord())

            if record.state == CircuitState.HALF_OPEN:
                record.successes += 1
                if record.successes >= self._success_threshold:
                    records[service] = CircuitRecord()
                    logger.info(
                        "Circuit recovered, closing",
                        stage=Stage.CIRCUIT_BREAKER.value,
                        service=service,
                        actor_id=self.actor_id,
                    )
            elif record.state == CircuitState.CLOSED:
                record.failures = 0

            await self._save(records)

    async def record_failure(self, service: str) -> None:
        async with self._store.lock(self._key):
            records = await self._load()
            record = records.setdefault(service, CircuitRecord())
            now = self._clock()

            if record.state == CircuitState.HALF_OPEN:
                record.state = CircuitState.OPEN
                record.last_failure_time = now
                record.successes = 0
                logger.error(
                    "Probe failed, reopening circuit",
                    stage=Stage.CIRCUIT_BREAKER.value,
                    service=service,
                    actor_id=self.actor_id,
                )
            elif record.state == CircuitState.CLOSED:
                record.failures += 1
                record.last_failure_time = now
                logger.warning(
                    "Circuit recorded failure",
                    stage=Stage.CIRCUIT_BREAKER.value,
                    service=service,
                    failures=record.failures,
                    threshold=self._failure_threshold,
                )
                if record.failures >= self._failure_threshold:
                    record.state = CircuitState.OPEN
                    logger.error(
                        "Circuit tripped, opening",
                        stage=Stage.CIRCUIT_BREAKER.value,
                        service=service,
                        actor_id=self.actor_id,
                    )

            await self._save(records)

    @asynccontextmanager
    async def guard(self, service: str) -> AsyncIterator[None]:
        """
        Check availability, run the block, then record its outcome.

        Anything escaping the block, cancellation included, counts as a failure
        and is re-raised.
        """
        await self.check_availability(service)
        try:
            yield
        except BaseException:
            await self.record_failure(service)
            raise
        await self.record_success(service)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    async def reset(self, service: str) -> None:
        async with self._store.lock(self._key):
            records = await self._load()
            if records.pop(service, None) is not None:
                await self._save(records)
                logger.info("Circuit reset", service=service, actor_id=self.actor_id)

    async def reset_all(self) -> None:
        await self._store.delete(self._key)
        logger.info("All circuits reset", actor_id=self.actor_id)
