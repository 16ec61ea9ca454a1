"""
Redis State Store

Shared actor state backend for multi-worker deployments.

Architecture:
    RedisStateStore (StateStore implementation)
        └── redis.asyncio.Redis over a ConnectionPool

Pool Configuration:
- Socket timeout: 5s (configurable)
- Retry on timeout: Enabled
- Decode responses: True (values are JSON strings)
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, LockError, RedisError, TimeoutError

from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import StateStoreError
from trustgate.core.logging.logger import get_logger

logger = get_logger(__name__)


class RedisStateStore:
    """
    Redis-backed StateStore.

    Responsibility: Connection lifecycle, the get/set/delete/incr commands and
    the per-key locks the guards need. Every RedisError is wrapped in StateStoreError so callers see
    one exception type regardless of backend.
    """

    def __init__(self, settings: Settings | None = None, client: redis.Redis | None = None):
        """
        Initialize the store.

        Args:
            settings: Application settings (defaults to get_settings())
            client: Pre-built client, mainly for tests
        """
        self._settings = settings or get_settings()
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = client
        self._is_connected = client is not None

    async def connect(self) -> None:
        """
        Establish connection to Redis with connection pooling.

        STAGE-REDIS.1: Connection establishment

        Raises:
            StateStoreError: If connection fails
        """
        if self._is_connected and self._client:
            return

        state = self._settings.state
        try:
            self._pool = ConnectionPool(
                host=state.REDIS_HOST,
                port=state.REDIS_PORT,
                db=state.REDIS_DB,
                password=state.REDIS_PASSWORD,
                socket_timeout=state.REDIS_SOCKET_TIMEOUT,
                socket_connect_timeout=state.REDIS_SOCKET_TIMEOUT,
                retry_on_timeout=True,
                decode_responses=True,
            )
            self._client = redis.Redis(connection_pool=self._pool)

            # Verify the connection actually works before accepting traffic
            await self._client.ping()
            self._is_connected = True

            logger.info(
                "Redis state store connected",
                stage="REDIS.1",
                host=state.REDIS_HOST,
                port=state.REDIS_PORT,
            )
        except (ConnectionError, TimeoutError) as e:
            logger.error("Failed to connect to Redis", stage="REDIS.1", error=str(e))
            raise StateStoreError(
                message=f"Failed to connect to Redis: {e}",
                details={"host": state.REDIS_HOST, "port": state.REDIS_PORT},
            ) from e

    async def disconnect(self) -> None:
        """
        Close Redis connection and pool.

        STAGE-REDIS.2: Connection cleanup
        """
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

        logger.info("Redis state store disconnected", stage="REDIS.2")

    async def ping(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            True if healthy, False otherwise
        """
        try:
            if self._client and self._is_connected:
                await self._client.ping()
                return True
        except (ConnectionError, TimeoutError) as e:
            logger.warning("Redis ping failed", stage="REDIS.PING", error=str(e))
        return False

    def _require_client(self) -> redis.Redis:
        if not self._client:
            raise StateStoreError("Redis state store is not connected")
        return self._client

    async def get(self, key: str) -> str | None:
        try:
            return await self._require_client().get(key)
        except RedisError as e:
            logger.error("Redis GET failed", stage="REDIS.GET", key=key, error=str(e))
            raise StateStoreError(message=f"Redis GET failed: {e}", details={"key": key}) from e

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        try:
            result = await self._require_client().set(key, value, ex=ttl)
            return bool(result)
        except RedisError as e:
            logger.error("Redis SET failed", stage="REDIS.SET", key=key, error=str(e))
            raise StateStoreError(message=f"Redis SET failed: {e}", details={"key": key}) from e

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self._require_client().delete(*keys)
        except RedisError as e:
            logger.error("Redis DELETE failed", stage="REDIS.DEL", keys=keys, error=str(e))
            raise StateStoreError(
                message=f"Redis DELETE failed: {e}", details={"keys": list(keys)}
            ) from e

    async def incr(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        try:
            async with self._require_client().pipeline(transaction=True) as pipe:
                pipe.incrby(key, amount)
                if ttl:
                    pipe.expire(key, ttl)
                results = await pipe.execute()
            return int(results[0])
        except RedisError as e:
            logger.error("Redis INCRBY failed", stage="REDIS.INCR", key=key, error=str(e))
            raise StateStoreError(message=f"Redis INCRBY failed: {e}", details={"key": key}) from e

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        """
        Hold a Redis lock on ``lock:{key}`` for the duration of the block.

        The lease expires after REDIS_LOCK_TIMEOUT so a crashed worker cannot
        wedge the key. Waiting longer than that raises StateStoreError.
        """
        timeout = self._settings.state.REDIS_LOCK_TIMEOUT
        redis_lock = self._require_client().lock(
            f"lock:{key}", timeout=timeout, blocking_timeout=timeout
        )
        try:
            acquired = await redis_lock.acquire()
        except RedisError as e:
            logger.error("Redis LOCK failed", stage="REDIS.LOCK", key=key, error=str(e))
            raise StateStoreError(message=f"Redis LOCK failed: {e}", details={"key": key}) from e
        if not acquired:
            raise StateStoreError(
                message=f"Timed out waiting for lock on {key}",
                details={"key": key, "timeout_seconds": timeout},
            )

        try:
            yield
        finally:
            try:
                await redis_lock.release()
            except LockError as e:
                # Lease already expired
                logger.warning(
                    "Redis lock released late", stage="REDIS.LOCK", key=key, error=str(e)
                )

    def is_connected(self) -> bool:
        """Check if connected to Redis."""
        return self._is_connected
