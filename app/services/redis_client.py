# app/services/redis_client.py
"""
Optional Redis cache for donor lookups.

With REDIS_URL unset, or before initialize(), reads miss and writes report
False, so callers never branch on whether the cache exists. Redis errors are
logged and treated the same way.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

MAX_CONNECTIONS = 20
SOCKET_TIMEOUT_S = 5


class FastRedisClient:
    def __init__(self, url: str | None = None):
        self.url = url
        self.pool: ConnectionPool | None = None
        self.client: redis.Redis | None = None
        self._initialized = False

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def initialize(self) -> None:
        if self._initialized or not self.enabled:
            return

        self.pool = ConnectionPool.from_url(
            self.url,
            max_connections=MAX_CONNECTIONS,
            retry_on_timeout=True,
            socket_connect_timeout=SOCKET_TIMEOUT_S,
            socket_timeout=SOCKET_TIMEOUT_S,
            health_check_interval=30,
            decode_responses=True,
        )
        self.client = redis.Redis(connection_pool=self.pool)

        try:
            await self.client.ping()
        except redis.RedisError as e:
            logger.error("Redis cache unreachable", error=str(e))
            await self.close()
            raise RuntimeError("Redis initialization failed") from e

        self._initialized = True
        logger.info("Redis cache connected", max_connections=MAX_CONNECTIONS)

    async def close(self) -> None:
        try:
            if self.client:
                await self.client.aclose()
            if self.pool:
                await self.pool.disconnect()
        except redis.RedisError as e:
            logger.error("Error closing Redis client", error=str(e))
        finally:
            self.client = None
            self.pool = None
            self._initialized = False

    async def _safe(self, op: str, key: str, call: Callable[[], Awaitable[Any]], default: Any) -> Any:
        if not self._initialized:
            return default
        try:
            return await call()
        except redis.RedisError as e:
            logger.error("Redis command failed", op=op, key=key[:40], error=str(e))
            return default

    async def ping(self) -> bool:
        return bool(await self._safe("PING", "", lambda: self.client.ping(), False))

    async def get(self, key: str) -> str | None:
        return await self._safe("GET", key, lambda: self.client.get(key), None) or None

    async def set_with_ttl(self, key: str, value: str, ttl_s: int | None = None) -> bool:
        if ttl_s:
            result = await self._safe("SETEX", key, lambda: self.client.setex(key, ttl_s, value), False)
        else:
            result = await self._safe("SET", key, lambda: self.client.set(key, value), False)
        return bool(result)


fast_redis = FastRedisClient(settings.REDIS_URL)
