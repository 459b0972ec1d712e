# app/db/pool.py
"""
Process-wide psycopg AsyncConnectionPool for the dialer tables.

Connections hand back dict rows, run in UTC and autocommit unless a
transaction is opened through `get_db_transaction()`.
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

STATEMENT_TIMEOUT = "30s"
CLOSE_TIMEOUT_S = 30.0


class DatabasePoolManager:
    """Owns the pool: open on startup, hand out connections, close on shutdown."""

    def __init__(self):
        self.pool: AsyncConnectionPool | None = None
        self._initialized = False
        self._closed = False

    @property
    def ready(self) -> bool:
        return self._initialized and not self._closed

    async def initialize(self) -> None:
        if self._initialized:
            logger.warning("Database pool already initialized")
            return
        if self._closed:
            raise RuntimeError("Cannot reinitialize closed pool")

        config = settings.get_db_pool_config()
        self.pool = AsyncConnectionPool(
            conninfo=settings.DATABASE_URL,
            open=False,
            check=AsyncConnectionPool.check_connection,
            configure=self._configure_connection,
            **config,
        )

        try:
            await self.pool.open(wait=True)
            self._initialized = True
            await self._ping()
        except Exception as e:
            logger.error("Failed to initialize database pool", error=str(e))
            self._initialized = False
            await self.pool.close()
            self.pool = None
            raise RuntimeError(f"Database pool initialization failed: {e}") from e

        logger.info(
            "Database pool ready",
            min_size=config["min_size"],
            max_size=config["max_size"],
            timeout=config["timeout"],
        )

    async def _configure_connection(self, conn: psycopg.AsyncConnection) -> None:
        conn.row_factory = dict_row
        await conn.set_autocommit(True)
        app_name = f"fc-dialer-{settings.environment}"
        await conn.execute(sql.SQL("SET application_name = {}").format(sql.Literal(app_name)))
        await conn.execute("SET timezone = 'UTC'")
        await conn.execute(
            sql.SQL("SET statement_timeout = {}").format(sql.Literal(STATEMENT_TIMEOUT))
        )

    async def _ping(self) -> float:
        """Round-trip a trivial query; returns latency in milliseconds."""
        started = time.time()
        async with self.connection() as conn:
            cursor = await conn.execute("SELECT 1 AS ok")
            row = await cursor.fetchone()
        if not row or row["ok"] != 1:
            raise RuntimeError("Database ping returned an unexpected row")
        return (time.time() - started) * 1000

    async def close(self) -> None:
        if not self._initialized or self._closed:
            return
        try:
            await asyncio.wait_for(self.pool.close(), timeout=CLOSE_TIMEOUT_S)
            logger.info("Database pool closed")
        except TimeoutError:
            logger.warning("Database pool close timed out")
        finally:
            self._initialized = False
            self._closed = True

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        if not self._initialized:
            raise RuntimeError("Database pool not initialized. Call initialize() first.")
        if self._closed:
            raise RuntimeError("Database pool is closed")

        async with self.pool.connection() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Commit on clean exit, roll back if the block raises."""
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def health_check(self) -> dict[str, Any]:
        if not self.ready:
            return {"healthy": False, "error": "Pool not initialized or closed"}

        try:
            latency_ms = await self._ping()
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {"healthy": False, "error": f"{type(e).__name__}: {e}"}

        stats = self.pool.get_stats()
        return {
            "healthy": True,
            "latency_ms": round(latency_ms, 1),
            "pool_stats": {
                "pool_size": stats.get("pool_size", 0),
                "pool_available": stats.get("pool_available", 0),
                "requests_waiting": stats.get("requests_waiting", 0),
            },
        }


db_pool = DatabasePoolManager()


async def get_db_connection():
    """Pooled connection in autocommit mode. Use as `async with await get_db_connection()`."""
    return db_pool.connection()


async def get_db_transaction():
    """Pooled connection inside a transaction. Use as `async with await get_db_transaction()`."""
    return db_pool.transaction()


async def db_health_check() -> dict[str, Any]:
    return await db_pool.health_check()
