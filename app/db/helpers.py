# app/db/helpers.py
"""
Query helpers used by the repositories.

Each helper runs on the caller's connection when one is passed (so several
statements share a transaction) and otherwise borrows one from the pool.
psycopg errors surface as DatabaseError, which the API renders as a 500.
"""

import asyncio
import functools
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg

from app.db.pool import get_db_connection
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DatabaseError(Exception):
    """A query failed. `recoverable` marks connection-level failures worth retrying."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


@asynccontextmanager
async def _cursor(
    operation: str, query: str, connection: psycopg.AsyncConnection | None
) -> AsyncGenerator[psycopg.AsyncCursor, None]:
    try:
        if connection is not None:
            async with connection.cursor() as cur:
                yield cur
        else:
            async with await get_db_connection() as conn:
                async with conn.cursor() as cur:
                    yield cur
    except psycopg.Error as e:
        logger.error("Database query failed", operation=operation, query=query[:100], error=str(e))
        raise DatabaseError(
            f"Query failed: {e}",
            operation=operation,
            recoverable=isinstance(e, psycopg.OperationalError),
        ) from e


async def fetch_one(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> dict[str, Any] | None:
    """First row as a dict, or None."""
    async with _cursor("fetch_one", query, connection) as cur:
        await cur.execute(query, params)
        return await cur.fetchone()


async def fetch_all(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> list[dict[str, Any]]:
    async with _cursor("fetch_all", query, connection) as cur:
        await cur.execute(query, params)
        return await cur.fetchall()


async def fetch_val(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> Any:
    """First column of the first row, or None."""
    async with _cursor("fetch_val", query, connection) as cur:
        await cur.execute(query, params)
        row = await cur.fetchone()
        return next(iter(row.values())) if row else None


async def execute_query(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> int:
    """Run a statement and return the affected row count."""
    async with _cursor("execute", query, connection) as cur:
        await cur.execute(query, params)
        return cur.rowcount


def with_db_retry(max_retries: int = 2, base_delay: float = 0.1):
    """
    Retry a read on recoverable DatabaseErrors with exponential backoff.

    Only wrap idempotent reads; constraint or data errors are raised at once.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except DatabaseError as e:
                    if not e.recoverable or attempt == max_retries:
                        raise
                    delay = base_delay * (2**attempt)
                    logger.warning(
                        "Database read failed, retrying",
                        operation=func.__name__,
                        attempt=attempt + 1,
                        delay=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
