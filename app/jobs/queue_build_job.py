"""
Queue build job - pre-builds today's call queue outside the request path.

Run it shortly before the calling shift so the first GET /api/dialer/queue
is served from storage:

    python -m app.jobs.worker build_queue
    python -m app.jobs.worker rescore_queue   # refresh presentation fields

Re-running on the same day is safe; entries already called or skipped
keep their state.
"""

from app.core.clock import today_local
from app.db.pool import db_pool
from app.db.schema import ensure_schema
from app.features.dialer.queue import queue_scoring_service
from app.infrastructure.observability.logging import get_logger
from app.services.crm import donor_gateway
from app.services.redis_client import fast_redis

logger = get_logger(__name__)


async def run_queue_build(force_rescore: bool = False) -> int:
    """Build (or re-score) today's queue and return its size."""
    await db_pool.initialize()
    try:
        await ensure_schema()
        if fast_redis.enabled:
            await fast_redis.initialize()

        today = today_local()
        entries = await queue_scoring_service.build_daily_queue(today, force_rescore=force_rescore)
        logger.info("Queue build job finished", date=str(today), entries=len(entries))
        return len(entries)
    finally:
        await donor_gateway.close()
        await fast_redis.close()
        await db_pool.close()


async def run_queue_rescore() -> int:
    return await run_queue_build(force_rescore=True)
