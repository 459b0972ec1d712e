"""
Command-line runner for the dialer's scheduled jobs.

    fc-dialer-worker build_queue
    WORKER_JOB=rescore_queue fc-dialer-worker

The job name comes from the first CLI argument, then WORKER_JOB, then
defaults to build_queue.
"""

import asyncio
import os
import sys
import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from app.config import settings
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.jobs.queue_build_job import run_queue_build, run_queue_rescore

logger = get_logger(__name__)

DEFAULT_JOB = "build_queue"

JobCoroutine = Callable[[], Awaitable[Any]]

JOB_REGISTRY: dict[str, JobCoroutine] = {
    "build_queue": run_queue_build,
    "rescore_queue": run_queue_rescore,
}


def _resolve_job_name(argv: list[str] | None = None) -> str:
    args = sys.argv[1:] if argv is None else argv
    name = args[0] if args else os.getenv("WORKER_JOB", DEFAULT_JOB)
    return name.strip().lower()


async def run_worker(job_name: str | None = None) -> Any:
    """Run one registered job and return its result. Unknown names raise ValueError."""
    name = (job_name or _resolve_job_name()).strip().lower()
    job = JOB_REGISTRY.get(name)
    if job is None:
        raise ValueError(f"Unknown worker job '{name}'. Available jobs: {', '.join(sorted(JOB_REGISTRY))}")

    structlog.contextvars.bind_contextvars(job=name)
    started = time.monotonic()
    try:
        result = await job()
    finally:
        duration_s = round(time.monotonic() - started, 2)
        structlog.contextvars.unbind_contextvars("job")
    logger.info("Worker job finished", job=name, result=result, duration_s=duration_s)
    return result


def main() -> None:
    setup_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    try:
        asyncio.run(run_worker(_resolve_job_name()))
    except ValueError as e:
        logger.error("Worker not started", error=str(e))
        sys.exit(2)


if __name__ == "__main__":
    main()
