"""
Dialer routes: today's queue, call logging, skips and stats.
"""

from fastapi import APIRouter, Depends

from app.auth.verify import auth_dependency
from app.core.clock import today_local
from app.features.dialer.calls import call_log_service
from app.features.dialer.ledger import ledger_service
from app.features.dialer.queue import queue_scoring_service
from app.models.api.dialer_request import LogCallRequest, SkipRequest
from app.models.api.dialer_response import (
    LogCallResponse,
    QueueEntryResponse,
    QueueResponse,
    SkipResponse,
    StatsResponse,
)

router = APIRouter(
    prefix="/api/dialer",
    tags=["dialer"],
    dependencies=[Depends(auth_dependency)],
)


@router.get("/queue", response_model=QueueResponse)
async def get_queue():
    """Today's ordered queue, built on the first request of the day."""
    entries = await queue_scoring_service.build_daily_queue(today_local())
    return QueueResponse(queue=[QueueEntryResponse.from_entry(e) for e in entries])


@router.post("/queue/rescore", response_model=QueueResponse)
async def rescore_queue():
    """Refresh today's queue from the CRMs; called and skipped entries keep their state."""
    entries = await queue_scoring_service.build_daily_queue(today_local(), force_rescore=True)
    return QueueResponse(queue=[QueueEntryResponse.from_entry(e) for e in entries])


@router.post("/log", response_model=LogCallResponse)
async def log_call(body: LogCallRequest):
    result = await call_log_service.log_call(
        body.queue_id,
        body.outcome,
        today_local(),
        pledge_amount=body.pledge_amount,
    )
    return LogCallResponse.from_result(result)


@router.post("/skip", response_model=SkipResponse)
async def skip(body: SkipRequest):
    """Move an entry to the end of today's queue."""
    await queue_scoring_service.skip_entry(body.queue_id)
    return SkipResponse()


@router.get("/stats", response_model=StatsResponse)
async def get_stats():
    snapshot = await ledger_service.get_snapshot(today_local())
    return StatsResponse.from_snapshot(snapshot)
