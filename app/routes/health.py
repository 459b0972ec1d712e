# app/routes/health.py
"""
Liveness and readiness endpoints.
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.config import settings
from app.db.pool import db_health_check
from app.services.background_tasks import background_tasks
from app.services.redis_client import fast_redis

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "fc-dialer"}


@router.get("/readyz")
async def readyz():
    """
    Readiness check covering the database pool, the optional Redis cache
    and CRM configuration. Returns 503 when the database is not usable.
    """
    checks = {}
    overall_ok = True

    # 1) Database pool
    t0 = time.time()
    try:
        db_health = await db_health_check()
        is_healthy = db_health.get("healthy", False)

        checks["database"] = {
            "ok": is_healthy,
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        if "pool_stats" in db_health:
            pool_stats = db_health["pool_stats"]
            checks["database"].update(
                {
                    "pool_size": pool_stats.get("pool_size", 0),
                    "pool_available": pool_stats.get("pool_available", 0),
                }
            )
        if not is_healthy:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")

        overall_ok = overall_ok and is_healthy

    except Exception as e:
        checks["database"] = {
            "ok": False,
            "error": f"{type(e).__name__}: {e}",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        overall_ok = False

    # 2) Redis is a cache; report it but never fail readiness on it
    if fast_redis.enabled:
        t0 = time.time()
        redis_ok = await fast_redis.ping()
        checks["redis"] = {"ok": redis_ok, "latency_ms": round((time.time() - t0) * 1000, 1)}
    else:
        checks["redis"] = {"ok": True, "enabled": False}

    # 3) CRMs degrade to empty data when unconfigured
    checks["crm"] = {
        "onepage_configured": settings.onepage_configured(),
        "neon_configured": settings.neon_configured(),
    }
    checks["background_tasks"] = {"pending": background_tasks.pending}

    body = {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
    return JSONResponse(body, status_code=200 if overall_ok else 503)
