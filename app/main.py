# app/main.py
"""
FastAPI application: lifecycle of the database pool, Redis cache, CRM
clients and background task runner, plus error rendering.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.errors import DialerError, InternalError
from app.db.helpers import DatabaseError
from app.db.pool import db_pool
from app.db.schema import ensure_schema
from app.features.dialer.api.router import router as dialer_router
from app.features.gamification.api.router import router as gamification_router
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.middleware import RequestContextMiddleware
from app.routes import auth, health
from app.services.background_tasks import background_tasks
from app.services.crm import donor_gateway
from app.services.redis_client import fast_redis

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    startup_tasks = []

    try:
        logger.info("Initializing database pool")
        await db_pool.initialize()
        startup_tasks.append("database_pool")

        await ensure_schema()
        startup_tasks.append("schema")

        if fast_redis.enabled:
            logger.info("Initializing Redis connection")
            await fast_redis.initialize()
            startup_tasks.append("redis")

        logger.info(
            "All services initialized successfully",
            services=startup_tasks,
            onepage_configured=settings.onepage_configured(),
            neon_configured=settings.neon_configured(),
        )

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e), completed_tasks=startup_tasks)

        # Clean up any successfully initialized services in reverse order
        if "redis" in startup_tasks:
            try:
                await fast_redis.close()
            except Exception as cleanup_error:
                logger.error("Error cleaning up Redis", error=str(cleanup_error))

        if "database_pool" in startup_tasks:
            try:
                await db_pool.close()
            except Exception as cleanup_error:
                logger.error("Error cleaning up database pool", error=str(cleanup_error))

        raise

    yield

    # Shutdown sequence (reverse order)
    logger.info("Application shutting down")

    shutdown_errors = []

    # Let detached CRM writes finish before their HTTP clients close
    try:
        await background_tasks.drain()
    except Exception as e:
        logger.error("Error draining background tasks", error=str(e))
        shutdown_errors.append(f"Background tasks: {e}")

    try:
        await donor_gateway.close()
    except Exception as e:
        logger.error("Error closing CRM clients", error=str(e))
        shutdown_errors.append(f"CRM: {e}")

    try:
        logger.info("Closing Redis connection")
        await fast_redis.close()
    except Exception as e:
        logger.error("Error closing Redis", error=str(e))
        shutdown_errors.append(f"Redis: {e}")

    # Close database pool last (may have active connections)
    try:
        logger.info("Closing database pool")
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))
        shutdown_errors.append(f"Database: {e}")

    if shutdown_errors:
        logger.warning("Some services had shutdown errors", errors=shutdown_errors)
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="FC Dialer",
    description="Gamified donor calling queue with CRM integration",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(dialer_router)
app.include_router(gamification_router)


@app.exception_handler(DialerError)
async def dialer_error_handler(request: Request, exc: DialerError):
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.message,
        error_type=type(exc).__name__,
        operation=exc.operation,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _internal_error_response() -> JSONResponse:
    error = InternalError("Internal server error")
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError):
    logger.error(
        "Database error",
        path=request.url.path,
        operation=exc.operation,
        recoverable=exc.recoverable,
        error=str(exc),
    )
    return _internal_error_response()


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    fields = sorted({str(err["loc"][-1]) for err in errors if err.get("loc")})
    message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
    logger.warning("Request validation failed", path=request.url.path, fields=fields)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return _internal_error_response()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
