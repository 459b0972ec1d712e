"""
structlog configuration shared by the API process and the worker.

Every line carries the service name, the level, the logger name and an ISO
timestamp, plus whatever the request middleware or a job bound into the
contextvars (request_id, queue date, job name).
"""

import logging
import sys

import structlog
from structlog.stdlib import LoggerFactory

SERVICE_NAME = "fc-dialer"

# Third-party loggers that drown out dialer events at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "psycopg.pool", "uvicorn.access")


def _add_service(_, __, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: JSON lines when True, the structlog dev console otherwise
    """
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """One access line per request; 4xx/5xx at warning so they stand out."""
    logger = get_logger("http")
    log = logger.warning if status_code >= 400 else logger.info
    log(
        "Request handled",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=round(duration_ms, 1),
    )
