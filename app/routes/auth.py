"""
Auth route: exchanges the shared team password for a session cookie.
"""

import hmac

from fastapi import APIRouter, Response

from app.auth.verify import issue_session_token
from app.config import settings
from app.core.errors import UnauthorizedError
from app.infrastructure.observability.logging import get_logger
from app.models.api.auth_request import LoginRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/auth")
async def login(body: LoginRequest, response: Response) -> dict:
    """Set the session cookie when the password matches APP_PASSWORD."""
    expected = settings.APP_PASSWORD
    if not expected or not hmac.compare_digest(body.password.encode(), expected.encode()):
        logger.warning("Login rejected")
        raise UnauthorizedError("Wrong password", operation="login")

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=issue_session_token(),
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        max_age=settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60,
        path="/",
    )
    logger.info("Login accepted")
    return {"success": True}
