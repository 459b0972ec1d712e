"""
verify.py
---------
Purpose:
    Session tokens for the dialer team (HS256, PyJWT).

Notes:
    - POST /api/auth issues a token into the `dialer_session` cookie.
    - `auth_dependency` accepts the cookie or an `Authorization: Bearer` header.
    - Raises UnauthorizedError, rendered by the app-level handler.
"""

from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.core.errors import UnauthorizedError

SESSION_ALGORITHM = "HS256"
SESSION_SUBJECT = "dialer"

_security = HTTPBearer(auto_error=False)


def issue_session_token(now: datetime | None = None) -> str:
    issued_at = now or datetime.now(UTC)
    payload = {
        "sub": SESSION_SUBJECT,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.SESSION_MAX_AGE_DAYS),
    }
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=SESSION_ALGORITHM)


def verify_jwt(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.SESSION_SECRET,
            algorithms=[SESSION_ALGORITHM],
            options={"verify_exp": True},
        )
    except jwt.PyJWTError as e:
        raise UnauthorizedError(f"Invalid session: {e}", operation="verify_session") from e


def auth_dependency(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> dict:
    token = credentials.credentials if credentials else request.cookies.get(
        settings.SESSION_COOKIE_NAME
    )
    if not token:
        raise UnauthorizedError("Unauthorized", operation="verify_session")
    return verify_jwt(token)
