"""
Error taxonomy for the dialer.

Services raise these; the API layer turns them into `{"error": ...}`
responses with the matching status code (see app.main).
"""

from fastapi import status


class DialerError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation


class ValidationError(DialerError):
    """A required request field is missing or malformed. Nothing was mutated."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(DialerError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(DialerError):
    status_code = status.HTTP_404_NOT_FOUND


class UpstreamUnavailableError(DialerError):
    """External CRM unreachable or returned a non-2xx response."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(
        self,
        message: str,
        service: str,
        status_code: int | None = None,
        operation: str | None = None,
    ):
        super().__init__(message, operation=operation)
        self.service = service
        self.upstream_status = status_code


class InternalError(DialerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
