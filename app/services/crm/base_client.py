"""
Shared async HTTP plumbing for the CRM clients.
Handles client construction, timeouts, retry with backoff and response checks.
"""

import asyncio
from typing import Any

import httpx

from app.config import settings
from app.core.errors import UpstreamUnavailableError
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

MAX_RETRIES = 2
BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


class CrmHttpClient:
    """
    Base class for CRM API clients.

    Subclasses set `service_name` and `base_url` and pass credentials as
    httpx basic auth.
    """

    service_name = "crm"

    def __init__(
        self,
        base_url: str,
        auth: httpx.Auth | tuple[str, str] | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            timeout=httpx.Timeout(timeout or settings.CRM_REQUEST_TIMEOUT),
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request_with_retry(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with retry and backoff."""
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
                if response.status_code in RETRY_STATUS_CODES and attempt < MAX_RETRIES:
                    backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                    logger.debug(
                        "CRM API retrying request",
                        service=self.service_name,
                        attempt=attempt,
                        status_code=response.status_code,
                        backoff_seconds=backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                return response
            except httpx.RequestError as e:
                if attempt >= MAX_RETRIES:
                    raise UpstreamUnavailableError(
                        f"{self.service_name} unreachable: {e}",
                        service=self.service_name,
                        operation=url,
                    ) from e
                backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                logger.debug(
                    "CRM API request error, retrying",
                    service=self.service_name,
                    attempt=attempt,
                    error=str(e),
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
        raise RuntimeError("CRM API retry loop exhausted")

    async def _request_json(self, method: str, url: str, **kwargs) -> dict[str, Any]:
        """Perform a request and return the decoded JSON body, raising on non-2xx."""
        response = await self._request_with_retry(method, url, **kwargs)

        if not response.is_success:
            logger.warning(
                "CRM API request failed",
                service=self.service_name,
                url=url,
                status_code=response.status_code,
                response_text=response.text[:200] if response.text else "",
            )
            raise UpstreamUnavailableError(
                f"{self.service_name} returned HTTP {response.status_code}",
                service=self.service_name,
                status_code=response.status_code,
                operation=url,
            )

        try:
            return response.json() if response.text else {}
        except ValueError as e:
            raise UpstreamUnavailableError(
                f"{self.service_name} returned invalid JSON",
                service=self.service_name,
                status_code=response.status_code,
                operation=url,
            ) from e
