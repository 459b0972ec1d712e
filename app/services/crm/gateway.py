"""
Donor data gateway.

One facade over OnePage (contacts, notes, call logging) and Neon (donations)
with the degradation rules the dialer relies on: lookups never raise, they
return empty data and log.
"""

import json
from datetime import date

from app.config import settings
from app.core.errors import UpstreamUnavailableError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.donor_domain import CallNote, Contact, DonationInfo
from app.services.redis_client import FastRedisClient, fast_redis

from .neon_client import NeonClient
from .onepage_client import OnePageClient

logger = get_logger(__name__)

DONATION_CACHE_PREFIX = "dialer:donations:v1:"


class DonorDataGateway:
    def __init__(
        self,
        onepage: OnePageClient | None = None,
        neon: NeonClient | None = None,
        cache: FastRedisClient | None = None,
    ):
        self.onepage = onepage or OnePageClient()
        self.neon = neon or NeonClient()
        self.cache = cache or fast_redis

    async def close(self) -> None:
        await self.onepage.close()
        await self.neon.close()

    async def fetch_contacts(self) -> list[Contact]:
        """All donor-tagged contacts, or [] when OnePage is unavailable."""
        if not settings.onepage_configured():
            logger.warning("OnePage credentials missing, no contacts fetched")
            return []
        try:
            return await self.onepage.fetch_donor_contacts()
        except UpstreamUnavailableError as e:
            logger.error("OnePage contacts unavailable", error=str(e))
            return []

    async def fetch_donation_history(self, name: str) -> DonationInfo:
        """Donation summary for a donor name; empty on any failure."""
        if not name or not settings.neon_configured():
            return DonationInfo.empty()

        cache_key = f"{DONATION_CACHE_PREFIX}{name.strip().lower()}"
        cached = await self.cache.get(cache_key)
        if cached:
            try:
                return DonationInfo.from_cache(json.loads(cached))
            except (ValueError, TypeError) as e:
                logger.warning("Discarding unreadable donation cache entry", error=str(e))

        try:
            info = await self.neon.get_donation_history(name)
        except UpstreamUnavailableError as e:
            logger.warning("Neon donation history unavailable", error=str(e))
            return DonationInfo.empty()
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(
                "Unreadable Neon donation history",
                error=str(e),
                error_type=type(e).__name__,
            )
            return DonationInfo.empty()

        await self.cache.set_with_ttl(
            cache_key, json.dumps(info.to_cache()), settings.DONATION_CACHE_TTL_S
        )
        return info

    async def fetch_recent_notes(self, contact_id: str) -> list[CallNote]:
        """Newest notes/calls for a contact; [] on any failure."""
        if not settings.onepage_configured():
            return []
        try:
            return await self.onepage.fetch_recent_notes(contact_id)
        except UpstreamUnavailableError as e:
            logger.warning("OnePage notes unavailable", contact_id=contact_id, error=str(e))
            return []

    async def log_outcome(
        self, contact_id: str, text: str, result_code: str, call_date: date | None = None
    ) -> bool:
        """
        Log a call outcome to OnePage.

        Meant to run detached from the request; failures raise so the
        background runner can record them.
        """
        if not settings.onepage_configured():
            logger.info("OnePage credentials missing, call not logged", contact_id=contact_id)
            return False
        return await self.onepage.log_call(
            contact_id, text, result_code, call_date or date.today()
        )

    async def sum_donations_between(self, start: date, end: date) -> float:
        """Total raised in the window. Raises UpstreamUnavailableError."""
        if not settings.neon_configured():
            raise UpstreamUnavailableError("Neon CRM credentials missing", service="neon")
        return await self.neon.sum_donations_between(start, end)


donor_gateway = DonorDataGateway()
