"""
Neon CRM client.
Looks up donor accounts by name and summarises their donation history; also
totals donations inside a date window for season progress.
"""

from datetime import date
from typing import Any

import httpx

from app.config import settings
from app.core.errors import UpstreamUnavailableError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.donor_domain import DonationInfo, parse_crm_date

from .base_client import CrmHttpClient

logger = get_logger(__name__)

DONATIONS_PAGE_SIZE = 100
SEASON_SEARCH_PAGE_SIZE = 200


def _amount(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _nested_name(value: Any) -> str | None:
    """`{"name": ...}` objects give their name; bare strings are the name itself."""
    if isinstance(value, dict):
        return value.get("name")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def summarize_donations(donations: list[dict[str, Any]], account_id: str | None) -> DonationInfo:
    """
    Collapse a donor's raw Neon donations into a DonationInfo.

    Lifetime giving and count cover every donation; campaign, fund, tribute
    and note come from the most recent dated gift.
    """
    info = DonationInfo.empty(neon_account_id=account_id)
    info.donation_count = len(donations)

    for donation in donations:
        amount = _amount(donation.get("amount"))
        info.lifetime_giving += amount

        gift_date = parse_crm_date(donation.get("date") or donation.get("donationDate"))
        if gift_date is None:
            continue
        if info.last_gift_date is not None and gift_date <= info.last_gift_date:
            continue

        info.last_gift_date = gift_date
        info.last_gift_amount = amount
        info.last_campaign = _nested_name(donation.get("campaign")) or donation.get(
            "campaignName"
        )
        info.last_fund = _nested_name(donation.get("fund")) or donation.get("fundName")

        tribute = donation.get("tribute")
        if isinstance(tribute, dict):
            info.tribute_type = tribute.get("tributeType") or tribute.get("type")
            info.tribute_name = tribute.get("tributeName") or tribute.get("name")
        else:
            info.tribute_type = donation.get("tributeType")
            info.tribute_name = donation.get("tributeName") or _nested_name(tribute)

        info.last_donation_note = donation.get("note") or donation.get("notes")

    return info


class NeonClient(CrmHttpClient):
    """Thin async wrapper over the Neon CRM v2 REST API."""

    service_name = "neon"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        auth = None
        if settings.neon_configured():
            auth = httpx.BasicAuth(settings.NEON_CRM_ORG_ID, settings.NEON_CRM_API_KEY)
        super().__init__(settings.NEON_CRM_BASE_URL, auth=auth, transport=transport)

    async def find_account_id(self, name: str) -> str | None:
        """Best name match in Neon accounts (first name / rest as last name)."""
        parts = name.split()
        first_name = parts[0] if parts else ""
        last_name = " ".join(parts[1:])

        data = await self._request_json(
            "POST",
            "/accounts/search",
            json={
                "searchFields": [
                    {"field": "First Name", "operator": "CONTAIN", "value": first_name},
                    {"field": "Last Name", "operator": "CONTAIN", "value": last_name},
                ],
                "outputFields": ["Account ID", "First Name", "Last Name"],
                "pagination": {"currentPage": 0, "pageSize": 5},
            },
        )
        results = data.get("searchResults") or []
        if not results:
            return None
        account_id = results[0].get("Account ID")
        return str(account_id) if account_id is not None else None

    async def get_donation_history(self, name: str) -> DonationInfo:
        """
        Donation summary for the donor with this name.

        Raises UpstreamUnavailableError on transport or HTTP failure; an unknown
        donor yields an empty DonationInfo.
        """
        account_id = await self.find_account_id(name)
        if account_id is None:
            return DonationInfo.empty()

        try:
            data = await self._request_json(
                "GET",
                f"/accounts/{account_id}/donations",
                params={"page": 0, "pageSize": DONATIONS_PAGE_SIZE},
            )
        except UpstreamUnavailableError as e:
            logger.warning(
                "Neon donations lookup failed", neon_account_id=account_id, error=str(e)
            )
            return DonationInfo.empty(neon_account_id=account_id)

        return summarize_donations(data.get("donations") or [], account_id)

    async def sum_donations_between(self, start: date, end: date) -> float:
        """Total donation amount dated within [start, end]."""
        try:
            data = await self._request_json("GET", "/donations")
        except UpstreamUnavailableError:
            logger.info("Neon donations list unavailable, falling back to search")
            return await self._search_donation_total(start, end)

        raised = 0.0
        for donation in data.get("donations") or []:
            donation_date = parse_crm_date(donation.get("donationDate") or donation.get("date"))
            if donation_date and start <= donation_date <= end:
                raised += _amount(donation.get("donationAmount") or donation.get("amount"))
        return raised

    async def _search_donation_total(self, start: date, end: date) -> float:
        data = await self._request_json(
            "POST",
            "/donations/search",
            json={
                "searchFields": [
                    {
                        "field": "Donation Date",
                        "operator": "GREATER_AND_EQUAL",
                        "value": start.isoformat(),
                    },
                    {
                        "field": "Donation Date",
                        "operator": "LESS_AND_EQUAL",
                        "value": end.isoformat(),
                    },
                ],
                "outputFields": ["Donation Amount", "Donation Date"],
                "pagination": {"currentPage": 1, "pageSize": SEASON_SEARCH_PAGE_SIZE},
            },
        )
        return sum(_amount(row.get("Donation Amount")) for row in data.get("searchResults") or [])
