"""
OnePage CRM client.
Source of donor contacts and recent notes, and the place call outcomes are logged.
"""

from datetime import date

import httpx

from app.config import settings
from app.core.errors import UpstreamUnavailableError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.donor_domain import CallNote, Contact, parse_crm_date

from .base_client import CrmHttpClient

logger = get_logger(__name__)

CONTACTS_PER_PAGE = 100
MAX_CONTACT_PAGES = 50


class OnePageClient(CrmHttpClient):
    """Thin async wrapper over the OnePage v3 REST API."""

    service_name = "onepage"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        auth = None
        if settings.onepage_configured():
            auth = httpx.BasicAuth(settings.ONEPAGE_USER_ID, settings.ONEPAGE_API_KEY)
        super().__init__(settings.ONEPAGE_BASE_URL, auth=auth, transport=transport)

    async def fetch_donor_contacts(self, tag: str | None = None) -> list[Contact]:
        """
        Fetch every contact carrying the donor tag, following pagination.

        A failed page ends pagination; contacts gathered so far are returned.
        """
        tag_name = tag or settings.ONEPAGE_DONOR_TAG
        contacts: list[Contact] = []

        for page in range(1, MAX_CONTACT_PAGES + 1):
            try:
                data = await self._request_json(
                    "GET",
                    "/contacts",
                    params={"tag_names[]": tag_name, "per_page": CONTACTS_PER_PAGE, "page": page},
                )
            except UpstreamUnavailableError as e:
                logger.error(
                    "OnePage contact page failed",
                    page=page,
                    fetched_so_far=len(contacts),
                    error=str(e),
                )
                break

            items = (data.get("data") or {}).get("contacts") or []
            if not items:
                break

            for item in items:
                raw = item.get("contact") or item
                if raw.get("id"):
                    contacts.append(Contact.from_api(raw))

            if len(items) < CONTACTS_PER_PAGE:
                break

        logger.info("OnePage donor contacts fetched", tag=tag_name, count=len(contacts))
        return contacts

    async def fetch_recent_notes(self, contact_id: str, limit: int = 3) -> list[CallNote]:
        """Most recent notes and logged calls for a contact, newest first."""
        notes: list[CallNote] = []

        notes_data = await self._request_json(
            "GET", "/notes", params={"contact_id": contact_id, "per_page": limit}
        )
        for item in (notes_data.get("data") or {}).get("notes") or []:
            raw = item.get("note") or item
            text = (raw.get("text") or "").strip()
            if text:
                notes.append(
                    CallNote(
                        id=str(raw.get("id", "")),
                        text=text,
                        created_at=parse_crm_date(raw.get("date") or raw.get("created_at")),
                        kind="note",
                    )
                )

        calls_data = await self._request_json(
            "GET", "/calls", params={"contact_id": contact_id, "per_page": limit}
        )
        for item in (calls_data.get("data") or {}).get("calls") or []:
            raw = item.get("call") or item
            text = (raw.get("text") or "").strip()
            if text:
                notes.append(
                    CallNote(
                        id=str(raw.get("id", "")),
                        text=text,
                        created_at=parse_crm_date(raw.get("date") or raw.get("created_at")),
                        kind="call",
                    )
                )

        notes.sort(key=lambda note: note.created_at or date.min, reverse=True)
        return notes[:limit]

    async def log_call(
        self, contact_id: str, text: str, call_result: str, call_date: date
    ) -> bool:
        """Record a call against the contact. Returns True on a 2xx response."""
        response = await self._request_with_retry(
            "POST",
            "/calls",
            json={
                "contact_id": contact_id,
                "text": text,
                "call_result": call_result,
                "date": call_date.isoformat(),
            },
        )
        if not response.is_success:
            logger.warning(
                "OnePage call log rejected",
                contact_id=contact_id,
                status_code=response.status_code,
            )
        return response.is_success
