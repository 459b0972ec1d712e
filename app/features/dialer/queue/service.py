"""
Daily call queue scoring - ranks donor contacts and persists today's queue.
"""

from __future__ import annotations

import asyncio
import math
from datetime import date

from app.config import settings
from app.core.errors import NotFoundError
from app.features.dialer.domain import QueueEntry, ScoredContact
from app.infrastructure.observability.logging import get_logger
from app.models.domain.donor_domain import (
    TRIBUTE_IN_MEMORY,
    Contact,
    DonationInfo,
)
from app.services.crm import DonorDataGateway, donor_gateway

from .repository import QueueRepository

logger = get_logger(__name__)

# "Days since" for a date we never saw; ranks as maximally stale
NEVER_DAYS = 9999
CONTEXT_SEPARATOR = " · "
NO_HISTORY = "No prior history."
CALL_NOTE_MAX_CHARS = 80
ASK_UPLIFT = 1.15


def days_since(value: date | None, today: date) -> int:
    if value is None:
        return NEVER_DAYS
    return max((today - value).days, 0)


def months_ago(value: date, today: date) -> str:
    months = days_since(value, today) // 30
    if months == 0:
        return "this month"
    if months == 1:
        return "1 month ago"
    return f"{months} months ago"


def round_to_ten(amount: float) -> int:
    """Nearest multiple of ten, halves rounding up."""
    return int(math.floor(amount / 10 + 0.5)) * 10


def format_money(amount: float) -> str:
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def truncate(text: str, limit: int = CALL_NOTE_MAX_CHARS) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def calculate_suggested_ask(
    last_gift_amount: float | None,
    lifetime_giving: float,
    default: int | None = None,
) -> int:
    if last_gift_amount and last_gift_amount > 0:
        return round_to_ten(last_gift_amount * ASK_UPLIFT)
    if lifetime_giving > 0:
        return round_to_ten(lifetime_giving / 2)
    return settings.DEFAULT_SUGGESTED_ASK if default is None else default


def build_context_line(
    donation: DonationInfo,
    last_contacted: date | None,
    last_call_note: str | None,
    today: date,
) -> str:
    parts: list[str] = []

    if donation.last_gift_amount and donation.last_gift_date:
        gift = (
            f"Gave {format_money(donation.last_gift_amount)} "
            f"{months_ago(donation.last_gift_date, today)}"
        )
        if donation.last_campaign:
            gift += f" ({donation.last_campaign})"
        parts.append(gift)

    if donation.has_tribute:
        label = "In memory of" if donation.tribute_type == TRIBUTE_IN_MEMORY else "In honor of"
        parts.append(f"{label} {donation.tribute_name}" if donation.tribute_name else label)

    if donation.lifetime_giving > 0:
        lifetime = f"{format_money(donation.lifetime_giving)} lifetime"
        if donation.donation_count:
            noun = "gift" if donation.donation_count == 1 else "gifts"
            lifetime += f" ({donation.donation_count} {noun})"
        parts.append(lifetime)

    if last_contacted:
        days = days_since(last_contacted, today)
        if days > 0:
            parts.append(f"Last contacted {days} days ago")

    if last_call_note:
        parts.append(f'Last note: "{truncate(last_call_note)}"')

    return CONTEXT_SEPARATOR.join(parts) if parts else NO_HISTORY


def score_contact(
    contact: Contact,
    donation: DonationInfo,
    today: date,
    *,
    tribute_bonus: bool = True,
    new_contact_bonus: bool = True,
) -> float:
    """Point-additive priority; higher is called sooner."""
    days_since_contact = days_since(contact.last_contacted, today)
    days_since_gift = days_since(donation.last_gift_date, today)

    score = 0.0

    # Lapsed warm donor
    if donation.lifetime_giving > 200 and days_since_contact > 60:
        score += 100

    if days_since_contact > 90:
        score += 50

    if new_contact_bonus and contact.created_at and days_since(contact.created_at, today) < 30:
        score += 30

    if tribute_bonus and donation.has_tribute:
        score += 40

    score += min(days_since_gift / 10, 30)
    score += min(donation.lifetime_giving / 100, 20)
    score += min(days_since_contact / 10, 20)
    return score


class QueueScoringService:
    """Builds the day's call queue once and serves it from storage afterwards."""

    def __init__(
        self,
        gateway: DonorDataGateway | None = None,
        repository: type[QueueRepository] = QueueRepository,
    ):
        self._gateway = gateway
        self.repository = repository

    @property
    def gateway(self) -> DonorDataGateway:
        return self._gateway or donor_gateway

    async def build_daily_queue(self, today: date, force_rescore: bool = False) -> list[QueueEntry]:
        """
        Return today's queue, building it on the first request of the day.

        Args:
            today: Queue date
            force_rescore: Re-score even if a queue exists. Stored entries are
                refreshed in place and keep their called/skip state; new
                contacts only fill the room left under QUEUE_SIZE.

        Returns:
            Queue entries ordered by position

        Two first-of-day builds racing with different contact sets can still
        each insert up to QUEUE_SIZE rows; the unique (date, contact_id) key
        only rules out duplicates.
        """
        existing = await self.repository.fetch_queue(today)
        if existing and not force_rescore:
            logger.info("Returning stored queue", date=str(today), entries=len(existing))
            return existing

        scored = await self.score_contacts(today)
        top = self._select_for_upsert(scored, existing)
        if top:
            await self.repository.upsert_entries(today, top)

        queue = await self.repository.fetch_queue(today)
        logger.info(
            "Daily queue built",
            date=str(today),
            scored=len(scored),
            persisted=len(top),
            returned=len(queue),
            rescored=force_rescore,
        )
        return queue

    @staticmethod
    def _select_for_upsert(
        scored: list[ScoredContact], existing: list[QueueEntry]
    ) -> list[ScoredContact]:
        """Refresh every stored contact; add new ones, best first, up to QUEUE_SIZE."""
        stored_ids = {entry.contact_id for entry in existing}
        refreshed = [item for item in scored if item.contact.id in stored_ids]
        room = max(settings.QUEUE_SIZE - len(existing), 0)
        added = [item for item in scored if item.contact.id not in stored_ids][:room]
        return added + refreshed

    async def skip_entry(self, queue_id: int) -> QueueEntry:
        """Move an entry to the back of its day's queue."""
        entry = await self.repository.move_to_end(queue_id)
        if entry is None:
            raise NotFoundError(f"Queue entry {queue_id} not found", operation="skip_entry")

        logger.info(
            "Queue entry skipped",
            queue_id=queue_id,
            contact_id=entry.contact_id,
            position=entry.position,
            skip_count=entry.skip_count,
        )
        return entry

    async def score_contacts(self, today: date) -> list[ScoredContact]:
        """Fetch, filter, enrich and rank every donor contact for `today`."""
        contacts = await self.gateway.fetch_contacts()
        callable_contacts = [c for c in contacts if c.primary_phone]

        dropped = len(contacts) - len(callable_contacts)
        if dropped:
            logger.debug("Skipping contacts without a phone", count=dropped)

        semaphore = asyncio.Semaphore(max(settings.CRM_MAX_CONCURRENCY, 1))

        async def _bounded(contact: Contact) -> ScoredContact | None:
            async with semaphore:
                return await self._score_one(contact, today)

        results = await asyncio.gather(*(_bounded(c) for c in callable_contacts))
        scored = [item for item in results if item is not None]

        # list.sort is stable, so equal scores keep fetch order
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored

    async def _score_one(self, contact: Contact, today: date) -> ScoredContact | None:
        try:
            donation = await self.gateway.fetch_donation_history(contact.full_name)

            last_call_note = None
            if settings.QUEUE_INCLUDE_CALL_NOTES:
                notes = await self.gateway.fetch_recent_notes(contact.id)
                last_call_note = notes[0].text if notes else None
        except Exception as e:
            logger.warning(
                "Skipping contact after lookup failure",
                contact_id=contact.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        return ScoredContact(
            contact=contact,
            phone=contact.primary_phone,
            score=score_contact(
                contact,
                donation,
                today,
                tribute_bonus=settings.SCORING_TRIBUTE_BONUS_ENABLED,
                new_contact_bonus=settings.SCORING_NEW_CONTACT_BONUS_ENABLED,
            ),
            donation=donation,
            suggested_ask=calculate_suggested_ask(
                donation.last_gift_amount, donation.lifetime_giving
            ),
            context_line=build_context_line(
                donation, contact.last_contacted, last_call_note, today
            ),
            last_call_note=last_call_note,
        )


queue_scoring_service = QueueScoringService()
