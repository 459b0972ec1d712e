"""
Repository helpers for the daily call queue.
"""

from collections.abc import Sequence
from datetime import date

import psycopg

from app.db.helpers import DatabaseError, fetch_all, fetch_one, fetch_val, with_db_retry
from app.db.pool import get_db_transaction
from app.features.dialer.domain import QueueEntry, ScoredContact
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

# On conflict only presentation fields refresh; called/outcome/position/
# skip_count/called_at are left as they are.
UPSERT_QUEUE_ENTRY = """
    INSERT INTO daily_call_queue (
        date, contact_id, contact_name, phone,
        last_gift_amount, last_gift_date, lifetime_giving, suggested_ask,
        context_line, last_campaign, last_fund, tribute_type, tribute_name,
        last_donation_note, donation_count, last_call_note, score, position
    )
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
    ON CONFLICT (date, contact_id)
    DO UPDATE SET
        contact_name = EXCLUDED.contact_name,
        phone = EXCLUDED.phone,
        last_gift_amount = EXCLUDED.last_gift_amount,
        last_gift_date = EXCLUDED.last_gift_date,
        lifetime_giving = EXCLUDED.lifetime_giving,
        suggested_ask = EXCLUDED.suggested_ask,
        context_line = EXCLUDED.context_line,
        last_campaign = EXCLUDED.last_campaign,
        last_fund = EXCLUDED.last_fund,
        tribute_type = EXCLUDED.tribute_type,
        tribute_name = EXCLUDED.tribute_name,
        last_donation_note = EXCLUDED.last_donation_note,
        donation_count = EXCLUDED.donation_count,
        last_call_note = EXCLUDED.last_call_note,
        score = EXCLUDED.score
"""


class QueueRepository:
    """Thin wrappers around daily_call_queue."""

    @staticmethod
    @with_db_retry()
    async def fetch_queue(day: date) -> list[QueueEntry]:
        rows = await fetch_all(
            "SELECT * FROM daily_call_queue WHERE date = %s ORDER BY position, id",
            (day,),
        )
        return [QueueEntry.from_row(row) for row in rows]

    @staticmethod
    async def upsert_entries(day: date, scored: Sequence[ScoredContact]) -> None:
        """Write the ranked contacts for `day` in one transaction."""
        if not scored:
            return

        try:
            async with await get_db_transaction() as conn:
                base_position = await fetch_val(
                    "SELECT COALESCE(MAX(position), 0) FROM daily_call_queue WHERE date = %s",
                    (day,),
                    connection=conn,
                )
                payload = QueueRepository._build_payload(day, scored, base_position or 0)
                async with conn.cursor() as cur:
                    await cur.executemany(UPSERT_QUEUE_ENTRY, payload)
        except psycopg.Error as e:
            logger.error("Queue upsert failed", date=str(day), error=str(e))
            raise DatabaseError(f"Queue upsert failed: {e}", operation="upsert_queue") from e

        logger.debug("Queue entries upserted", date=str(day), entry_count=len(scored))

    @staticmethod
    def _build_payload(
        day: date, scored: Sequence[ScoredContact], base_position: int
    ) -> list[tuple]:
        return [
            (
                day,
                item.contact.id,
                item.contact.full_name,
                item.phone,
                item.donation.last_gift_amount,
                item.donation.last_gift_date,
                item.donation.lifetime_giving,
                item.suggested_ask,
                item.context_line,
                item.donation.last_campaign,
                item.donation.last_fund,
                item.donation.tribute_type,
                item.donation.tribute_name,
                item.donation.last_donation_note,
                item.donation.donation_count,
                item.last_call_note,
                round(item.score, 2),
                base_position + rank,
            )
            for rank, item in enumerate(scored, start=1)
        ]

    @staticmethod
    async def mark_called(
        queue_id: int, outcome: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> QueueEntry | None:
        row = await fetch_one(
            """
            UPDATE daily_call_queue
            SET called = TRUE, outcome = %s, called_at = NOW()
            WHERE id = %s
            RETURNING *
            """,
            (outcome, queue_id),
            connection=connection,
        )
        return QueueEntry.from_row(row) if row else None

    @staticmethod
    async def move_to_end(queue_id: int) -> QueueEntry | None:
        """Demote an entry behind everything else queued on its date."""
        row = await fetch_one(
            """
            UPDATE daily_call_queue AS q
            SET position = (
                    SELECT COALESCE(MAX(position), 0) + 1
                    FROM daily_call_queue
                    WHERE date = q.date
                ),
                skip_count = COALESCE(q.skip_count, 0) + 1
            WHERE q.id = %s
            RETURNING *
            """,
            (queue_id,),
        )
        return QueueEntry.from_row(row) if row else None
