"""
Session & gamification ledger.

The state transition (streak, weekly XP, level) is a pure function so it
can be tested without a database; LedgerService applies it under the
singleton row lock.
"""

from dataclasses import replace
from datetime import date, timedelta

import psycopg

from app.config import settings
from app.db.pool import get_db_transaction
from app.features.dialer.domain import GamificationState, LedgerSnapshot
from app.infrastructure.observability.logging import get_logger

from .repository import LedgerRepository

logger = get_logger(__name__)

MONDAY = 0


def level_for_xp(xp_total: int) -> int:
    return xp_total // settings.XP_PER_LEVEL + 1


def advance_state(state: GamificationState, xp: int, today: date) -> GamificationState:
    """
    Apply one logged call worth `xp` on `today`.

    Streak: unchanged for a repeat call today, +1 when the last call was
    yesterday, otherwise back to 1. Weekly XP restarts at this call's XP on
    the first call of a Monday and accumulates otherwise.
    """
    last = state.streak_last_date

    if last == today:
        streak = state.streak_current
    elif last == today - timedelta(days=1):
        streak = state.streak_current + 1
    else:
        streak = 1

    if today.weekday() == MONDAY and last != today:
        xp_this_week = xp
    else:
        xp_this_week = state.xp_this_week + xp

    xp_total = state.xp_total + xp
    return GamificationState(
        streak_current=streak,
        streak_max=max(state.streak_max, streak),
        streak_last_date=today,
        xp_total=xp_total,
        xp_this_week=xp_this_week,
        level=level_for_xp(xp_total),
    )


def apply_bonus_xp(state: GamificationState, xp: int) -> GamificationState:
    """Add XP that is not tied to a call; streak fields are left alone."""
    xp_total = state.xp_total + xp
    return replace(
        state,
        xp_total=xp_total,
        xp_this_week=state.xp_this_week + xp,
        level=level_for_xp(xp_total),
    )


class LedgerService:
    def __init__(self, repository: type[LedgerRepository] = LedgerRepository):
        self.repository = repository

    async def record_call(
        self,
        xp: int,
        today: date,
        *,
        contact_id: str | None = None,
        outcome: str | None = None,
        connection: psycopg.AsyncConnection | None = None,
    ) -> LedgerSnapshot:
        """
        Count one call worth `xp` against today's session and the singleton state.

        Runs inside `connection`'s transaction when given, otherwise opens
        its own. Concurrent callers serialize on the state row lock.
        """
        if connection is None:
            async with await get_db_transaction() as conn:
                return await self._record_call(xp, today, contact_id, outcome, conn)
        return await self._record_call(xp, today, contact_id, outcome, connection)

    async def _record_call(
        self,
        xp: int,
        today: date,
        contact_id: str | None,
        outcome: str | None,
        conn: psycopg.AsyncConnection,
    ) -> LedgerSnapshot:
        session = await self.repository.bump_session(today, xp, connection=conn)
        current = await self.repository.lock_state(connection=conn)
        updated = advance_state(current, xp, today)
        await self.repository.save_state(updated, connection=conn)
        await self.repository.insert_xp_event(
            "call_logged",
            xp,
            contact_id=contact_id,
            description=f"Call outcome: {outcome}" if outcome else None,
            connection=conn,
        )

        if updated.level > current.level:
            logger.info("Level up", level=updated.level, xp_total=updated.xp_total)

        return LedgerSnapshot(
            calls_today=session["calls_made"],
            xp_today=session["xp_earned"],
            state=updated,
        )

    async def grant_bonus_xp(
        self,
        xp: int,
        *,
        action_type: str,
        description: str | None = None,
        contact_id: str | None = None,
        connection: psycopg.AsyncConnection,
    ) -> GamificationState:
        """Add a one-off XP bonus under the state row lock held by `connection`."""
        current = await self.repository.lock_state(connection=connection)
        updated = apply_bonus_xp(current, xp)
        await self.repository.save_state(updated, connection=connection)
        await self.repository.insert_xp_event(
            action_type,
            xp,
            contact_id=contact_id,
            description=description,
            connection=connection,
        )
        logger.info("Bonus XP granted", action_type=action_type, xp=xp, xp_total=updated.xp_total)
        return updated

    async def get_snapshot(self, today: date) -> LedgerSnapshot:
        session = await self.repository.fetch_session(today)
        state = await self.repository.fetch_state()
        return LedgerSnapshot(
            calls_today=(session or {}).get("calls_made") or 0,
            xp_today=(session or {}).get("xp_earned") or 0,
            state=state,
        )

    async def get_state(self) -> GamificationState:
        return await self.repository.fetch_state()


ledger_service = LedgerService()
