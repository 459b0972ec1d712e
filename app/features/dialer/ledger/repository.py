"""
SQL for dialer sessions, the gamification singleton and the XP audit trail.

Everything that mutates takes an explicit connection so the caller owns
the transaction.
"""

from datetime import date
from typing import Any

import psycopg

from app.db.helpers import execute_query, fetch_one
from app.features.dialer.domain import GamificationState


class LedgerRepository:
    @staticmethod
    async def bump_session(
        day: date, xp: int, *, connection: psycopg.AsyncConnection
    ) -> dict[str, Any]:
        """Create today's session lazily and add one call plus `xp`."""
        return await fetch_one(
            """
            INSERT INTO dialer_sessions (date, calls_made, xp_earned, started_at, last_active)
            VALUES (%s, 1, %s, NOW(), NOW())
            ON CONFLICT (date) DO UPDATE SET
                calls_made = dialer_sessions.calls_made + 1,
                xp_earned = dialer_sessions.xp_earned + EXCLUDED.xp_earned,
                last_active = NOW()
            RETURNING calls_made, xp_earned
            """,
            (day, xp),
            connection=connection,
        )

    @staticmethod
    async def fetch_session(
        day: date, *, connection: psycopg.AsyncConnection | None = None
    ) -> dict[str, Any] | None:
        return await fetch_one(
            "SELECT calls_made, xp_earned FROM dialer_sessions WHERE date = %s",
            (day,),
            connection=connection,
        )

    @staticmethod
    async def lock_state(*, connection: psycopg.AsyncConnection) -> GamificationState:
        """Ensure the singleton exists, then hold its row lock until commit."""
        await execute_query(
            "INSERT INTO gamification_state (id) VALUES (1) ON CONFLICT (id) DO NOTHING",
            connection=connection,
        )
        row = await fetch_one(
            "SELECT * FROM gamification_state WHERE id = 1 FOR UPDATE",
            connection=connection,
        )
        return GamificationState.from_row(row)

    @staticmethod
    async def fetch_state(
        *, connection: psycopg.AsyncConnection | None = None
    ) -> GamificationState:
        row = await fetch_one(
            """
            INSERT INTO gamification_state (id) VALUES (1)
            ON CONFLICT (id) DO UPDATE SET id = EXCLUDED.id
            RETURNING *
            """,
            connection=connection,
        )
        return GamificationState.from_row(row)

    @staticmethod
    async def save_state(
        state: GamificationState, *, connection: psycopg.AsyncConnection
    ) -> None:
        await execute_query(
            """
            UPDATE gamification_state
            SET streak_current = %s, streak_max = %s, streak_last_date = %s,
                xp_total = %s, xp_this_week = %s, level = %s, updated_at = NOW()
            WHERE id = 1
            """,
            (
                state.streak_current,
                state.streak_max,
                state.streak_last_date,
                state.xp_total,
                state.xp_this_week,
                state.level,
            ),
            connection=connection,
        )

    @staticmethod
    async def insert_xp_event(
        action_type: str,
        xp: int,
        *,
        contact_id: str | None = None,
        description: str | None = None,
        connection: psycopg.AsyncConnection,
    ) -> None:
        await execute_query(
            """
            INSERT INTO xp_events (action_type, xp_earned, contact_id, description)
            VALUES (%s, %s, %s, %s)
            """,
            (action_type, xp, contact_id, description),
            connection=connection,
        )
