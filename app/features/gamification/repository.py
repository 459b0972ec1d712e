"""
Repository helpers for boss battles, achievements and daily missions.
"""

from datetime import date
from typing import Any

import psycopg
from psycopg.types.json import Jsonb

from app.db.helpers import execute_query, fetch_one, with_db_retry

from .domain import BossBattle, DailyMissions


class BossRepository:
    @staticmethod
    @with_db_retry()
    async def fetch_active() -> BossBattle | None:
        row = await fetch_one("SELECT * FROM boss_battle WHERE status = 'active' LIMIT 1")
        return BossBattle.from_row(row) if row else None

    @staticmethod
    async def decrement_active(*, connection: psycopg.AsyncConnection) -> BossBattle | None:
        row = await fetch_one(
            """
            UPDATE boss_battle
            SET hp_current = GREATEST(hp_current - 1, 0), updated_at = NOW()
            WHERE status = 'active'
            RETURNING *
            """,
            connection=connection,
        )
        return BossBattle.from_row(row) if row else None

    @staticmethod
    async def mark_won(boss_id: int, *, connection: psycopg.AsyncConnection) -> BossBattle:
        row = await fetch_one(
            """
            UPDATE boss_battle
            SET status = 'won', hp_current = 0, updated_at = NOW()
            WHERE id = %s
            RETURNING *
            """,
            (boss_id,),
            connection=connection,
        )
        return BossBattle.from_row(row)

    @staticmethod
    async def abandon_active(*, connection: psycopg.AsyncConnection) -> int:
        return await execute_query(
            "UPDATE boss_battle SET status = 'abandoned', updated_at = NOW() WHERE status = 'active'",
            connection=connection,
        )

    @staticmethod
    async def insert_active(
        contact_id: str | None,
        contact_name: str,
        goal: str,
        hp_max: int,
        *,
        connection: psycopg.AsyncConnection,
    ) -> BossBattle:
        row = await fetch_one(
            """
            INSERT INTO boss_battle (contact_id, contact_name, goal, hp_current, hp_max, status)
            VALUES (%s, %s, %s, %s, %s, 'active')
            RETURNING *
            """,
            (contact_id, contact_name, goal, hp_max, hp_max),
            connection=connection,
        )
        return BossBattle.from_row(row)

    @staticmethod
    async def unlock_achievement(
        achievement_id: str, metadata: dict[str, Any], *, connection: psycopg.AsyncConnection
    ) -> bool:
        """Insert once; returns False when the achievement already existed."""
        row = await fetch_one(
            """
            INSERT INTO achievements (id, metadata)
            VALUES (%s, %s)
            ON CONFLICT (id) DO NOTHING
            RETURNING id
            """,
            (achievement_id, Jsonb(metadata)),
            connection=connection,
        )
        return row is not None


class MissionRepository:
    @staticmethod
    @with_db_retry()
    async def fetch_for_date(day: date) -> DailyMissions | None:
        row = await fetch_one("SELECT * FROM daily_missions WHERE date = %s LIMIT 1", (day,))
        return DailyMissions.from_row(row) if row else None
