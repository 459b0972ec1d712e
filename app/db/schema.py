# app/db/schema.py
"""
Idempotent table setup for the dialer.

Every statement is safe to run on each startup. The (date, contact_id)
uniqueness on daily_call_queue is what makes concurrent queue builds safe,
so it must never be relaxed.
"""

from app.db.pool import get_db_transaction
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS daily_call_queue (
        id SERIAL PRIMARY KEY,
        date DATE NOT NULL DEFAULT CURRENT_DATE,
        contact_id TEXT NOT NULL,
        contact_name TEXT,
        phone TEXT,
        last_gift_amount NUMERIC,
        last_gift_date DATE,
        lifetime_giving NUMERIC DEFAULT 0,
        suggested_ask NUMERIC,
        context_line TEXT,
        last_campaign TEXT,
        last_fund TEXT,
        tribute_type TEXT,
        tribute_name TEXT,
        last_donation_note TEXT,
        donation_count INT DEFAULT 0,
        last_call_note TEXT,
        score NUMERIC DEFAULT 0,
        position INT,
        called BOOLEAN NOT NULL DEFAULT FALSE,
        outcome TEXT,
        skip_count INT NOT NULL DEFAULT 0,
        called_at TIMESTAMPTZ,
        CONSTRAINT daily_call_queue_date_contact_key UNIQUE (date, contact_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS dialer_sessions (
        id SERIAL PRIMARY KEY,
        date DATE NOT NULL UNIQUE DEFAULT CURRENT_DATE,
        calls_made INT NOT NULL DEFAULT 0,
        xp_earned INT NOT NULL DEFAULT 0,
        started_at TIMESTAMPTZ DEFAULT NOW(),
        last_active TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS gamification_state (
        id INT PRIMARY KEY DEFAULT 1 CHECK (id = 1),
        streak_current INT NOT NULL DEFAULT 0,
        streak_max INT NOT NULL DEFAULT 0,
        streak_last_date DATE,
        xp_total INT NOT NULL DEFAULT 0,
        xp_this_week INT NOT NULL DEFAULT 0,
        level INT NOT NULL DEFAULT 1,
        updated_at TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS boss_battle (
        id SERIAL PRIMARY KEY,
        contact_id TEXT,
        contact_name TEXT NOT NULL,
        goal TEXT NOT NULL,
        hp_current INT NOT NULL,
        hp_max INT NOT NULL,
        status TEXT NOT NULL DEFAULT 'active'
            CHECK (status IN ('active', 'won', 'abandoned')),
        created_at TIMESTAMPTZ DEFAULT NOW(),
        updated_at TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS boss_battle_single_active
        ON boss_battle ((status)) WHERE status = 'active'
    """,
    """
    CREATE TABLE IF NOT EXISTS achievements (
        id TEXT PRIMARY KEY,
        metadata JSONB,
        unlocked_at TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS xp_events (
        id SERIAL PRIMARY KEY,
        action_type TEXT NOT NULL,
        xp_earned INT NOT NULL,
        contact_id TEXT,
        description TEXT,
        created_at TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_missions (
        date DATE PRIMARY KEY,
        mission_1 TEXT,
        mission_2 TEXT,
        mission_3 TEXT,
        completed_1 BOOLEAN NOT NULL DEFAULT FALSE,
        completed_2 BOOLEAN NOT NULL DEFAULT FALSE,
        completed_3 BOOLEAN NOT NULL DEFAULT FALSE
    )
    """,
)


async def ensure_schema() -> None:
    """Create dialer tables and indexes if they do not exist."""
    async with await get_db_transaction() as conn:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)

    logger.info("Database schema ensured", statement_count=len(SCHEMA_STATEMENTS))
