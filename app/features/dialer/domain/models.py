"""
Domain models for the dialer feature.

Plain dataclasses shared by the queue, reward and ledger layers. Row
conversion lives here so repositories stay thin.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from app.models.domain.donor_domain import Contact, DonationInfo


def _num(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return float(value)
    return value


@dataclass(slots=True)
class ScoredContact:
    """A contact after scoring, ready to be written into the day's queue."""

    contact: Contact
    phone: str
    score: float
    donation: DonationInfo
    suggested_ask: int
    context_line: str
    last_call_note: str | None = None


@dataclass(slots=True)
class QueueEntry:
    """One row of daily_call_queue."""

    id: int
    date: date
    contact_id: str
    contact_name: str | None
    phone: str | None
    position: int | None
    called: bool = False
    outcome: str | None = None
    skip_count: int = 0
    called_at: datetime | None = None
    last_gift_amount: float | None = None
    last_gift_date: date | None = None
    lifetime_giving: float = 0.0
    suggested_ask: float | None = None
    context_line: str | None = None
    last_campaign: str | None = None
    last_fund: str | None = None
    tribute_type: str | None = None
    tribute_name: str | None = None
    last_donation_note: str | None = None
    donation_count: int = 0
    last_call_note: str | None = None
    score: float = 0.0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "QueueEntry":
        return cls(
            id=row["id"],
            date=row["date"],
            contact_id=row["contact_id"],
            contact_name=row.get("contact_name"),
            phone=row.get("phone"),
            position=row.get("position"),
            called=bool(row.get("called")),
            outcome=row.get("outcome"),
            skip_count=row.get("skip_count") or 0,
            called_at=row.get("called_at"),
            last_gift_amount=_num(row.get("last_gift_amount")),
            last_gift_date=row.get("last_gift_date"),
            lifetime_giving=_num(row.get("lifetime_giving")) or 0.0,
            suggested_ask=_num(row.get("suggested_ask")),
            context_line=row.get("context_line"),
            last_campaign=row.get("last_campaign"),
            last_fund=row.get("last_fund"),
            tribute_type=row.get("tribute_type"),
            tribute_name=row.get("tribute_name"),
            last_donation_note=row.get("last_donation_note"),
            donation_count=row.get("donation_count") or 0,
            last_call_note=row.get("last_call_note"),
            score=_num(row.get("score")) or 0.0,
        )


@dataclass(slots=True)
class RewardRoll:
    """Result of one reward roll for a logged call."""

    base_xp: int
    xp_multiplier: int = 1
    tier: str | None = None
    reward_text: str | None = None

    @property
    def xp_awarded(self) -> int:
        # half-up; base and multiplier are both integers today
        return int(self.base_xp * self.xp_multiplier + 0.5)


@dataclass(slots=True)
class GamificationState:
    """The singleton gamification_state row."""

    streak_current: int = 0
    streak_max: int = 0
    streak_last_date: date | None = None
    xp_total: int = 0
    xp_this_week: int = 0
    level: int = 1

    @classmethod
    def from_row(cls, row: dict[str, Any] | None) -> "GamificationState":
        if not row:
            return cls()
        return cls(
            streak_current=row.get("streak_current") or 0,
            streak_max=row.get("streak_max") or 0,
            streak_last_date=row.get("streak_last_date"),
            xp_total=row.get("xp_total") or 0,
            xp_this_week=row.get("xp_this_week") or 0,
            level=row.get("level") or 1,
        )


@dataclass(slots=True)
class LedgerSnapshot:
    """Today's session totals plus the gamification state."""

    calls_today: int = 0
    xp_today: int = 0
    state: GamificationState = field(default_factory=GamificationState)


@dataclass(slots=True)
class CallLogResult:
    reward: RewardRoll
    snapshot: LedgerSnapshot
    entry: QueueEntry
