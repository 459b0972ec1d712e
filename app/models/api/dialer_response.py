"""
Dialer API response models.
Field names are serialized in camelCase to match the dialer client.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from app.features.dialer.domain import CallLogResult, LedgerSnapshot, QueueEntry


class QueueEntryResponse(BaseModel):
    """One annotated contact in today's call queue."""

    id: int
    date: dt.date
    contact_id: str
    contact_name: str | None = None
    phone: str | None = None
    position: int | None = None
    called: bool = False
    outcome: str | None = None
    skip_count: int = 0
    called_at: dt.datetime | None = None
    last_gift_amount: float | None = None
    last_gift_date: dt.date | None = None
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

    @classmethod
    def from_entry(cls, entry: QueueEntry) -> "QueueEntryResponse":
        return cls(
            id=entry.id,
            date=entry.date,
            contact_id=entry.contact_id,
            contact_name=entry.contact_name,
            phone=entry.phone,
            position=entry.position,
            called=entry.called,
            outcome=entry.outcome,
            skip_count=entry.skip_count,
            called_at=entry.called_at,
            last_gift_amount=entry.last_gift_amount,
            last_gift_date=entry.last_gift_date,
            lifetime_giving=entry.lifetime_giving,
            suggested_ask=entry.suggested_ask,
            context_line=entry.context_line,
            last_campaign=entry.last_campaign,
            last_fund=entry.last_fund,
            tribute_type=entry.tribute_type,
            tribute_name=entry.tribute_name,
            last_donation_note=entry.last_donation_note,
            donation_count=entry.donation_count,
            last_call_note=entry.last_call_note,
        )


class QueueResponse(BaseModel):
    queue: list[QueueEntryResponse] = Field(default_factory=list)


class LogCallResponse(BaseModel):
    """Reward and updated stats after logging a call."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    xp_awarded: int = Field(..., alias="xpAwarded")
    xp_multiplier: int = Field(..., alias="xpMultiplier")
    reward_tier: str | None = Field(None, alias="rewardTier")
    reward_text: str | None = Field(None, alias="rewardText")
    calls_today: int = Field(..., alias="callsToday")
    xp_today: int = Field(..., alias="xpToday")
    streak: int
    xp_this_week: int = Field(..., alias="xpThisWeek")
    level: int

    @classmethod
    def from_result(cls, result: CallLogResult) -> "LogCallResponse":
        state = result.snapshot.state
        return cls(
            xp_awarded=result.reward.xp_awarded,
            xp_multiplier=result.reward.xp_multiplier,
            reward_tier=result.reward.tier,
            reward_text=result.reward.reward_text,
            calls_today=result.snapshot.calls_today,
            xp_today=result.snapshot.xp_today,
            streak=state.streak_current,
            xp_this_week=state.xp_this_week,
            level=state.level,
        )


class SkipResponse(BaseModel):
    success: bool = True


class StatsResponse(BaseModel):
    """Today's session totals plus the ledger."""

    model_config = ConfigDict(populate_by_name=True)

    calls_today: int = Field(..., alias="callsToday")
    xp_today: int = Field(..., alias="xpToday")
    streak: int
    streak_max: int = Field(..., alias="streakMax")
    xp_this_week: int = Field(..., alias="xpThisWeek")
    xp_total: int = Field(..., alias="xpTotal")
    level: int

    @classmethod
    def from_snapshot(cls, snapshot: LedgerSnapshot) -> "StatsResponse":
        state = snapshot.state
        return cls(
            calls_today=snapshot.calls_today,
            xp_today=snapshot.xp_today,
            streak=state.streak_current,
            streak_max=state.streak_max,
            xp_this_week=state.xp_this_week,
            xp_total=state.xp_total,
            level=state.level,
        )
