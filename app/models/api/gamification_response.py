"""
Gamification API response models.
"""

import datetime as dt

from pydantic import BaseModel, Field

from app.features.dialer.domain import GamificationState
from app.features.gamification.domain import BossBattle, DailyMissions, SeasonProgress


class GamificationStateResponse(BaseModel):
    streak_current: int
    streak_max: int
    xp_total: int
    xp_this_week: int
    level: int
    streak_last_date: dt.date | None = None

    @classmethod
    def from_state(cls, state: GamificationState) -> "GamificationStateResponse":
        return cls(
            streak_current=state.streak_current,
            streak_max=state.streak_max,
            xp_total=state.xp_total,
            xp_this_week=state.xp_this_week,
            level=state.level,
            streak_last_date=state.streak_last_date,
        )


class BossBattleModel(BaseModel):
    id: int
    contact_id: str | None = None
    contact_name: str
    goal: str
    hp_current: int
    hp_max: int
    status: str
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    @classmethod
    def from_boss(cls, boss: BossBattle) -> "BossBattleModel":
        return cls(
            id=boss.id,
            contact_id=boss.contact_id,
            contact_name=boss.contact_name,
            goal=boss.goal,
            hp_current=boss.hp_current,
            hp_max=boss.hp_max,
            status=boss.status,
            created_at=boss.created_at,
            updated_at=boss.updated_at,
        )


class BossResponse(BaseModel):
    boss: BossBattleModel | None = None
    defeated: bool | None = Field(None, description="Set on 'hit' responses")
    xp_awarded: int | None = Field(None, description="Bonus XP paid by a defeating hit")


class MissionsResponse(BaseModel):
    date: dt.date
    missions: list[str | None] = Field(default_factory=list)
    completed: list[bool] = Field(default_factory=list)

    @classmethod
    def from_missions(cls, missions: DailyMissions) -> "MissionsResponse":
        return cls(date=missions.date, missions=missions.missions, completed=missions.completed)


class SeasonResponse(BaseModel):
    goal: float
    raised: float
    percent: int
    weeks_elapsed: int
    total_weeks: int
    on_pace: bool

    @classmethod
    def from_progress(cls, progress: SeasonProgress) -> "SeasonResponse":
        return cls(
            goal=progress.goal,
            raised=progress.raised,
            percent=progress.percent,
            weeks_elapsed=progress.weeks_elapsed,
            total_weeks=progress.total_weeks,
            on_pace=progress.on_pace,
        )
