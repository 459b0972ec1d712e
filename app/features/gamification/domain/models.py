"""
Domain models for the boss, mission and season overlays.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

BOSS_ACTIVE = "active"
BOSS_WON = "won"
BOSS_ABANDONED = "abandoned"

MISSION_SLOTS = 3


@dataclass(slots=True)
class BossBattle:
    id: int
    contact_name: str
    goal: str
    hp_current: int
    hp_max: int
    status: str = BOSS_ACTIVE
    contact_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == BOSS_ACTIVE

    @property
    def achievement_id(self) -> str:
        return f"boss_{self.id}"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "BossBattle":
        return cls(
            id=row["id"],
            contact_name=row["contact_name"],
            goal=row["goal"],
            hp_current=row["hp_current"],
            hp_max=row["hp_max"],
            status=row.get("status") or BOSS_ACTIVE,
            contact_id=row.get("contact_id"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(slots=True)
class BossHitResult:
    boss: BossBattle
    defeated: bool = False
    xp_awarded: int = 0


@dataclass(slots=True)
class DailyMissions:
    date: date
    missions: list[str | None] = field(default_factory=list)
    completed: list[bool] = field(default_factory=lambda: [False] * MISSION_SLOTS)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "DailyMissions":
        slots = range(1, MISSION_SLOTS + 1)
        return cls(
            date=row["date"],
            missions=[row.get(f"mission_{i}") for i in slots],
            completed=[bool(row.get(f"completed_{i}")) for i in slots],
        )


@dataclass(slots=True)
class SeasonProgress:
    goal: float
    raised: float
    percent: int
    weeks_elapsed: int
    total_weeks: int
    on_pace: bool
