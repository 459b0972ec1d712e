"""
Domain subpackage for the gamification overlays.
"""

from .models import (
    BOSS_ABANDONED,
    BOSS_ACTIVE,
    BOSS_WON,
    BossBattle,
    BossHitResult,
    DailyMissions,
    SeasonProgress,
)

__all__ = [
    "BOSS_ABANDONED",
    "BOSS_ACTIVE",
    "BOSS_WON",
    "BossBattle",
    "BossHitResult",
    "DailyMissions",
    "SeasonProgress",
]
