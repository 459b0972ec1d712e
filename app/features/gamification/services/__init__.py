"""
Service layer for the gamification overlays.
"""

from .boss_service import BossService, boss_service
from .missions_service import MissionsService, missions_service
from .season_service import SeasonService, compute_season_progress, season_service

__all__ = [
    "BossService",
    "boss_service",
    "MissionsService",
    "missions_service",
    "SeasonService",
    "compute_season_progress",
    "season_service",
]
