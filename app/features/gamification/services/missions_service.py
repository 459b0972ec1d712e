"""
Daily missions (read-only).
"""

from datetime import date

from app.features.gamification.domain import DailyMissions
from app.features.gamification.repository import MissionRepository


class MissionsService:
    def __init__(self, repository: type[MissionRepository] = MissionRepository):
        self.repository = repository

    async def get_daily_missions(self, today: date) -> DailyMissions:
        missions = await self.repository.fetch_for_date(today)
        return missions or DailyMissions(date=today)


missions_service = MissionsService()
