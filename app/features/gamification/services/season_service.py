"""
Season progress: money raised in the season window against a linear weekly pace.
"""

import math
from datetime import date

from app.config import settings
from app.core.errors import UpstreamUnavailableError
from app.features.gamification.domain import SeasonProgress
from app.infrastructure.observability.logging import get_logger
from app.services.crm import DonorDataGateway, donor_gateway

logger = get_logger(__name__)


def compute_season_progress(
    raised: float,
    today: date,
    *,
    season_start: date,
    goal: float,
    total_weeks: int,
) -> SeasonProgress:
    days = (today - season_start).days
    weeks_elapsed = max(1, math.ceil(days / 7))
    expected = goal / total_weeks * weeks_elapsed
    return SeasonProgress(
        goal=goal,
        raised=raised,
        percent=int(math.floor(raised / goal * 100 + 0.5)) if goal else 0,
        weeks_elapsed=weeks_elapsed,
        total_weeks=total_weeks,
        on_pace=raised >= expected,
    )


class SeasonService:
    def __init__(self, gateway: DonorDataGateway | None = None):
        self._gateway = gateway

    @property
    def gateway(self) -> DonorDataGateway:
        return self._gateway or donor_gateway

    async def get_season_progress(self, today: date) -> SeasonProgress:
        try:
            raised = await self.gateway.sum_donations_between(
                settings.SEASON_START, settings.SEASON_END
            )
        except UpstreamUnavailableError as e:
            logger.warning("Season total unavailable, reporting zero", service=e.service, error=str(e))
            raised = 0.0

        return compute_season_progress(
            raised,
            today,
            season_start=settings.SEASON_START,
            goal=settings.SEASON_GOAL,
            total_weeks=settings.SEASON_TOTAL_WEEKS,
        )


season_service = SeasonService()
