"""
Gamification routes: ledger state, boss battle, daily missions and season.
"""

from fastapi import APIRouter, Depends

from app.auth.verify import auth_dependency
from app.core.clock import today_local
from app.features.dialer.ledger import ledger_service
from app.features.gamification.services import boss_service, missions_service, season_service
from app.infrastructure.observability.logging import get_logger
from app.models.api.gamification_request import BossActionRequest
from app.models.api.gamification_response import (
    BossBattleModel,
    BossResponse,
    GamificationStateResponse,
    MissionsResponse,
    SeasonResponse,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/gamification",
    tags=["gamification"],
    dependencies=[Depends(auth_dependency)],
)


@router.get("/state", response_model=GamificationStateResponse)
async def get_state():
    state = await ledger_service.get_state()
    return GamificationStateResponse.from_state(state)


@router.get("/boss", response_model=BossResponse, response_model_exclude_unset=True)
async def get_boss():
    boss = await boss_service.get_active_boss()
    return BossResponse(boss=BossBattleModel.from_boss(boss) if boss else None)


@router.post("/boss", response_model=BossResponse, response_model_exclude_unset=True)
async def boss_action(body: BossActionRequest):
    """`hit` the active boss, or start a `new` one (abandoning the current)."""
    if body.action == "hit":
        result = await boss_service.hit_boss()
        return BossResponse(
            boss=BossBattleModel.from_boss(result.boss),
            defeated=result.defeated,
            xp_awarded=result.xp_awarded,
        )

    boss = await boss_service.start_boss(
        body.contact_name, body.goal, hp_max=body.hp_max, contact_id=body.contact_id
    )
    return BossResponse(boss=BossBattleModel.from_boss(boss))


@router.get("/missions", response_model=MissionsResponse)
async def get_missions():
    missions = await missions_service.get_daily_missions(today_local())
    return MissionsResponse.from_missions(missions)


@router.get("/season", response_model=SeasonResponse)
async def get_season():
    progress = await season_service.get_season_progress(today_local())
    return SeasonResponse.from_progress(progress)
