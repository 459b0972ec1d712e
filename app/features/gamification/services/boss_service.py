"""
Boss battle state machine: active -> won, or active -> abandoned.
"""

from app.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.db.pool import get_db_transaction
from app.features.dialer.ledger import LedgerService, ledger_service
from app.features.gamification.domain import BossBattle, BossHitResult
from app.features.gamification.repository import BossRepository
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class BossService:
    def __init__(
        self,
        repository: type[BossRepository] = BossRepository,
        ledger: LedgerService | None = None,
    ):
        self.repository = repository
        self.ledger = ledger or ledger_service

    async def get_active_boss(self) -> BossBattle | None:
        return await self.repository.fetch_active()

    async def hit_boss(self) -> BossHitResult:
        """
        Take one HP off the active boss.

        The hit that reaches zero marks the boss won, unlocks its achievement
        and grants the win bonus. The bonus is tied to the achievement insert,
        so it can only be paid once per boss.

        Raises:
            NotFoundError: there is no active boss
        """
        async with await get_db_transaction() as conn:
            boss = await self.repository.decrement_active(connection=conn)
            if boss is None:
                raise NotFoundError("No active boss", operation="hit_boss")

            if boss.hp_current > 0:
                logger.info("Boss hit", boss_id=boss.id, hp_current=boss.hp_current)
                return BossHitResult(boss=boss)

            boss = await self.repository.mark_won(boss.id, connection=conn)
            unlocked = await self.repository.unlock_achievement(
                boss.achievement_id,
                {"name": f"Defeated {boss.contact_name}", "emoji": "🐉"},
                connection=conn,
            )

            xp_awarded = 0
            if unlocked:
                xp_awarded = settings.BOSS_WIN_XP
                await self.ledger.grant_bonus_xp(
                    xp_awarded,
                    action_type="boss_win",
                    description=f"Defeated boss: {boss.contact_name}",
                    contact_id=boss.contact_id,
                    connection=conn,
                )

        logger.info("Boss defeated", boss_id=boss.id, xp_awarded=xp_awarded)
        return BossHitResult(boss=boss, defeated=True, xp_awarded=xp_awarded)

    async def start_boss(
        self,
        contact_name: str | None,
        goal: str | None,
        hp_max: int | None = None,
        contact_id: str | None = None,
    ) -> BossBattle:
        """Abandon any active boss and start a new one."""
        if not contact_name or not goal:
            raise ValidationError("contact_name and goal required", operation="start_boss")

        hp = hp_max if hp_max is not None else settings.BOSS_DEFAULT_HP
        if hp < 1:
            raise ValidationError("hp_max must be at least 1", operation="start_boss")

        async with await get_db_transaction() as conn:
            abandoned = await self.repository.abandon_active(connection=conn)
            boss = await self.repository.insert_active(
                contact_id or contact_name, contact_name, goal, hp, connection=conn
            )

        logger.info(
            "Boss started",
            boss_id=boss.id,
            contact_name=contact_name,
            hp_max=hp,
            abandoned=abandoned,
        )
        return boss


boss_service = BossService()
