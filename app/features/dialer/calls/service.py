"""
Call logging: reward roll, queue update and ledger bookkeeping.

The queue update, session bump and state update commit together. The CRM
write happens afterwards on the background runner and never affects the
response.
"""

import random
from datetime import date

from app.core.errors import NotFoundError, ValidationError
from app.db.pool import get_db_transaction
from app.features.dialer.domain import CallLogResult
from app.features.dialer.ledger import LedgerService, ledger_service
from app.features.dialer.queue import QueueRepository
from app.features.dialer.rewards import roll_reward
from app.infrastructure.observability.logging import get_logger
from app.services.background_tasks import BackgroundTaskRunner, background_tasks
from app.services.crm import DonorDataGateway, donor_gateway

logger = get_logger(__name__)

CALL_OUTCOMES = ("pledged", "good_conversation", "no_answer", "left_message", "bad_timing")

ONEPAGE_RESULT_MAP: dict[str, str] = {
    "pledged": "interested",
    "good_conversation": "interested",
    "no_answer": "no_answer",
    "left_message": "left_message",
    "bad_timing": "bad_timing",
}
DEFAULT_ONEPAGE_RESULT = "no_answer"


def build_crm_log_text(outcome: str, pledge_amount: float | None = None) -> str:
    if outcome == "pledged":
        if pledge_amount:
            amount = int(pledge_amount) if float(pledge_amount).is_integer() else pledge_amount
        else:
            amount = "unknown"
        return f"Pledged ${amount}. Logged via FC Dialer."
    return f"Call outcome: {outcome}. Logged via FC Dialer."


def onepage_result_for(outcome: str) -> str:
    return ONEPAGE_RESULT_MAP.get(outcome, DEFAULT_ONEPAGE_RESULT)


class CallLogService:
    def __init__(
        self,
        ledger: LedgerService | None = None,
        repository: type[QueueRepository] = QueueRepository,
        gateway: DonorDataGateway | None = None,
        runner: BackgroundTaskRunner | None = None,
    ):
        self.ledger = ledger or ledger_service
        self.repository = repository
        self._gateway = gateway
        self._runner = runner

    @property
    def gateway(self) -> DonorDataGateway:
        return self._gateway or donor_gateway

    @property
    def runner(self) -> BackgroundTaskRunner:
        return self._runner or background_tasks

    async def log_call(
        self,
        queue_id: int,
        outcome: str,
        today: date,
        *,
        pledge_amount: float | None = None,
        rng: random.Random | None = None,
    ) -> CallLogResult:
        """
        Record a call outcome for a queue entry.

        Raises:
            ValidationError: outcome is blank
            NotFoundError: no queue entry with `queue_id`; nothing is written
        """
        outcome = (outcome or "").strip()
        if not outcome:
            raise ValidationError("queueId and outcome required", operation="log_call")

        reward = roll_reward(outcome, rng)
        xp = reward.xp_awarded

        async with await get_db_transaction() as conn:
            entry = await self.repository.mark_called(queue_id, outcome, connection=conn)
            if entry is None:
                raise NotFoundError(f"Queue entry {queue_id} not found", operation="log_call")

            snapshot = await self.ledger.record_call(
                xp, today, contact_id=entry.contact_id, outcome=outcome, connection=conn
            )

        logger.info(
            "Call logged",
            queue_id=queue_id,
            contact_id=entry.contact_id,
            outcome=outcome,
            xp_awarded=xp,
            xp_multiplier=reward.xp_multiplier,
            reward_tier=reward.tier,
            streak=snapshot.state.streak_current,
        )

        self.runner.submit(
            self.gateway.log_outcome(
                entry.contact_id,
                build_crm_log_text(outcome, pledge_amount),
                onepage_result_for(outcome),
                today,
            ),
            name=f"onepage-log-call-{queue_id}",
        )

        return CallLogResult(reward=reward, snapshot=snapshot, entry=entry)


call_log_service = CallLogService()
