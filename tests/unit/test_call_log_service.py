from unittest.mock import AsyncMock

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.features.dialer.calls.service import (
    CallLogService,
    build_crm_log_text,
    onepage_result_for,
)
from app.features.dialer.domain import GamificationState, LedgerSnapshot
from app.services.background_tasks import BackgroundTaskRunner
from tests.factories import TODAY, FakeGateway, make_entry

CALL_MODULE = "app.features.dialer.calls.service"


class ScriptedRandom:
    def __init__(self, *rolls):
        self.rolls = list(rolls)

    def random(self):
        return self.rolls.pop(0)

    def choice(self, seq):
        return seq[0]


class RecordingRunner:
    def __init__(self):
        self.submitted = []

    def submit(self, coro, name):
        self.submitted.append((coro, name))


def _snapshot():
    return LedgerSnapshot(
        calls_today=3,
        xp_today=90,
        state=GamificationState(
            streak_current=2, streak_max=4, xp_total=640, xp_this_week=150, level=2
        ),
    )


def _service(entry, gateway=None, runner=None):
    repository = AsyncMock()
    repository.mark_called.return_value = entry
    ledger = AsyncMock()
    ledger.record_call.return_value = _snapshot()
    service = CallLogService(
        ledger=ledger,
        repository=repository,
        gateway=gateway or FakeGateway(),
        runner=runner or RecordingRunner(),
    )
    return service, repository, ledger


def test_crm_log_text_for_pledge():
    assert build_crm_log_text("pledged", 250) == "Pledged $250. Logged via FC Dialer."
    assert build_crm_log_text("pledged", 99.5) == "Pledged $99.5. Logged via FC Dialer."
    assert build_crm_log_text("pledged", None) == "Pledged $unknown. Logged via FC Dialer."


def test_crm_log_text_for_other_outcomes():
    assert build_crm_log_text("no_answer") == "Call outcome: no_answer. Logged via FC Dialer."


@pytest.mark.parametrize(
    "outcome, result",
    [
        ("pledged", "interested"),
        ("good_conversation", "interested"),
        ("left_message", "left_message"),
        ("bad_timing", "bad_timing"),
        ("something_else", "no_answer"),
    ],
)
def test_onepage_result_mapping(outcome, result):
    assert onepage_result_for(outcome) == result


@pytest.mark.asyncio
async def test_log_call_commits_and_returns_reward(patch_transaction):
    tx = patch_transaction(CALL_MODULE)
    runner = RecordingRunner()
    gateway = FakeGateway()
    service, repository, ledger = _service(make_entry(7), gateway=gateway, runner=runner)

    result = await service.log_call(
        7, "pledged", TODAY, pledge_amount=250, rng=ScriptedRandom(0.1, 0.10, 0.9)
    )

    assert tx.committed is True
    assert result.reward.xp_awarded == 150
    assert result.snapshot.calls_today == 3
    repository.mark_called.assert_awaited_once_with(7, "pledged", connection=tx.conn)
    ledger.record_call.assert_awaited_once_with(
        150, TODAY, contact_id="c7", outcome="pledged", connection=tx.conn
    )

    assert len(runner.submitted) == 1
    coro, name = runner.submitted[0]
    assert name == "onepage-log-call-7"
    await coro
    assert gateway.logged == [
        ("c7", "Pledged $250. Logged via FC Dialer.", "interested", TODAY)
    ]


@pytest.mark.asyncio
async def test_log_call_unknown_queue_id_writes_nothing(patch_transaction):
    tx = patch_transaction(CALL_MODULE)
    runner = RecordingRunner()
    service, _, ledger = _service(None, runner=runner)

    with pytest.raises(NotFoundError):
        await service.log_call(404, "no_answer", TODAY)

    assert tx.rolled_back is True
    ledger.record_call.assert_not_awaited()
    assert runner.submitted == []


@pytest.mark.asyncio
async def test_log_call_requires_outcome(patch_transaction):
    patch_transaction(CALL_MODULE)
    service, repository, _ = _service(make_entry(1))

    with pytest.raises(ValidationError):
        await service.log_call(1, "", TODAY)

    repository.mark_called.assert_not_awaited()


@pytest.mark.asyncio
async def test_crm_logging_failure_never_reaches_caller(patch_transaction):
    patch_transaction(CALL_MODULE)
    gateway = FakeGateway()
    gateway.log_outcome = AsyncMock(side_effect=RuntimeError("OnePage down"))
    runner = BackgroundTaskRunner(max_concurrency=2)
    service, _, _ = _service(make_entry(2), gateway=gateway, runner=runner)

    result = await service.log_call(2, "left_message", TODAY, rng=ScriptedRandom(0.9, 0.9))

    await runner.drain()
    assert result.reward.xp_awarded == 20
    gateway.log_outcome.assert_awaited_once()
    assert runner.pending == 0
