"""
Route-level tests for /api/dialer with services replaced by mocks.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.core.errors import NotFoundError, ValidationError
from app.db.helpers import DatabaseError
from app.features.dialer.domain import (
    CallLogResult,
    GamificationState,
    LedgerSnapshot,
    RewardRoll,
)
from app.main import app
from tests.factories import TODAY, make_entry

ROUTER = "app.features.dialer.api.router"


@pytest.fixture
def client(apply_auth_override, monkeypatch):
    apply_auth_override(app)
    monkeypatch.setattr(f"{ROUTER}.today_local", lambda: TODAY)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def queue_service(monkeypatch):
    service = AsyncMock()
    monkeypatch.setattr(f"{ROUTER}.queue_scoring_service", service)
    return service


@pytest.fixture
def call_service(monkeypatch):
    service = AsyncMock()
    monkeypatch.setattr(f"{ROUTER}.call_log_service", service)
    return service


@pytest.fixture
def ledger(monkeypatch):
    service = AsyncMock()
    monkeypatch.setattr(f"{ROUTER}.ledger_service", service)
    return service


def _snapshot(**state) -> LedgerSnapshot:
    values = {"streak_current": 3, "streak_max": 5, "xp_total": 1400, "xp_this_week": 320, "level": 3}
    values.update(state)
    return LedgerSnapshot(calls_today=7, xp_today=180, state=GamificationState(**values))


def test_get_queue_returns_ordered_entries(client, queue_service):
    queue_service.build_daily_queue.return_value = [
        make_entry(1, context_line="Last gave $250 · 3mo ago", suggested_ask=290),
        make_entry(2, contact_name="Avi Cohen"),
    ]

    response = client.get("/api/dialer/queue")

    assert response.status_code == 200
    queue = response.json()["queue"]
    assert [row["id"] for row in queue] == [1, 2]
    assert queue[0]["context_line"] == "Last gave $250 · 3mo ago"
    assert queue[0]["suggested_ask"] == 290
    assert queue[0]["date"] == TODAY.isoformat()
    queue_service.build_daily_queue.assert_awaited_once_with(TODAY)


def test_rescore_queue_forces_rebuild(client, queue_service):
    queue_service.build_daily_queue.return_value = []

    response = client.post("/api/dialer/queue/rescore")

    assert response.status_code == 200
    assert response.json() == {"queue": []}
    queue_service.build_daily_queue.assert_awaited_once_with(TODAY, force_rescore=True)


def test_log_call_returns_camel_case_reward(client, call_service):
    call_service.log_call.return_value = CallLogResult(
        reward=RewardRoll(base_xp=50, xp_multiplier=3, tier="rare", reward_text="Mensch move."),
        snapshot=_snapshot(),
        entry=make_entry(4, called=True, outcome="pledged"),
    )

    response = client.post(
        "/api/dialer/log", json={"queueId": 4, "outcome": "pledged", "pledgeAmount": 180}
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "xpAwarded": 150,
        "xpMultiplier": 3,
        "rewardTier": "rare",
        "rewardText": "Mensch move.",
        "callsToday": 7,
        "xpToday": 180,
        "streak": 3,
        "xpThisWeek": 320,
        "level": 3,
    }
    call_service.log_call.assert_awaited_once_with(4, "pledged", TODAY, pledge_amount=180)


def test_log_call_missing_fields_is_400(client, call_service):
    response = client.post("/api/dialer/log", json={"outcome": "pledged"})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request")
    call_service.log_call.assert_not_awaited()


def test_log_call_blank_outcome_is_400(client, call_service):
    response = client.post("/api/dialer/log", json={"queueId": 4, "outcome": ""})

    assert response.status_code == 400
    call_service.log_call.assert_not_awaited()


def test_log_call_service_validation_error(client, call_service):
    call_service.log_call.side_effect = ValidationError("outcome is required")

    response = client.post("/api/dialer/log", json={"queueId": 4, "outcome": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "outcome is required"}


def test_log_call_unknown_entry_is_404(client, call_service):
    call_service.log_call.side_effect = NotFoundError("Queue entry 99 not found")

    response = client.post("/api/dialer/log", json={"queueId": 99, "outcome": "no_answer"})

    assert response.status_code == 404
    assert response.json() == {"error": "Queue entry 99 not found"}


def test_skip_moves_entry(client, queue_service):
    queue_service.skip_entry.return_value = make_entry(2, position=9, skip_count=1)

    response = client.post("/api/dialer/skip", json={"queueId": 2})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    queue_service.skip_entry.assert_awaited_once_with(2)


def test_skip_unknown_entry_is_404(client, queue_service):
    queue_service.skip_entry.side_effect = NotFoundError("Queue entry 2 not found")

    response = client.post("/api/dialer/skip", json={"queueId": 2})

    assert response.status_code == 404


def test_stats_snapshot(client, ledger):
    ledger.get_snapshot.return_value = _snapshot()

    response = client.get("/api/dialer/stats")

    assert response.status_code == 200
    assert response.json() == {
        "callsToday": 7,
        "xpToday": 180,
        "streak": 3,
        "streakMax": 5,
        "xpThisWeek": 320,
        "xpTotal": 1400,
        "level": 3,
    }
    ledger.get_snapshot.assert_awaited_once_with(TODAY)


def test_dialer_routes_require_auth(queue_service):
    app.dependency_overrides.clear()

    response = TestClient(app).get("/api/dialer/queue")

    assert response.status_code == 401
    queue_service.build_daily_queue.assert_not_awaited()


def test_unexpected_failure_renders_json_500(apply_auth_override, monkeypatch, ledger):
    apply_auth_override(app)
    monkeypatch.setattr(f"{ROUTER}.today_local", lambda: TODAY)
    ledger.get_snapshot.side_effect = RuntimeError("connection reset")

    response = TestClient(app, raise_server_exceptions=False).get("/api/dialer/stats")
    app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_database_error_renders_json_500(client, ledger):
    ledger.get_snapshot.side_effect = DatabaseError("Query failed", operation="fetch_one")

    response = client.get("/api/dialer/stats")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
