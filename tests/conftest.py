import importlib

import pytest

from app.auth.verify import auth_dependency
from tests.factories import (
    TODAY,
    FakeGateway,
    FakeRedis,
    FakeTransaction,
    InMemoryQueueRepository,
)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def auth_override():
    def _override():
        return {"sub": "dialer"}

    return _override


@pytest.fixture
def apply_auth_override(auth_override):
    def _apply(app):
        app.dependency_overrides[auth_dependency] = auth_override

    return _apply


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_transaction():
    return FakeTransaction()


@pytest.fixture
def patch_transaction(monkeypatch, fake_transaction):
    """Patch get_db_transaction in the given module path."""

    def _patch(module_path: str) -> FakeTransaction:
        async def _get_db_transaction():
            return fake_transaction

        monkeypatch.setattr(
            importlib.import_module(module_path), "get_db_transaction", _get_db_transaction
        )
        return fake_transaction

    return _patch


@pytest.fixture
def queue_repository():
    return InMemoryQueueRepository()


@pytest.fixture
def fake_gateway():
    return FakeGateway()
