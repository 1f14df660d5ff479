"""Shared pytest fixtures for all tests."""
import os
import tempfile
from pathlib import Path

# Settings are read at import time; point them at throwaway locations first
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="ledger-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_ROOT / 'ledger.db'}")
os.environ.setdefault("LOG_DIR", str(_TEST_ROOT / "logs"))

import pytest
from httpx import AsyncClient, ASGITransport

from ledger.core.dependencies import get_store, get_validator
from ledger.database import create_ledger_engine
from ledger.main import app
from ledger.services.ledger_store import SqlAlchemyLedgerStore
from ledger.services.memory_store import InMemoryLedgerStore
from ledger.services.validator import TransactionValidator


# ===== STORES =====

@pytest.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path: Path):
    """Ledger store, run once per implementation."""
    if request.param == "memory":
        ledger_store = InMemoryLedgerStore()
    else:
        engine = create_ledger_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
        ledger_store = SqlAlchemyLedgerStore(engine, default_timeout=10.0)

    await ledger_store.create_schema()
    yield ledger_store
    await ledger_store.close()


@pytest.fixture
async def sql_store(tmp_path: Path):
    """SQLAlchemy store over a file-backed SQLite database."""
    engine = create_ledger_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    ledger_store = SqlAlchemyLedgerStore(engine, default_timeout=10.0)
    await ledger_store.create_schema()
    yield ledger_store
    await ledger_store.close()


# ===== VALIDATORS =====

@pytest.fixture
def validator():
    """Validator with the default policy (UUID-only user IDs)."""
    return TransactionValidator()


@pytest.fixture
def opaque_validator():
    """Validator accepting any non-empty user ID."""
    return TransactionValidator(require_uuid_user_ids=False)


# ===== HTTP CLIENT =====

@pytest.fixture
async def client(store):
    """Test client with the ledger store and validator overridden."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_validator] = lambda: TransactionValidator()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
