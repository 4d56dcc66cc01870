"""Service test fixtures — async ledger on in-memory SQLite + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Store, engine and setup are wired exactly as main.build_services wires them
    - Singleton documents (tournament, auction state) exist before each test body
    - The clock ticks one second per reading so bid timestamps are distinct

Design Decisions:
    - SQLite in-memory with StaticPool: every session shares the one connection,
      so all sessions see the same database
    - Retry delays set to 0: conflict tests exercise the loop, not the sleep
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from auction_ledger.config import Settings, get_settings
from auction_ledger.core.domain_types import PlayerRole
from auction_ledger.db.base import Base
from auction_ledger.infrastructure.database import DatabaseSessionManager
from auction_ledger.main import app, build_services
from auction_ledger.services.ledger_store import LedgerStore
from auction_ledger.services.setup_operations import SetupOperations
from auction_ledger.services.transaction_engine import TransactionEngine

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


class TickingClock:
    """Deterministic clock: each reading is one second after the previous one."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def settings():
    return Settings(
        admin_api_key="test-admin-key",
        transaction_retry_base_delay_ms=0,
        flush_debounce_ms=20,
    )


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def store(db_manager, settings):
    return LedgerStore(
        db_manager,
        max_attempts=settings.transaction_max_attempts,
        retry_base_delay_ms=settings.transaction_retry_base_delay_ms,
    )


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def engine(store, settings, clock):
    return TransactionEngine(store, settings, clock)


@pytest.fixture
async def setup(store, engine, settings):
    ops = SetupOperations(store, engine, settings)
    await ops.ensure_tournament()
    await ops.ensure_auction_state()
    return ops


@pytest.fixture
async def league(setup):
    """Purse 500000, team size 9, two teams and two available players."""
    await setup.configure_tournament("Spring Cup", "2025", 500_000, 9)
    alpha = await setup.create_team("Alpha", "Asha")
    bravo = await setup.create_team("Bravo", "Bilal")
    striker = await setup.create_player("Sam Striker", PlayerRole.BATSMAN)
    spinner = await setup.create_player("Ravi Spinner", PlayerRole.SPIN_BOWLER)
    return SimpleNamespace(
        alpha=alpha, bravo=bravo, striker=striker, spinner=spinner,
    )


@pytest.fixture
async def client(db_manager, settings):
    """FastAPI test client wired to the test database."""
    build_services(app, db_manager, settings)
    await app.state.setup.ensure_tournament()
    await app.state.setup.ensure_auction_state()
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()