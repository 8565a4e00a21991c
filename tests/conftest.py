"""Root conftest — shared test configuration and ledger fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden and db_manager patched for route tests
    - Tokens minted with the same secret the app reads from the environment

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE is a no-op there, so
      same-campaign serialization in tests comes from the KeyedLock + guarded UPDATE
"""

import os

# Set before crowdledger.config is first imported (get_settings is cached)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_FORMAT", "text")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import uuid

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

import crowdledger.infrastructure.database as db_module
import crowdledger.models  # noqa: F401
from crowdledger.db.base import Base
from crowdledger.infrastructure.database import DatabaseSessionManager, get_db
from crowdledger.infrastructure.keyed_lock import KeyedLock
from crowdledger.infrastructure.ledger_store import SqlLedgerStore
from crowdledger.main import app
from crowdledger.models.campaign import Campaign
from crowdledger.services.funding_ledger import FundingLedger

TEST_JWT_SECRET = "test-secret"


@pytest.fixture
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
async def test_db(db_manager):
    async with db_manager.session() as session:
        yield session


@pytest.fixture
def store(db_manager):
    return SqlLedgerStore(db_manager, KeyedLock())


@pytest.fixture
def ledger(store):
    return FundingLedger(store, timeout_seconds=5.0)


@pytest.fixture
def make_campaign(db_manager):
    """Insert a campaign directly (bypassing the directory) with given amounts."""

    async def _make(
        goal: str = "100",
        current: str = "0",
        creator_id: str = "creator-1",
        title: str = "Community garden",
    ) -> Campaign:
        campaign = Campaign(
            id=uuid.uuid4(),
            title=title,
            description="Raised beds for the neighbourhood",
            goal_cents=int(Decimal(goal) * 100),
            current_cents=int(Decimal(current) * 100),
            contribution_count=0,
            creator_id=creator_id,
        )
        async with db_manager.session() as db:
            db.add(campaign)
            await db.commit()
        return campaign

    return _make


def make_token(
    user_id: str,
    secret: str = TEST_JWT_SECRET,
    expires_in: timedelta = timedelta(hours=1),
    claim: str = "id",
) -> str:
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {claim: user_id, "iat": now, "exp": now + expires_in},
        secret,
        algorithm="HS256",
    )


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {make_token(user_id)}"}
    return _headers


@pytest.fixture
async def client(test_engine, db_manager):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with db_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def token_for():
    """Mint a bearer token; kwargs forwarded to make_token."""
    return make_token
