"""Service test fixtures — async DB, wired services and a FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - Payment rail singleton replaced by a fresh SimulatedPaymentRail per test
    - Every test gets its own DonorLockRegistry (locks never cross event loops)

Design Decisions:
    - SQLite in-memory: fast, no external dependency; with_for_update() is a
      no-op there, in-process atomicity comes from the sequence lock
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

import charity_ledger.models  # noqa: F401
from charity_ledger.db.base import Base
from charity_ledger.api.dependencies import build_charity_descriptor
from charity_ledger.config import get_settings
from charity_ledger.core.proof_verifier import MockProofVerifier
from charity_ledger.infrastructure.database import get_db, DatabaseSessionManager
from charity_ledger.infrastructure.payment_rail import SimulatedPaymentRail
from charity_ledger.services.donation_ledger import DonationLedger
from charity_ledger.services.donation_orchestrator import DonationOrchestrator
from charity_ledger.services.donor_locks import DonorLockRegistry
from charity_ledger.services.token_registry import TokenRegistry
import charity_ledger.infrastructure.database as db_module
import charity_ledger.infrastructure.payment_rail as rail_module
import charity_ledger.api.dependencies as deps_module
from charity_ledger.main import app

from tests.services.sample_data import ADMIN, PAYOUT


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def rail():
    return SimulatedPaymentRail()


@pytest.fixture
def locks():
    return DonorLockRegistry()


@pytest.fixture
def charity():
    return build_charity_descriptor(get_settings())


@pytest.fixture
def registry(test_db):
    return TokenRegistry(test_db, admin_address=ADMIN, default_base_locator="https://x/")


@pytest.fixture
def ledger(test_db):
    return DonationLedger(test_db)


@pytest.fixture
def orchestrator(test_db, registry, ledger, rail, charity, locks):
    return DonationOrchestrator(
        test_db, registry, ledger, rail, MockProofVerifier(), charity, locks,
    )


@pytest.fixture
def fund():
    """Credit and authorize `donor` on `rail` for `amount`."""
    async def _fund(rail: SimulatedPaymentRail, donor: str, amount: int):
        await rail.credit(donor, amount)
        await rail.approve(donor, PAYOUT, rail.allowance(donor, PAYOUT) + amount)
    return _fund


@pytest.fixture
async def client(test_engine, test_session_factory, rail, locks, monkeypatch):
    """FastAPI test client with DB, rail and locks overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    # Patch db_manager for the readiness check that reads it directly
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    monkeypatch.setattr(rail_module, "payment_rail", rail)
    monkeypatch.setattr(deps_module, "donor_locks", locks)
    monkeypatch.setattr(deps_module, "proof_verifier", MockProofVerifier())

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
