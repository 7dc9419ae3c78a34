# Shared pytest configuration and fixtures for all test types
import pytest
import pytest_asyncio
from datetime import datetime, timezone
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from slowapi import Limiter
from slowapi.util import get_remote_address
from unittest.mock import AsyncMock, patch

# Create test limiter with no limits and in-memory storage
test_limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri="memory://",
)

# Patch the limiter before importing the app so decorators use test limiter
with patch("common.providers.rate_limiter.limiter.limiter", test_limiter):
    from api.main import app

from common.db.session import get_db
from common.db.base import Base
from packages.subscriptions.dependencies import get_payment
from packages.subscriptions.models.database.subscription_record import (
    SubscriptionRecordEntity,
)
from packages.subscriptions.models.domain.provider import (
    CheckoutSession,
    ProviderSubscription,
)
from packages.subscriptions.models.domain.subscription_record import SubscriptionRecord
from packages.subscriptions.providers.payment.interface import PaymentProviderInterface

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine and initialize schema."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_connection(test_engine):
    """Create test connection with outer transaction for rollback isolation."""
    async with test_engine.connect() as connection:
        trans = await connection.begin()
        yield connection
        await trans.rollback()


@pytest_asyncio.fixture(scope="function")
async def test_session_factory(test_connection):
    """Create session factory bound to test connection.

    Using join_transaction_mode="create_savepoint" so nested transaction()
    calls create savepoints instead of real nested transactions.
    """
    return async_sessionmaker(
        bind=test_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest_asyncio.fixture(scope="function")
async def test_db(test_session_factory):
    """Create a test database session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function", autouse=True)
async def patch_lazy_sessions(test_session_factory, monkeypatch):
    """
    Patch session factories to use test database.

    This allows real transaction() and get_session() to run with proper
    commit/rollback/ContextVar semantics while using the test database.
    """
    monkeypatch.setattr("common.db.scoped.AsyncSessionLocal", test_session_factory)


@pytest.fixture
def now():
    """Fixed evaluation instant."""
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def provider_subscription():
    """Build a provider subscription payload the way GET /subscriptions/{id} returns it."""

    def _build(
        subscription_id: str = "sub_123",
        status: str = "active",
        cancel_at_next_billing_date: bool = False,
        next_billing_date: datetime | None = None,
        email: str = "a@b.com",
    ) -> ProviderSubscription:
        payload = {
            "subscription_id": subscription_id,
            "status": status,
            "cancel_at_next_billing_date": cancel_at_next_billing_date,
            "next_billing_date": (
                next_billing_date.isoformat() if next_billing_date else None
            ),
            "customer": {
                "customer_id": "cus_1",
                "email": email,
                "name": "Test User",
            },
            "product_id": "prod_1",
            "recurring_pre_tax_amount": 999,
        }
        return ProviderSubscription.from_response(payload)

    return _build


@pytest.fixture
def mock_payment():
    """Payment provider with every call mocked."""
    payment = AsyncMock(spec=PaymentProviderInterface)
    payment.create_checkout_session.return_value = CheckoutSession(
        session_id="cks_123", checkout_url="https://checkout.test/cks_123"
    )
    payment.health_check.return_value = True
    return payment


@pytest_asyncio.fixture(scope="function")
async def make_record(test_session_factory):
    """Insert a subscription record in its own session and return the domain model."""

    async def _make(**fields) -> SubscriptionRecord:
        data = {
            "user_id": "u1",
            "email": "a@b.com",
            "name": "Test User",
            "is_premium": False,
            "status": "free",
            "cancel_at_billing_date": False,
        }
        data.update(fields)
        if hasattr(data["status"], "value"):
            data["status"] = data["status"].value
        async with test_session_factory() as session:
            entity = SubscriptionRecordEntity(**data)
            session.add(entity)
            await session.commit()
            await session.refresh(entity)
            return SubscriptionRecord.model_validate(entity)

    return _make


@pytest_asyncio.fixture(scope="function")
async def client(test_db: AsyncSession, mock_payment):
    """Create a test client."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment] = lambda: mock_payment

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
