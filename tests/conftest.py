import os
from unittest.mock import Mock

# Settings are read at import time; the test defaults must be in place first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-jwt-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_MAX_REQUESTS", "100000")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test_key_secret")
os.environ.setdefault("RAZORPAY_WEBHOOK_SECRET", "test_webhook_secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from finquest.api.deps import get_payment_gateway
from finquest.db.session import get_db
from finquest.main import app
from finquest.payments.razorpay import RazorpayGateway

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", os.environ["DATABASE_URL"])

if TEST_DATABASE_URL.startswith("sqlite"):
    # One shared in-memory database for every session.
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

TEST_PASSWORD = "password123"


@pytest.fixture(scope="function")
async def setup_database():
    """Create tables for tests that need the database, and drop them after.

    Not autouse, so pure unit tests run without touching the database.
    """
    from finquest.models.base import Base

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session(setup_database):
    """Provide test database session with fresh connection per test."""
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def test_user(db_session: AsyncSession):
    """Create a test user for authentication tests."""
    from finquest.core.security import hash_password
    from finquest.models.user import User
    from finquest.repositories.user import UserRepository

    repo = UserRepository(db_session)
    user = User(
        name="Test User",
        mobile="9876543210",
        email="testuser@example.com",
        password_hash=hash_password(TEST_PASSWORD),
        coins=0,
        refresh_tokens=[],
    )
    return await repo.create(user)


@pytest.fixture
async def auth_headers(test_user):
    """Provide authentication headers with valid JWT token."""
    from finquest.core.security import generate_token

    token = generate_token(user_id=test_user.id, mobile=test_user.mobile)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def razorpay_client():
    """Stand-in for ``razorpay.Client``; tests set return values per call."""
    return Mock()


@pytest.fixture
def gateway(razorpay_client):
    return RazorpayGateway(
        key_id="rzp_test_key",
        key_secret="test_key_secret",
        webhook_secret="test_webhook_secret",
        client=razorpay_client,
        timeout=1.0,
    )


@pytest.fixture
async def client(db_session: AsyncSession, gateway: RazorpayGateway):
    """Provide test client with database and gateway overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
