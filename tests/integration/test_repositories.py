"""Integration tests for repository layer."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.ext.asyncio import AsyncSession

from finquest.core.security import generate_refresh_token
from finquest.models.transaction import Transaction
from finquest.models.user import User
from finquest.repositories.transaction import TransactionFilters, TransactionRepository
from finquest.repositories.user import UserRepository

NOW = datetime(2026, 3, 20, 12, 0, tzinfo=timezone.utc)


# Helper fixtures
@pytest.fixture
async def another_user(db_session: AsyncSession) -> User:
    """Create another test user for security tests."""
    user = User(
        name="Another User",
        mobile="9123456789",
        email="another@example.com",
        password_hash="hashed_password",
        coins=40,
        refresh_tokens=[],
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def build_transaction(user: User, created_at: datetime, **fields) -> Transaction:
    values = {
        "razorpay_order_id": f"order_{uuid4().hex[:8]}",
        "razorpay_payment_id": f"pay_{uuid4().hex[:8]}",
        "razorpay_signature": "sig",
        "amount": Decimal("100.00"),
        "status": "completed",
        "description": "Groceries",
        "category": "food",
        "merchant": "BigBasket",
        "payment_method": "upi",
        "payment_metadata": {},
    }
    values.update(fields)
    return Transaction(user_id=user.id, created_at=created_at, **values)


@pytest.fixture
async def march_transactions(db_session: AsyncSession, test_user: User) -> list[Transaction]:
    """Spending around March 2026 for window and aggregation tests."""
    repo = TransactionRepository(db_session)
    rows = [
        build_transaction(test_user, datetime(2026, 2, 28, 23, 0, tzinfo=timezone.utc),
                          amount=Decimal("999.00")),
        build_transaction(test_user, datetime(2026, 3, 5, 9, 0, tzinfo=timezone.utc)),
        build_transaction(test_user, datetime(2026, 3, 18, 9, 0, tzinfo=timezone.utc),
                          amount=Decimal("50.00")),
        build_transaction(test_user, datetime(2026, 3, 18, 10, 0, tzinfo=timezone.utc),
                          amount=Decimal("50.00"), category="travel"),
        build_transaction(test_user, datetime(2026, 3, 19, 9, 0, tzinfo=timezone.utc),
                          amount=Decimal("70.00"), status="failed"),
    ]
    return [await repo.create(row) for row in rows]


# UserRepository Tests
class TestUserRepository:
    """Test suite for UserRepository."""

    async def test_create_user_defaults(self, db_session: AsyncSession):
        """Test creating a new user."""
        repo = UserRepository(db_session)
        user = User(
            name="New User",
            mobile="9000000000",
            email="newuser@example.com",
            password_hash="hashed",
        )
        created = await repo.create(user)

        assert created.id is not None
        assert created.coins == 0
        assert created.level == "Beginner"
        assert created.completed_quiz is False
        assert created.refresh_tokens == []

    async def test_get_by_identifier(self, db_session: AsyncSession, test_user: User):
        """Test login lookup by mobile or case-insensitive email."""
        repo = UserRepository(db_session)

        assert (await repo.get_by_identifier("9876543210")).id == test_user.id
        assert (await repo.get_by_identifier(" TestUser@Example.com ")).id == test_user.id
        assert await repo.get_by_identifier("0000000000") is None

    async def test_find_conflict(self, db_session: AsyncSession, test_user: User):
        repo = UserRepository(db_session)

        assert (await repo.find_conflict("9876543210", "x@example.com")).id == test_user.id
        assert (await repo.find_conflict("9000000000", "TESTUSER@example.com")) is not None
        assert await repo.find_conflict("9000000000", "x@example.com") is None

    async def test_email_taken_by_other(
        self, db_session: AsyncSession, test_user: User, another_user: User
    ):
        repo = UserRepository(db_session)

        assert await repo.email_taken_by_other("another@example.com", test_user.id) is True
        assert await repo.email_taken_by_other("testuser@example.com", test_user.id) is False

    async def test_refresh_token_lifecycle(self, db_session: AsyncSession, test_user: User):
        """Test storing and revoking refresh tokens."""
        repo = UserRepository(db_session)
        token_a = generate_refresh_token(test_user.id)
        token_b = generate_refresh_token(test_user.id)

        await repo.add_refresh_token(test_user, token_a)
        await repo.add_refresh_token(test_user, token_b)
        assert test_user.refresh_tokens == [token_a, token_b]

        assert await repo.remove_refresh_token(test_user, token_a) is True
        assert await repo.remove_refresh_token(test_user, token_a) is False
        assert test_user.refresh_tokens == [token_b]

    async def test_expired_tokens_pruned_on_add(self, db_session: AsyncSession, test_user: User):
        """Test that storing a session drops expired and unreadable tokens."""
        repo = UserRepository(db_session)
        expired = generate_refresh_token(test_user.id, expires_delta=timedelta(seconds=-1))
        live = generate_refresh_token(test_user.id)
        test_user.refresh_tokens = [expired, "not-a-jwt", live]
        await db_session.commit()

        fresh = generate_refresh_token(test_user.id)
        await repo.add_refresh_token(test_user, fresh)

        assert test_user.refresh_tokens == [live, fresh]

    async def test_platform_counters(
        self, db_session: AsyncSession, test_user: User, another_user: User
    ):
        repo = UserRepository(db_session)

        assert await repo.count() == 2
        assert await repo.total_coins() == 40

    async def test_counters_on_empty_table(self, db_session: AsyncSession):
        repo = UserRepository(db_session)

        assert await repo.count() == 0
        assert await repo.total_coins() == 0

    async def test_transactions_collection_never_lazy_loads(
        self, db_session: AsyncSession, test_user: User
    ):
        """Transactions are queried through the repository, never the relationship."""
        with pytest.raises(InvalidRequestError):
            test_user.transactions

    async def test_update_skips_unknown_fields(self, db_session: AsyncSession, test_user: User):
        repo = UserRepository(db_session)

        updated = await repo.update(test_user.id, {"coins": 25, "favourite_colour": "teal"})

        assert updated.coins == 25
        assert not hasattr(updated, "favourite_colour")
        assert await repo.update(uuid4(), {"coins": 1}) is None


# TransactionRepository Tests
class TestTransactionRepository:
    """Test suite for TransactionRepository."""

    async def test_get_for_user(
        self, db_session: AsyncSession, test_user: User, march_transactions
    ):
        repo = TransactionRepository(db_session)
        found = await repo.get_for_user(test_user.id, march_transactions[0].id)

        assert found is not None
        assert found.id == march_transactions[0].id

    async def test_user_cannot_access_other_users_transaction(
        self, db_session: AsyncSession, another_user: User, march_transactions
    ):
        """Security test: User cannot access another user's transaction."""
        repo = TransactionRepository(db_session)
        not_found = await repo.get_for_user(another_user.id, march_transactions[0].id)

        assert not_found is None

    async def test_get_by_payment_id(self, db_session: AsyncSession, march_transactions):
        repo = TransactionRepository(db_session)
        transaction = march_transactions[1]

        found = await repo.get_by_payment_id(transaction.razorpay_payment_id)

        assert found.id == transaction.id
        assert await repo.get_by_payment_id("pay_missing") is None

    async def test_update_status_by_payment_id(self, db_session: AsyncSession, march_transactions):
        repo = TransactionRepository(db_session)
        transaction = march_transactions[1]

        touched = await repo.update_status_by_payment_id(
            transaction.razorpay_payment_id, "failed"
        )
        await db_session.refresh(transaction)

        assert touched == 1
        assert transaction.status == "failed"
        assert await repo.update_status_by_payment_id("pay_missing", "failed") == 0

    async def test_pagination_is_newest_first(
        self, db_session: AsyncSession, test_user: User, march_transactions
    ):
        repo = TransactionRepository(db_session)

        result = await repo.get_user_transactions(test_user.id, page=2, limit=2)

        assert [t.id for t in result["transactions"]] == [
            march_transactions[2].id,
            march_transactions[1].id,
        ]
        assert result["pagination"] == {
            "current": 2,
            "pages": 3,
            "total": 5,
            "has_next": True,
            "has_prev": True,
        }

    async def test_filter_by_date_range(
        self, db_session: AsyncSession, test_user: User, march_transactions
    ):
        repo = TransactionRepository(db_session)
        filters = TransactionFilters(
            start_date=datetime(2026, 3, 1, tzinfo=timezone.utc),
            end_date=datetime(2026, 3, 18, 9, 30, tzinfo=timezone.utc),
        )

        result = await repo.get_user_transactions(test_user.id, filters=filters)

        assert result["pagination"]["total"] == 2

    async def test_monthly_analytics(
        self, db_session: AsyncSession, test_user: User, march_transactions
    ):
        """Only completed spending inside the calendar month is aggregated."""
        repo = TransactionRepository(db_session)

        analytics = await repo.get_spending_analytics(test_user.id, "month", now=NOW)

        assert analytics["total_spent"] == 200.0
        assert analytics["transaction_count"] == 3
        assert analytics["category_breakdown"] == [
            {"category": "food", "amount": 150.0, "count": 2, "average": 75, "percentage": 75},
            {"category": "travel", "amount": 50.0, "count": 1, "average": 50, "percentage": 25},
        ]

    async def test_year_analytics_includes_february(
        self, db_session: AsyncSession, test_user: User, march_transactions
    ):
        repo = TransactionRepository(db_session)

        analytics = await repo.get_spending_analytics(test_user.id, "year", now=NOW)

        assert analytics["total_spent"] == 1199.0

    async def test_get_completed_between(
        self, db_session: AsyncSession, test_user: User, march_transactions
    ):
        repo = TransactionRepository(db_session)

        rows = await repo.get_completed_between(
            test_user.id,
            datetime(2026, 3, 1, tzinfo=timezone.utc),
            datetime(2026, 3, 31, 23, 59, 59, tzinfo=timezone.utc),
        )

        assert [row.id for row in rows] == [
            march_transactions[3].id,
            march_transactions[2].id,
            march_transactions[1].id,
        ]

    async def test_delete_by_user(
        self, db_session: AsyncSession, test_user: User, another_user: User, march_transactions
    ):
        repo = TransactionRepository(db_session)
        await repo.create(build_transaction(another_user, NOW))

        deleted = await repo.delete_by_user(test_user.id)
        await db_session.commit()

        assert deleted == 5
        remaining = await repo.get_user_transactions(another_user.id)
        assert remaining["pagination"]["total"] == 1
