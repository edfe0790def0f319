"""Unit tests for the financial aggregation rules."""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from finquest.services.financial import (
    FinancialService,
    budget_percentage,
    level_multiplier,
    login_streak,
    month_bounds,
    monthly_income,
    weekly_buckets,
)


def _user(coins=0, level="Beginner", completed_quiz=False):
    return SimpleNamespace(id="u1", coins=coins, level=level, completed_quiz=completed_quiz)


def _service(transactions=(), users=0, coins=0):
    user_repo = Mock()
    user_repo.count = AsyncMock(return_value=users)
    user_repo.total_coins = AsyncMock(return_value=coins)
    transaction_repo = Mock()
    transaction_repo.get_completed_between = AsyncMock(return_value=list(transactions))
    return FinancialService(user_repo, transaction_repo)


class TestRules:
    @pytest.mark.parametrize(
        "level, multiplier",
        [("Beginner", 1.0), ("Intermediate", 1.3), ("Advanced", 1.6), ("Expert", 2.0), ("Guru", 1.0)],
    )
    def test_level_multiplier(self, level, multiplier):
        assert level_multiplier(level) == multiplier

    def test_monthly_income(self):
        assert monthly_income(0, 1.0) == 30000
        assert monthly_income(100, 1.3) == 45500

    def test_streak_is_capped(self):
        assert login_streak(0) == 7
        assert login_streak(55) == 12
        assert login_streak(1000) == 30

    def test_budget_percentage(self):
        assert budget_percentage(Decimal("0"), 12000) == 0
        assert budget_percentage(Decimal("6000"), 12000) == 50
        assert budget_percentage(Decimal("12000"), 8000) == 150

    def test_month_bounds(self):
        start, end = month_bounds(datetime(2026, 2, 10, 8, tzinfo=timezone.utc))

        assert start == datetime(2026, 2, 1, tzinfo=timezone.utc)
        assert (end.day, end.hour, end.minute) == (28, 23, 59)

    def test_weekly_buckets(self):
        weeks = weekly_buckets(
            [(1, Decimal("100")), (7, Decimal("50")), (8, Decimal("25")), (31, Decimal("10"))],
            days_in_month=31,
            income=30000,
        )

        assert [w["week"] for w in weeks] == ["Week 1", "Week 2", "Week 3", "Week 4", "Week 5"]
        assert [w["spending"] for w in weeks] == [150, 25, 0, 0, 10]
        assert all(w["limit"] == 6000 for w in weeks)


class TestDashboardStats:
    def test_beginner_without_coins(self):
        stats = _service().dashboard_stats(_user())

        assert stats["total_income"] == 30000
        assert stats["total_expense"] == 36800
        assert stats["total_savings"] == -6800
        assert stats["streak"] == 7
        assert len(stats["expense_categories"]) == 8
        assert stats["expense_categories"][0] == {
            "name": "Food & Dining",
            "spent": 8500,
            "limit": 12000,
            "percentage": 71,
            "color": "#10b981",
        }
        assert stats["recent_activities"][1]["amount"] == "₹30,000"

    def test_values_scale_with_level(self):
        stats = _service().dashboard_stats(_user(coins=100, level="Intermediate"))

        assert stats["total_income"] == 45500
        assert stats["savings_goals"][0]["target"] == 130000
        assert stats["weekly_trends"][0] == {"week": "Week 1", "spending": 11050, "limit": 13000}
        assert stats["expense_data"][0]["income"] == 45500 / 4

    def test_achievements(self):
        stats = _service().dashboard_stats(_user(coins=250, completed_quiz=True))

        earned = {a["name"]: a["earned"] for a in stats["achievements"]}
        assert earned == {
            "First Saver": True,
            "Quiz Master": True,
            "Goal Crusher": True,
            "Streak Keeper": True,
        }


class TestMoneyManagement:
    @pytest.mark.asyncio
    async def test_totals_from_transactions(self):
        now = datetime(2026, 3, 18, tzinfo=timezone.utc)
        transactions = [
            SimpleNamespace(category="food", amount=Decimal("600.00"),
                            created_at=datetime(2026, 3, 16, tzinfo=timezone.utc)),
            SimpleNamespace(category="bills", amount=Decimal("400.00"),
                            created_at=datetime(2026, 3, 9, tzinfo=timezone.utc)),
            SimpleNamespace(category="food", amount=Decimal("1200.00"),
                            created_at=datetime(2026, 3, 2, tzinfo=timezone.utc)),
        ]

        data = await _service(transactions).money_management(_user(), now=now)

        food = data["categories"][0]
        assert food["id"] == "food"
        assert food["spent"] == 1800
        assert food["limit"] == 12000
        assert food["percentage"] == 15
        # bills is budgeted but not displayed
        assert data["total_spent"] == 1800
        assert data["remaining_money"] == 28200
        assert data["spending_percentage"] == pytest.approx(6.0)
        assert [w["spending"] for w in data["weekly_trends"]] == [1200, 400, 600, 0, 0]
        assert data["transaction_count"] == 3
        assert data["last_transaction"] == datetime(2026, 3, 16, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_empty_month(self):
        data = await _service().money_management(
            _user(level="Expert"), now=datetime(2026, 2, 5, tzinfo=timezone.utc)
        )

        assert data["monthly_income"] == 60000
        assert data["total_spent"] == 0
        assert len(data["weekly_trends"]) == 4
        assert data["last_transaction"] is None


class TestPlatformStats:
    @pytest.mark.asyncio
    async def test_public_stats(self):
        stats = await _service(users=10, coins=500).platform_stats()

        assert stats == {
            "total_users": 10,
            "total_money_saved": 50000,
            "average_rating": 4.8,
            "games_completed": 55,
            "active_users": 8,
            "money_saved": 50000,
            "user_rating": 4.8,
        }

    @pytest.mark.asyncio
    async def test_signed_in_share(self):
        stats = await _service(users=3, coins=400).platform_stats(_user(coins=100))

        assert stats["games_completed"] == 16
        assert stats["your_coins"] == 100
        assert stats["your_share"] == 25.0

    @pytest.mark.asyncio
    async def test_empty_platform(self):
        stats = await _service().platform_stats(_user())

        assert stats["total_users"] == 0
        assert stats["your_share"] == 0.0
