"""Dashboard, budget and platform aggregates.

Figures scale with the user's level: higher levels simulate a larger income
and proportionally larger budgets.
"""

import calendar
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from finquest.models.user import User, UserLevel
from finquest.repositories.transaction import TransactionRepository, as_utc, round_half_up
from finquest.repositories.user import UserRepository

LEVEL_MULTIPLIERS = {
    UserLevel.BEGINNER.value: 1.0,
    UserLevel.INTERMEDIATE.value: 1.3,
    UserLevel.ADVANCED.value: 1.6,
    UserLevel.EXPERT.value: 2.0,
}

BASE_INCOME = 30000
INCOME_PER_COIN = 50
PLATFORM_RATING = 4.8
GAMES_PER_USER = 5.5
ACTIVE_USER_RATIO = 0.8
SAVINGS_PER_COIN = 100


@dataclass(frozen=True)
class CategoryStyle:
    id: str
    name: str
    icon: str
    color: str


# Categories shown on the dashboard and budget screens, in display order.
DISPLAY_CATEGORIES = [
    CategoryStyle("food", "Food & Dining", "Utensils", "#10b981"),
    CategoryStyle("entertainment", "Entertainment", "Sparkles", "#8b5cf6"),
    CategoryStyle("travel", "Travel", "Plane", "#3b82f6"),
    CategoryStyle("shopping", "Shopping", "ShoppingBag", "#ec4899"),
    CategoryStyle("savings", "Savings & Investment", "TrendingUp", "#059669"),
    CategoryStyle("insurance", "Insurance", "Shield", "#0ea5e9"),
    CategoryStyle("emergency", "Emergency Fund", "Heart", "#ef4444"),
    CategoryStyle("misc", "Miscellaneous", "MoreHorizontal", "#f59e0b"),
]

# Monthly budget per category at multiplier 1.0.
CATEGORY_LIMITS = {
    "food": 12000,
    "entertainment": 5000,
    "travel": 6000,
    "shopping": 8000,
    "savings": 10000,
    "insurance": 3000,
    "emergency": 5000,
    "misc": 4000,
    "bills": 5000,
    "healthcare": 3000,
    "education": 4000,
    "transport": 2000,
    "utilities": 3000,
    "subscriptions": 2000,
}

# Sample dashboard spending (spent, percentage) per displayed category.
DASHBOARD_SPENDING = {
    "food": (8500, 71),
    "entertainment": (3200, 64),
    "travel": (4500, 75),
    "shopping": (9800, 122),
    "savings": (5000, 50),
    "insurance": (2000, 67),
    "emergency": (1500, 30),
    "misc": (2300, 58),
}

SAVINGS_GOALS = [
    ("Emergency Fund", 45000, 100000, "green"),
    ("Vacation", 15000, 50000, "blue"),
    ("New Laptop", 35000, 80000, "purple"),
]

WEEKLY_SPENDING = [8500, 9200, 11200, 8100]
WEEKLY_LIMIT = 10000


def level_multiplier(level: str) -> float:
    """Budget multiplier for a level; unknown levels count as Beginner."""
    return LEVEL_MULTIPLIERS.get(level, 1.0)


def monthly_income(coins: int, multiplier: float) -> int:
    return round_half_up((BASE_INCOME + coins * INCOME_PER_COIN) * multiplier)


def login_streak(coins: int) -> int:
    return min(30, coins // 10 + 7)


def _scaled(value: int, multiplier: float) -> int:
    return round_half_up(value * multiplier)


def format_rupees(amount: int) -> str:
    return f"₹{amount:,}"


def month_bounds(now: datetime) -> tuple[datetime, datetime]:
    """First and last instant of the calendar month containing ``now``."""
    days = calendar.monthrange(now.year, now.month)[1]
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(day=days, hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def weekly_buckets(
    amounts_by_day: list[tuple[int, Decimal]], days_in_month: int, income: int
) -> list[dict[str, Any]]:
    """Split a month's spending into day-of-month weeks (days 1-7, 8-14, ...).

    The monthly income is spread evenly across the weeks as each week's limit.
    """
    weeks = math.ceil(days_in_month / 7)
    spending = [Decimal("0")] * weeks
    for day, amount in amounts_by_day:
        spending[(day - 1) // 7] += amount
    week_limit = round_half_up(Decimal(income) / weeks)
    return [
        {"week": f"Week {i + 1}", "spending": round_half_up(total), "limit": week_limit}
        for i, total in enumerate(spending)
    ]


def budget_percentage(spent: Decimal, limit: float) -> int:
    if spent <= 0 or limit <= 0:
        return 0
    return round_half_up(spent / Decimal(str(limit)) * 100)


class FinancialService:
    def __init__(self, user_repo: UserRepository, transaction_repo: TransactionRepository):
        self.user_repo = user_repo
        self.transaction_repo = transaction_repo

    def dashboard_stats(self, user: User) -> dict[str, Any]:
        """
        Simulated dashboard figures for the user's level and coin balance.

        No transactions are read; the numbers are a teaching aid that grows
        with the user's progress.
        """
        multiplier = level_multiplier(user.level)
        income = monthly_income(user.coins, multiplier)

        expense_categories = [
            {
                "name": style.name,
                "spent": _scaled(DASHBOARD_SPENDING[style.id][0], multiplier),
                "limit": _scaled(CATEGORY_LIMITS[style.id], multiplier),
                "percentage": DASHBOARD_SPENDING[style.id][1],
                "color": style.color,
            }
            for style in DISPLAY_CATEGORIES
        ]
        total_expense = sum(category["spent"] for category in expense_categories)
        total_savings = income - total_expense
        savings_rate = total_savings / income * 100 if income else 0.0

        weekly_trends = [
            {
                "week": f"Week {i + 1}",
                "spending": _scaled(spending, multiplier),
                "limit": _scaled(WEEKLY_LIMIT, multiplier),
            }
            for i, spending in enumerate(WEEKLY_SPENDING)
        ]
        streak = login_streak(user.coins)

        return {
            "total_income": income,
            "total_expense": total_expense,
            "total_savings": total_savings,
            "savings_rate": savings_rate,
            "streak": streak,
            "expense_categories": expense_categories,
            "recent_activities": [
                {"type": "expense", "title": "Coffee Shop", "amount": format_rupees(250),
                 "time": "2 hours ago", "icon": "CreditCard"},
                {"type": "income", "title": "Salary Credited", "amount": format_rupees(income),
                 "time": "Today", "icon": "DollarSign"},
                {"type": "achievement", "title": 'Earned "Saver" Badge', "amount": "+100 coins",
                 "time": "Yesterday", "icon": "Trophy"},
            ],
            "savings_goals": [
                {
                    "name": name,
                    "current": _scaled(current, multiplier),
                    "target": _scaled(target, multiplier),
                    "color": color,
                }
                for name, current, target, color in SAVINGS_GOALS
            ],
            "weekly_trends": weekly_trends,
            "achievements": [
                {"name": "First Saver", "description": "Saved your first ₹1000",
                 "earned": user.coins > 50, "icon": "Trophy"},
                {"name": "Quiz Master", "description": "Completed 5 quizzes",
                 "earned": bool(user.completed_quiz), "icon": "Brain"},
                {"name": "Goal Crusher", "description": "Achieved 3 savings goals",
                 "earned": user.coins > 200, "icon": "Target"},
                {"name": "Streak Keeper", "description": "7-day login streak",
                 "earned": streak >= 7, "icon": "Flame"},
            ],
            "expense_data": [
                {"month": week["week"], "income": income / 4, "expense": week["spending"]}
                for week in weekly_trends
            ],
            "category_data": [
                {"name": category["name"], "value": category["spent"], "color": category["color"]}
                for category in expense_categories
            ],
        }

    async def money_management(self, user: User, now: datetime | None = None) -> dict[str, Any]:
        """
        Budget view of the current month built from completed transactions.

        Spending in the eight displayed categories counts towards the totals;
        every completed transaction counts towards the weekly trend.
        """
        now = now or datetime.now(timezone.utc)
        multiplier = level_multiplier(user.level)
        income = monthly_income(user.coins, multiplier)
        start, end = month_bounds(now)

        transactions = await self.transaction_repo.get_completed_between(user.id, start, end)

        spent_by_category = {category: Decimal("0") for category in CATEGORY_LIMITS}
        for transaction in transactions:
            if transaction.category in spent_by_category:
                spent_by_category[transaction.category] += Decimal(transaction.amount)

        categories = []
        for style in DISPLAY_CATEGORIES:
            spent = spent_by_category[style.id]
            limit = CATEGORY_LIMITS[style.id] * multiplier
            categories.append({
                "id": style.id,
                "name": style.name,
                "icon": style.icon,
                "color": style.color,
                "spent": round_half_up(spent),
                "limit": round_half_up(limit),
                "percentage": budget_percentage(spent, limit),
            })

        total_spent = sum(category["spent"] for category in categories)
        days_in_month = calendar.monthrange(now.year, now.month)[1]
        weekly_trends = weekly_buckets(
            [(as_utc(t.created_at).day, Decimal(t.amount)) for t in transactions],
            days_in_month,
            income,
        )

        return {
            "monthly_income": income,
            "categories": categories,
            "total_spent": total_spent,
            "remaining_money": income - total_spent,
            "spending_percentage": total_spent / income * 100 if income > 0 else 0.0,
            "weekly_trends": weekly_trends,
            "transaction_count": len(transactions),
            "last_transaction": as_utc(transactions[0].created_at) if transactions else None,
        }

    async def platform_stats(self, user: User | None = None) -> dict[str, Any]:
        """Platform-wide counters, plus the caller's share of coins when signed in."""
        total_users = await self.user_repo.count()
        total_coins = await self.user_repo.total_coins()
        money_saved = total_coins * SAVINGS_PER_COIN

        stats: dict[str, Any] = {
            "total_users": total_users,
            "total_money_saved": money_saved,
            "average_rating": PLATFORM_RATING,
            "games_completed": math.floor(total_users * GAMES_PER_USER),
            "active_users": math.floor(total_users * ACTIVE_USER_RATIO),
            "money_saved": money_saved,
            "user_rating": PLATFORM_RATING,
        }
        if user is not None:
            stats["your_coins"] = user.coins
            stats["your_share"] = (
                round(user.coins / total_coins * 100, 2) if total_coins else 0.0
            )
        return stats
