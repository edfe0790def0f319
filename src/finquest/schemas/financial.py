"""Response schemas for dashboard and money-management aggregates."""

from datetime import datetime

from finquest.schemas.common import CamelModel


class ExpenseCategory(CamelModel):
    name: str
    spent: int
    limit: int
    percentage: int
    color: str


class RecentActivity(CamelModel):
    type: str
    title: str
    amount: str
    time: str
    icon: str


class SavingsGoal(CamelModel):
    name: str
    current: int
    target: int
    color: str


class WeeklyTrend(CamelModel):
    week: str
    spending: int
    limit: int


class Achievement(CamelModel):
    name: str
    description: str
    earned: bool
    icon: str


class ExpensePoint(CamelModel):
    month: str
    income: float
    expense: int


class CategoryPoint(CamelModel):
    name: str
    value: int
    color: str


class DashboardStats(CamelModel):
    total_income: int
    total_expense: int
    total_savings: int
    savings_rate: float
    streak: int
    expense_categories: list[ExpenseCategory]
    recent_activities: list[RecentActivity]
    savings_goals: list[SavingsGoal]
    weekly_trends: list[WeeklyTrend]
    achievements: list[Achievement]
    expense_data: list[ExpensePoint]
    category_data: list[CategoryPoint]


class BudgetCategory(CamelModel):
    id: str
    name: str
    icon: str
    color: str
    spent: int
    limit: int
    percentage: int


class MoneyManagement(CamelModel):
    monthly_income: int
    categories: list[BudgetCategory]
    total_spent: int
    remaining_money: int
    spending_percentage: float
    weekly_trends: list[WeeklyTrend]
    transaction_count: int
    last_transaction: datetime | None = None


class PlatformStats(CamelModel):
    total_users: int
    total_money_saved: int
    average_rating: float
    games_completed: int
    active_users: int
    money_saved: int
    user_rating: float
    your_coins: int | None = None
    your_share: float | None = None
