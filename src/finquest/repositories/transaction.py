"""Transaction repository with filtering and aggregation queries."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from finquest.models.transaction import Transaction, TransactionStatus
from finquest.repositories.base import BaseRepository

ANALYTICS_PERIODS = ("week", "month", "year")


@dataclass
class TransactionFilters:
    """Optional filters for listing a user's transactions."""

    category: str | None = None
    status: str | None = None
    payment_method: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


def period_start(period: str, now: datetime) -> datetime:
    """Start of an analytics window ending at ``now``.

    ``week`` is a rolling seven days; ``month`` and ``year`` are calendar
    boundaries in the timezone of ``now``.
    """
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if period == "year":
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    raise ValueError(f"Unknown analytics period: {period!r}")


def round_half_up(value: Decimal | float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apportion_percentages(amounts: list[Decimal]) -> list[int]:
    """Whole-number percentage shares of ``amounts`` that never exceed 100 in total.

    Each share is the floor of its exact percentage; the points lost to flooring
    go to the largest remainders first (ties keep input order).
    """
    total = sum(amounts, Decimal("0"))
    if total <= 0:
        return [0 for _ in amounts]

    exact = [amount * 100 / total for amount in amounts]
    shares = [int(value) for value in exact]
    leftover = 100 - sum(shares)
    by_remainder = sorted(
        range(len(exact)), key=lambda i: exact[i] - shares[i], reverse=True
    )
    for i in by_remainder[:leftover]:
        if exact[i] > shares[i]:
            shares[i] += 1
    return shares


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Transaction model with filtering and analytics queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Transaction)

    async def get_for_user(self, user_id: UUID, transaction_id: UUID) -> Transaction | None:
        """Get a transaction only if it belongs to the specified user."""
        result = await self.db.execute(
            select(Transaction).where(
                Transaction.id == transaction_id, Transaction.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def get_by_payment_id(self, payment_id: str) -> Transaction | None:
        result = await self.db.execute(
            select(Transaction).where(Transaction.razorpay_payment_id == payment_id)
        )
        return result.scalar_one_or_none()

    async def update_status_by_payment_id(self, payment_id: str, status: str) -> int:
        """Set the status of the transaction recording ``payment_id``.

        Returns the number of rows touched (0 when the payment is unknown).
        """
        result = await self.db.execute(
            update(Transaction)
            .where(Transaction.razorpay_payment_id == payment_id)
            .values(status=status, updated_at=datetime.now(timezone.utc))
        )
        await self.db.commit()
        return result.rowcount or 0

    async def delete_by_user(self, user_id: UUID) -> int:
        result = await self.db.execute(
            delete(Transaction).where(Transaction.user_id == user_id)
        )
        return result.rowcount or 0

    async def get_user_transactions(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        filters: TransactionFilters | None = None,
    ) -> dict[str, Any]:
        """
        Offset-paginated, filtered transaction history, newest first.

        Returns:
            {"transactions": [...], "pagination": {current, pages, total, hasNext, hasPrev}}
        """
        filters = filters or TransactionFilters()
        query = select(Transaction).where(Transaction.user_id == user_id)

        if filters.category:
            query = query.where(Transaction.category == filters.category)
        if filters.status:
            query = query.where(Transaction.status == filters.status)
        if filters.payment_method:
            query = query.where(Transaction.payment_method == filters.payment_method)
        if filters.start_date:
            query = query.where(Transaction.created_at >= filters.start_date)
        if filters.end_date:
            query = query.where(Transaction.created_at <= filters.end_date)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        query = (
            query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        transactions = list((await self.db.execute(query)).scalars().all())

        pages = (total + limit - 1) // limit
        return {
            "transactions": transactions,
            "pagination": {
                "current": page,
                "pages": pages,
                "total": total,
                "has_next": page < pages,
                "has_prev": page > 1,
            },
        }

    async def get_spending_analytics(
        self, user_id: UUID, period: str = "month", now: datetime | None = None
    ) -> dict[str, Any]:
        """
        Aggregate completed spending in the period by category.

        Categories are sorted by amount (highest first) with their share of the
        period's total spend.
        """
        now = now or datetime.now(timezone.utc)
        start = period_start(period, now)

        result = await self.db.execute(
            select(
                Transaction.category,
                func.sum(Transaction.amount).label("total"),
                func.count(Transaction.id).label("count"),
                func.avg(Transaction.amount).label("average"),
            )
            .where(
                Transaction.user_id == user_id,
                Transaction.status == TransactionStatus.COMPLETED.value,
                Transaction.created_at >= start,
                Transaction.created_at <= now,
            )
            .group_by(Transaction.category)
        )
        rows = [
            (row.category, Decimal(str(row.total or 0)), int(row.count), row.average or 0)
            for row in result
        ]
        rows.sort(key=lambda row: row[1], reverse=True)

        total_spent = sum((row[1] for row in rows), Decimal("0"))
        percentages = apportion_percentages([row[1] for row in rows])

        return {
            "period": period,
            "total_spent": float(total_spent),
            "transaction_count": sum(row[2] for row in rows),
            "category_breakdown": [
                {
                    "category": category,
                    "amount": float(amount),
                    "count": count,
                    "average": round_half_up(average),
                    "percentage": percentage,
                }
                for (category, amount, count, average), percentage in zip(rows, percentages)
            ],
        }

    async def get_completed_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Transaction]:
        """Completed transactions created in [start, end], newest first."""
        result = await self.db.execute(
            select(Transaction)
            .where(
                Transaction.user_id == user_id,
                Transaction.status == TransactionStatus.COMPLETED.value,
                Transaction.created_at >= start,
                Transaction.created_at <= end,
            )
            .order_by(Transaction.created_at.desc())
        )
        return list(result.scalars().all())
