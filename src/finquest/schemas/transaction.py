"""Pydantic schemas for payment-backed transactions."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, Field, field_validator

from finquest.models.transaction import (
    PaymentMethod,
    TransactionCategory,
    TransactionStatus,
)
from finquest.schemas.common import CamelModel


class ExpenseDetails(CamelModel):
    """What the payment is for; shared by order creation and verification."""

    description: str = Field(..., min_length=1, max_length=500)
    category: TransactionCategory
    merchant: str = Field(..., min_length=1, max_length=100)
    payment_method: PaymentMethod
    metadata: dict[str, Any] | None = Field(
        None, description="Payment-method specific details supplied by the client"
    )

    @field_validator("description", "merchant")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be blank")
        return value


class CreateOrderRequest(ExpenseDetails):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Amount in rupees")


class VerifyPaymentRequest(ExpenseDetails):
    """Checkout callback fields; both ``razorpay*`` and short names are accepted."""

    razorpay_order_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("razorpayOrderId", "orderId")
    )
    razorpay_payment_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("razorpayPaymentId", "paymentId")
    )
    razorpay_signature: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("razorpaySignature", "signature")
    )


class OrderData(CamelModel):
    order_id: str
    amount: int = Field(..., description="Order amount in paise")
    currency: str
    receipt: str
    key: str | None = Field(None, description="Publishable key for the checkout widget")


class TransactionResponse(CamelModel):
    id: UUID
    user_id: UUID
    razorpay_order_id: str
    razorpay_payment_id: str
    amount: float
    currency: str
    status: TransactionStatus
    description: str
    category: TransactionCategory
    merchant: str
    payment_method: PaymentMethod
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("payment_metadata", "metadata")
    )
    created_at: datetime
    updated_at: datetime


class TransactionData(CamelModel):
    transaction: TransactionResponse


class PaginationMeta(CamelModel):
    current: int
    pages: int
    total: int
    has_next: bool
    has_prev: bool


class TransactionListData(CamelModel):
    transactions: list[TransactionResponse]
    pagination: PaginationMeta


class CategoryBreakdown(CamelModel):
    category: str
    amount: float
    count: int
    average: int
    percentage: int


class SpendingAnalytics(CamelModel):
    period: str
    total_spent: float
    transaction_count: int
    category_breakdown: list[CategoryBreakdown]


class RefundRequest(CamelModel):
    amount: Decimal | None = Field(
        None, gt=0, max_digits=12, decimal_places=2, description="Rupees to refund; omit for a full refund"
    )


class RefundData(CamelModel):
    refund_id: str
    amount: float
    status: str
    transaction: TransactionResponse
