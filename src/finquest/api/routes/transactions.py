"""Payment order, verification, webhook and history endpoints."""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Request

from finquest.api.deps import AuthContext, authenticate, get_transaction_service
from finquest.core.exceptions import ValidationError
from finquest.models.transaction import PaymentMethod, TransactionCategory, TransactionStatus
from finquest.payments.razorpay import minor_to_major
from finquest.repositories.transaction import ANALYTICS_PERIODS, TransactionFilters
from finquest.schemas.common import ApiResponse, MessageResponse
from finquest.schemas.transaction import (
    CreateOrderRequest,
    OrderData,
    RefundData,
    RefundRequest,
    SpendingAnalytics,
    TransactionData,
    TransactionListData,
    TransactionResponse,
    VerifyPaymentRequest,
)
from finquest.services.transaction import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])


def parse_date_filter(value: str | None, field: str, end_of_day: bool = False) -> datetime | None:
    """
    Parse an ISO date or datetime query value into an aware UTC datetime.

    A bare date used as an upper bound covers the whole day. Naive values are
    taken as UTC.

    Raises:
        ValidationError: If the value is not an ISO date
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        label = "Start date" if field == "startDate" else "End date"
        raise ValidationError(
            "VAL_001", errors={field: f"{label} must be valid ISO date"}
        )

    if end_of_day and len(value) == 10:
        parsed = datetime.combine(date.fromisoformat(value), time.max)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_transaction_id(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError("TXN_003")


@router.post(
    "/create-order",
    response_model=ApiResponse[OrderData],
    response_model_exclude_none=True,
    summary="Create payment order",
)
async def create_order(
    data: CreateOrderRequest,
    auth: AuthContext = Depends(authenticate),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> ApiResponse[OrderData]:
    """
    Create a gateway order the client then pays through checkout.

    Raises:
        400: Invalid fields, or the gateway rejected the order
    """
    order = await transaction_service.create_order(auth.user, data)
    return ApiResponse(data=OrderData.model_validate(order))


@router.post(
    "/verify-payment",
    response_model=ApiResponse[TransactionData],
    response_model_exclude_none=True,
    summary="Verify payment and record transaction",
)
async def verify_payment(
    data: VerifyPaymentRequest,
    auth: AuthContext = Depends(authenticate),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> ApiResponse[TransactionData]:
    """
    Check the checkout signature and persist the payment as a transaction.

    Raises:
        400: Bad signature, gateway lookup failure, or payment already recorded
    """
    transaction = await transaction_service.verify_payment(auth.user, data)
    return ApiResponse(
        message="Payment verified and transaction recorded successfully",
        data=TransactionData(transaction=TransactionResponse.model_validate(transaction)),
    )


@router.post("/webhook", response_model=MessageResponse, summary="Gateway webhook")
async def webhook(
    request: Request,
    x_razorpay_signature: Annotated[str | None, Header()] = None,
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> MessageResponse:
    """Public endpoint; authenticity comes from the HMAC over the raw body."""
    body = await request.body()
    await transaction_service.handle_webhook(body, x_razorpay_signature)
    return MessageResponse(message="Webhook processed")


@router.get(
    "",
    response_model=ApiResponse[TransactionListData],
    response_model_exclude_none=True,
    summary="List transactions with filters",
)
async def list_transactions(
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Items per page (1-100)")] = 20,
    category: Annotated[TransactionCategory | None, Query()] = None,
    status_filter: Annotated[TransactionStatus | None, Query(alias="status")] = None,
    payment_method: Annotated[PaymentMethod | None, Query(alias="paymentMethod")] = None,
    start_date: Annotated[
        str | None, Query(alias="startDate", description="ISO date, inclusive")
    ] = None,
    end_date: Annotated[
        str | None, Query(alias="endDate", description="ISO date, inclusive")
    ] = None,
    auth: AuthContext = Depends(authenticate),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> ApiResponse[TransactionListData]:
    """
    The caller's transactions, newest first, with offset pagination.

    Returns:
        Page of transactions plus pagination metadata
    """
    filters = TransactionFilters(
        category=category.value if category else None,
        status=status_filter.value if status_filter else None,
        payment_method=payment_method.value if payment_method else None,
        start_date=parse_date_filter(start_date, "startDate"),
        end_date=parse_date_filter(end_date, "endDate", end_of_day=True),
    )
    result = await transaction_service.list_transactions(auth.user, page, limit, filters)
    return ApiResponse(data=TransactionListData.model_validate(result))


@router.get(
    "/analytics",
    response_model=ApiResponse[SpendingAnalytics],
    response_model_exclude_none=True,
    summary="Spending analytics by category",
)
async def analytics(
    period: Annotated[str, Query(description="week, month or year")] = "month",
    auth: AuthContext = Depends(authenticate),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> ApiResponse[SpendingAnalytics]:
    if period not in ANALYTICS_PERIODS:
        raise ValidationError(
            "VAL_001", errors={"period": "Period must be week, month, or year"}
        )
    result = await transaction_service.get_analytics(auth.user, period)
    return ApiResponse(data=SpendingAnalytics.model_validate(result))


@router.get(
    "/{transaction_id}",
    response_model=ApiResponse[TransactionData],
    response_model_exclude_none=True,
    summary="Get transaction",
)
async def get_transaction(
    transaction_id: str,
    auth: AuthContext = Depends(authenticate),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> ApiResponse[TransactionData]:
    """
    One of the caller's own transactions.

    Raises:
        400: Malformed id
        404: No such transaction for this user
    """
    transaction = await transaction_service.get_transaction(
        auth.user, parse_transaction_id(transaction_id)
    )
    return ApiResponse(
        data=TransactionData(transaction=TransactionResponse.model_validate(transaction))
    )


@router.post(
    "/{transaction_id}/refund",
    response_model=ApiResponse[RefundData],
    response_model_exclude_none=True,
    summary="Refund a payment",
)
async def refund(
    transaction_id: str,
    data: RefundRequest | None = None,
    auth: AuthContext = Depends(authenticate),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> ApiResponse[RefundData]:
    """
    Refund a completed payment in full, or partly when ``amount`` is given.

    Raises:
        400: Not completed, amount too large, or the gateway refused
        404: No such transaction for this user
    """
    amount: Decimal | None = data.amount if data else None
    refund_entity, transaction = await transaction_service.refund(
        auth.user, parse_transaction_id(transaction_id), amount
    )
    return ApiResponse(
        message="Refund initiated successfully",
        data=RefundData(
            refund_id=refund_entity["id"],
            amount=float(minor_to_major(refund_entity["amount"])),
            status=refund_entity.get("status", "pending"),
            transaction=TransactionResponse.model_validate(transaction),
        ),
    )
