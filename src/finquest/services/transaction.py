"""Payment-backed transaction workflow.

Orders are created at the gateway first; a transaction row only exists once
the checkout callback's signature has been verified. Webhooks then settle
the final status.
"""

import json
import logging
import time
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from finquest.config import settings
from finquest.core.exceptions import (
    ConflictError,
    NotFoundError,
    PaymentGatewayError,
)
from finquest.models.transaction import Transaction, TransactionStatus
from finquest.models.user import User
from finquest.payments.razorpay import RazorpayGateway, minor_to_major
from finquest.repositories.transaction import TransactionFilters, TransactionRepository
from finquest.schemas.transaction import CreateOrderRequest, VerifyPaymentRequest

logger = logging.getLogger(__name__)

WEBHOOK_STATUSES = {
    "payment.captured": TransactionStatus.COMPLETED,
    "payment.failed": TransactionStatus.FAILED,
}


def build_receipt(user_id: UUID, now_ms: int | None = None) -> str:
    """Receipt id for an order; the gateway caps receipts at 40 characters."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"txn_{now_ms}_{user_id.hex[:12]}"


def gateway_metadata(payment: dict[str, Any]) -> dict[str, Any]:
    """Method-specific details from a gateway payment entity.

    Keys whose value the gateway did not report are left out.
    """
    card = payment.get("card") or {}
    fields = {
        "upiId": payment.get("vpa") if payment.get("method") == "upi" else None,
        "bankName": payment.get("bank"),
        "cardLast4": card.get("last4"),
        "cardType": card.get("type"),
        "walletName": payment.get("wallet"),
    }
    return {key: value for key, value in fields.items() if value is not None}


class TransactionService:
    """Business logic for orders, verification, webhooks and history."""

    def __init__(self, transaction_repo: TransactionRepository, gateway: RazorpayGateway):
        self.transaction_repo = transaction_repo
        self.gateway = gateway

    async def create_order(self, user: User, data: CreateOrderRequest) -> dict[str, Any]:
        """
        Create a gateway order for an expense the user is about to pay.

        Returns:
            ``{order_id, amount, currency, receipt, key}`` for the checkout widget

        Raises:
            PaymentGatewayError: If the gateway rejects the order or times out
        """
        notes = {
            "userId": str(user.id),
            "description": data.description,
            "category": data.category.value,
            "merchant": data.merchant,
            "paymentMethod": data.payment_method.value,
        }
        result = await self.gateway.create_order(
            amount=data.amount,
            currency=settings.currency,
            receipt=build_receipt(user.id),
            notes=notes,
        )
        if not result.success:
            raise PaymentGatewayError("PAY_001", errors=result.error)

        order = result.data
        logger.info("Payment order created", extra={"user_id": user.id})
        return {
            "order_id": order["id"],
            "amount": order["amount"],
            "currency": order["currency"],
            "receipt": order["receipt"],
            "key": self.gateway.key_id,
        }

    async def verify_payment(self, user: User, data: VerifyPaymentRequest) -> Transaction:
        """
        Verify a checkout callback and record the transaction.

        The signature is checked before anything else; the amount and status
        come from the gateway's own record of the payment, never the client.

        Raises:
            PaymentGatewayError: Bad signature, or the payment cannot be fetched
            ConflictError: The payment id is already recorded
        """
        if not self.gateway.verify_signature(
            data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature
        ):
            logger.warning("Payment signature mismatch", extra={"user_id": user.id})
            raise PaymentGatewayError("PAY_002")

        result = await self.gateway.get_payment_details(data.razorpay_payment_id)
        if not result.success:
            raise PaymentGatewayError("PAY_003", errors=result.error)
        payment = result.data

        if await self.transaction_repo.get_by_payment_id(data.razorpay_payment_id):
            raise ConflictError("TXN_002")

        status = (
            TransactionStatus.COMPLETED
            if payment.get("status") == "captured"
            else TransactionStatus.PENDING
        )
        transaction = Transaction(
            user_id=user.id,
            razorpay_order_id=data.razorpay_order_id,
            razorpay_payment_id=data.razorpay_payment_id,
            razorpay_signature=data.razorpay_signature,
            amount=minor_to_major(payment["amount"]),
            currency=payment.get("currency") or settings.currency,
            status=status.value,
            description=data.description,
            category=data.category.value,
            merchant=data.merchant,
            payment_method=data.payment_method.value,
            payment_metadata={**gateway_metadata(payment), **(data.metadata or {})},
        )

        try:
            transaction = await self.transaction_repo.create(transaction)
        except IntegrityError:
            # Lost the race against a concurrent verify of the same payment.
            await self.transaction_repo.db.rollback()
            raise ConflictError("TXN_002")

        logger.info(
            f"Payment verified with status {transaction.status}",
            extra={"user_id": user.id},
        )
        return transaction

    async def handle_webhook(self, body: bytes, signature: str | None) -> str | None:
        """
        Apply a gateway webhook to the matching transaction.

        The webhook is authoritative and overwrites any earlier status.

        Returns:
            The event name when it changed a status, otherwise None

        Raises:
            PaymentGatewayError: On a bad signature or unreadable payload
        """
        if not self.gateway.verify_webhook_signature(body, signature):
            logger.warning("Webhook signature mismatch")
            raise PaymentGatewayError("PAY_004")

        try:
            event = json.loads(body)
        except ValueError:
            raise PaymentGatewayError("PAY_006")
        if not isinstance(event, dict):
            raise PaymentGatewayError("PAY_006")

        name = event.get("event")
        if not isinstance(name, str):
            raise PaymentGatewayError("PAY_006")
        status = WEBHOOK_STATUSES.get(name)
        if status is None:
            logger.info(f"Ignoring webhook event {name}")
            return None

        try:
            payment_id = event["payload"]["payment"]["entity"]["id"]
        except (KeyError, TypeError):
            raise PaymentGatewayError("PAY_006")
        if not isinstance(payment_id, str):
            raise PaymentGatewayError("PAY_006")

        updated = await self.transaction_repo.update_status_by_payment_id(
            payment_id, status.value
        )
        if not updated:
            logger.info(f"Webhook {name} for an unrecorded payment")
            return None
        logger.info(f"Webhook {name} applied")
        return name

    async def refund(
        self, user: User, transaction_id: UUID, amount: Decimal | None = None
    ) -> tuple[dict[str, Any], Transaction]:
        """
        Refund one of the user's completed payments, fully or in part.

        A full refund marks the transaction ``cancelled``; a partial one
        leaves it ``completed``.

        Returns:
            The gateway's refund entity and the (possibly updated) transaction
        """
        transaction = await self.get_transaction(user, transaction_id)
        if transaction.status != TransactionStatus.COMPLETED.value:
            raise PaymentGatewayError("PAY_008")
        if amount is not None and amount > transaction.amount:
            raise PaymentGatewayError("PAY_009")

        result = await self.gateway.refund_payment(
            transaction.razorpay_payment_id,
            amount=amount,
            notes={"transactionId": str(transaction.id)},
        )
        if not result.success:
            raise PaymentGatewayError("PAY_007", errors=result.error)

        if amount is None or amount == transaction.amount:
            transaction = await self.transaction_repo.update(
                transaction.id, {"status": TransactionStatus.CANCELLED.value}
            )
        logger.info("Payment refunded", extra={"user_id": user.id})
        return result.data, transaction

    async def list_transactions(
        self, user: User, page: int, limit: int, filters: TransactionFilters
    ) -> dict[str, Any]:
        return await self.transaction_repo.get_user_transactions(
            user.id, page=page, limit=limit, filters=filters
        )

    async def get_analytics(self, user: User, period: str) -> dict[str, Any]:
        return await self.transaction_repo.get_spending_analytics(user.id, period)

    async def get_transaction(self, user: User, transaction_id: UUID) -> Transaction:
        transaction = await self.transaction_repo.get_for_user(user.id, transaction_id)
        if transaction is None:
            raise NotFoundError("TXN_001")
        return transaction
