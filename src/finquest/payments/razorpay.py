"""Razorpay gateway integration.

Wraps the Razorpay SDK client: order creation, payment lookup, refunds and
the HMAC checks for checkout callbacks and webhooks. The SDK is synchronous,
so calls run in a worker thread.
"""

import asyncio
import hashlib
import hmac
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

logger = logging.getLogger(__name__)

PAISE_PER_RUPEE = 100
TIMEOUT_MESSAGE = "Razorpay API timeout"


@dataclass
class GatewayResult:
    """Outcome of a gateway call: the gateway entity, or the error text."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None


def major_to_minor(amount: Decimal | float | int) -> int:
    """Rupees to paise, rounded half-up to a whole paisa."""
    paise = Decimal(str(amount)) * PAISE_PER_RUPEE
    return int(paise.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def minor_to_major(paise: int | str) -> Decimal:
    """Paise to rupees."""
    return (Decimal(str(paise)) / PAISE_PER_RUPEE).quantize(Decimal("0.01"))


def compute_signature(secret: str, message: str | bytes) -> str:
    """Hex HMAC-SHA256 of ``message`` keyed by ``secret``."""
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def _error_text(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


class RazorpayGateway:
    """Payment gateway facade used by the transaction service.

    Args:
        key_id: Publishable key id (handed to the checkout client)
        key_secret: API secret; also keys the checkout signature HMAC
        webhook_secret: Secret configured for webhook deliveries
        client: A ``razorpay.Client`` (or anything with the same shape)
        timeout: Seconds allowed for order creation
    """

    def __init__(
        self,
        key_id: str | None,
        key_secret: str | None,
        webhook_secret: str | None,
        client: Any,
        timeout: float = 10.0,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.client = client
        self.timeout = timeout

    async def create_order(
        self,
        amount: Decimal | float | int,
        currency: str = "INR",
        receipt: str | None = None,
        notes: dict[str, Any] | None = None,
    ) -> GatewayResult:
        """Create an auto-captured order for ``amount`` rupees.

        Gives up after ``timeout`` seconds rather than waiting on a hung
        gateway.
        """
        options = {
            "amount": major_to_minor(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
            "payment_capture": 1,
        }
        try:
            order = await asyncio.wait_for(
                asyncio.to_thread(self.client.order.create, data=options),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Razorpay order creation timed out", extra={"error": TIMEOUT_MESSAGE})
            return GatewayResult(success=False, error=TIMEOUT_MESSAGE)
        except Exception as exc:
            logger.error(
                "Razorpay order creation error",
                extra={"error_type": type(exc).__name__, "error": _error_text(exc)},
            )
            return GatewayResult(success=False, error=_error_text(exc))
        return GatewayResult(success=True, data=order)

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check a checkout callback signature.

        The gateway signs ``"<order_id>|<payment_id>"`` with the key secret.
        """
        if not self.key_secret or not signature:
            return False
        expected = compute_signature(self.key_secret, f"{order_id}|{payment_id}")
        return hmac.compare_digest(expected, signature)

    def verify_webhook_signature(self, body: bytes, signature: str | None) -> bool:
        """Check ``X-Razorpay-Signature`` against the raw request body."""
        if not self.webhook_secret:
            logger.warning("Webhook received but RAZORPAY_WEBHOOK_SECRET is not set")
            return False
        if not signature:
            return False
        expected = compute_signature(self.webhook_secret, body)
        return hmac.compare_digest(expected, signature)

    async def get_payment_details(self, payment_id: str) -> GatewayResult:
        """Fetch the gateway's own record of a payment."""
        try:
            payment = await asyncio.to_thread(self.client.payment.fetch, payment_id)
        except Exception as exc:
            logger.error(
                "Razorpay payment fetch error",
                extra={"error_type": type(exc).__name__, "error": _error_text(exc)},
            )
            return GatewayResult(success=False, error=_error_text(exc))
        return GatewayResult(success=True, data=payment)

    async def refund_payment(
        self,
        payment_id: str,
        amount: Decimal | float | int | None = None,
        notes: dict[str, Any] | None = None,
    ) -> GatewayResult:
        """Refund ``amount`` rupees of a payment, or all of it when omitted."""
        options: dict[str, Any] = {"payment_id": payment_id}
        if amount:
            options["amount"] = major_to_minor(amount)
        if notes:
            options["notes"] = notes

        try:
            refund = await asyncio.to_thread(self.client.payment.refund, payment_id, options)
        except Exception as exc:
            logger.error(
                "Razorpay refund error",
                extra={"error_type": type(exc).__name__, "error": _error_text(exc)},
            )
            return GatewayResult(success=False, error=_error_text(exc))
        return GatewayResult(success=True, data=refund)


def build_razorpay_client(key_id: str | None, key_secret: str | None) -> Any:
    """Create the SDK client for the configured credentials."""
    import razorpay

    return razorpay.Client(auth=(key_id or "", key_secret or ""))
