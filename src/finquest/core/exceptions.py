"""Exception hierarchy mapped onto the JSON error envelope.

Services raise these; the handlers in ``api.middleware.error_handler`` turn
them into ``{"success": false, "message": ..., "errors": ...}`` responses.
"""

from typing import Any

from finquest.core.errors import get_error


class ApiError(Exception):
    """Base exception for all client-visible failures.

    Attributes:
        error_code: Code from the error catalog (e.g., "AUTH_001")
        message: Message returned to the client (defaults to the catalog's)
        http_status: HTTP status code (defaults to the catalog's)
        errors: Optional structured detail (per-field messages, gateway text)
    """

    def __init__(
        self,
        error_code: str,
        message: str | None = None,
        errors: Any = None,
        http_status: int | None = None,
    ):
        definition = get_error(error_code)
        self.error_code = error_code
        self.message = message or definition.message
        self.http_status = http_status or definition.http_status
        self.errors = errors
        super().__init__(self.message)


class ValidationError(ApiError):
    """Request data failed a business rule not expressible in the schema."""


class AuthenticationError(ApiError):
    """Missing, invalid, expired or revoked credentials."""


class NotFoundError(ApiError):
    pass


class ConflictError(ApiError):
    """Duplicate user or transaction."""


class PaymentGatewayError(ApiError):
    """The payment gateway rejected a call or the payment failed verification.

    ``errors`` carries the gateway's error text when there is one.
    """
