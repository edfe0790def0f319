"""Error codes and client-facing messages.

Each entry fixes the message and HTTP status returned for a failure so that
handlers never echo exception text (tokens, SQL, gateway internals) back to the
client.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorDefinition:
    """Definition of a single error type."""

    code: str
    message: str
    http_status: int


_DEFINITIONS = [
    # Authentication
    ErrorDefinition("AUTH_001", "Access denied. No token provided.", 401),
    ErrorDefinition("AUTH_002", "Token is not valid.", 401),
    ErrorDefinition("AUTH_003", "Token is not valid. User not found.", 401),
    ErrorDefinition("AUTH_004", "Invalid credentials", 401),
    ErrorDefinition("AUTH_005", "No refresh token provided", 401),
    ErrorDefinition("AUTH_006", "Invalid refresh token", 401),
    # Users
    ErrorDefinition("USER_001", "User with this mobile number already exists", 400),
    ErrorDefinition("USER_002", "User with this email already exists", 400),
    # Transactions / payments
    ErrorDefinition("TXN_001", "Transaction not found", 404),
    ErrorDefinition("TXN_002", "Transaction already exists.", 400),
    ErrorDefinition("TXN_003", "Invalid transaction ID", 400),
    ErrorDefinition("PAY_001", "Failed to create payment order", 400),
    ErrorDefinition("PAY_002", "Invalid payment signature", 400),
    ErrorDefinition("PAY_003", "Failed to fetch payment details", 400),
    ErrorDefinition("PAY_004", "Invalid signature", 400),
    ErrorDefinition("PAY_006", "Invalid webhook payload", 400),
    ErrorDefinition("PAY_007", "Refund failed", 400),
    ErrorDefinition("PAY_008", "Only completed transactions can be refunded", 400),
    ErrorDefinition("PAY_009", "Refund amount exceeds the transaction amount", 400),
    # Generic
    ErrorDefinition("VAL_001", "Validation Error", 400),
    ErrorDefinition("DB_001", "Database operation failed", 500),
    ErrorDefinition("DB_002", "Resource already exists", 400),
    ErrorDefinition("HTTP_001", "Resource not found", 404),
    ErrorDefinition("HTTP_002", "Request body too large", 413),
    ErrorDefinition("RATE_001", "Too many requests from this IP, please try again later.", 429),
    ErrorDefinition("SYS_001", "Internal server error", 500),
]

ERROR_CATALOG: dict[str, ErrorDefinition] = {d.code: d for d in _DEFINITIONS}

UNKNOWN_ERROR = ErrorDefinition("UNKNOWN", "An unexpected error occurred.", 500)


def get_error(error_code: str) -> ErrorDefinition:
    """Get error definition by code, falling back to a generic 500."""
    return ERROR_CATALOG.get(error_code, UNKNOWN_ERROR)


def get_message(error_code: str) -> str:
    return get_error(error_code).message
