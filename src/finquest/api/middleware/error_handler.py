"""Global error handling.

Every failure leaves the API in the same envelope the routes use for success:
``{"success": false, "message": ..., "errors": ...}``. Internal details
(SQL, tracebacks, token contents) are logged, never returned.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from finquest.config import settings
from finquest.core.errors import get_error
from finquest.core.exceptions import ApiError

logger = logging.getLogger(__name__)

# Client-facing wording for common field failures, keyed by (field, pydantic error type).
FIELD_MESSAGES = {
    ("name", "missing"): "Name is required",
    ("name", "string_too_short"): "Name is required",
    ("name", "string_too_long"): "Name cannot exceed 50 characters",
    ("mobile", "missing"): "Mobile number is required",
    ("mobile", "string_pattern_mismatch"): "Please enter a valid 10-digit mobile number",
    ("email", "missing"): "Email is required",
    ("email", "value_error"): "Please enter a valid email address",
    ("password", "missing"): "Password is required",
    ("password", "string_too_short"): "Password must be at least 6 characters",
    ("identifier", "missing"): "Mobile number or email is required",
    ("identifier", "string_too_short"): "Mobile number or email is required",
}


def error_response(
    status_code: int, message: str, errors: Any = None, headers: dict | None = None
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "message": message}
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _context(request: Request) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "request_id": getattr(request.state, "request_id", None),
    }


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    """Handle the application's own exceptions.

    Args:
        request: The incoming request
        exc: The raised ApiError

    Returns:
        JSONResponse with the error's status and message
    """
    level = logging.WARNING if exc.http_status < 500 else logging.ERROR
    logger.log(level, f"{type(exc).__name__}: {exc.error_code}", extra={
        "error_code": exc.error_code,
        **_context(request),
    })
    return error_response(exc.http_status, exc.message, exc.errors)


def _field_name(loc: tuple | list) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI puts on locations.
    parts = [str(x) for x in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header", "cookie"):
        parts = parts[1:]
    return ".".join(parts) or "request"


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Args:
        request: The incoming request
        exc: The validation error

    Returns:
        JSONResponse with per-field messages
    """
    errors: dict[str, str] = {}
    for error in exc.errors():
        field = _field_name(error.get("loc", ()))
        message = FIELD_MESSAGES.get((field, error.get("type")), error.get("msg", "Invalid value"))
        errors.setdefault(field, message)

    extra = _context(request)
    if settings.debug:
        extra["errors"] = errors
    logger.warning(f"Validation error on {request.url.path}", extra=extra)

    return error_response(
        status.HTTP_400_BAD_REQUEST, get_error("VAL_001").message, errors
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap framework HTTP errors (unknown route, wrong method) in the envelope."""
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = get_error("HTTP_001").message
    else:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def handle_integrity_error(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle database integrity errors.

    Args:
        request: The incoming request
        exc: The integrity error

    Returns:
        JSONResponse with error details
    """
    # Do not log str(exc): it can include SQL + bound parameters.
    if settings.debug:
        logger.exception(f"Database integrity error on {request.url.path}", extra=_context(request))
    else:
        logger.error(f"Database integrity error on {request.url.path}", extra=_context(request))

    error_msg = str(exc.orig if exc.orig is not None else exc).lower()
    if "unique" in error_msg or "duplicate" in error_msg:
        definition = get_error("DB_002")
    else:
        definition = get_error("DB_001")
    return error_response(definition.http_status, definition.message)


async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Args:
        request: The incoming request
        exc: The unexpected exception

    Returns:
        JSONResponse with generic error message
    """
    extra = {"error_type": type(exc).__name__, **_context(request)}
    # In non-debug: do not log str(exc) or traceback (may include sensitive data).
    if settings.debug:
        logger.exception(f"Unexpected error on {request.url.path}", extra=extra)
    else:
        logger.error(f"Unexpected error on {request.url.path}", extra=extra)

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, get_error("SYS_001").message
    )
