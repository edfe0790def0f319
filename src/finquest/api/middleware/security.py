"""Response hardening headers and request body size limit."""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from finquest.api.middleware.error_handler import error_response
from finquest.core.errors import get_error

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}
HSTS_HEADER = ("Strict-Transport-Security", "max-age=15552000; includeSubDomains")


def _declared_length(request: Request) -> int | None:
    value = request.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add hardening headers to every response and refuse oversized bodies with 413.

    Args:
        max_body_bytes: Largest accepted ``Content-Length``
        hsts: Also send ``Strict-Transport-Security`` (production only)
    """

    def __init__(self, app, max_body_bytes: int, hsts: bool = False):
        super().__init__(app)
        self.max_body_bytes = max_body_bytes
        self.headers = dict(SECURITY_HEADERS)
        if hsts:
            self.headers[HSTS_HEADER[0]] = HSTS_HEADER[1]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        length = _declared_length(request)
        if length is not None and length > self.max_body_bytes:
            logger.warning(
                "Request body too large",
                extra={"path": request.url.path, "content_length": length},
            )
            definition = get_error("HTTP_002")
            response = error_response(definition.http_status, definition.message)
        else:
            response = await call_next(request)

        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
