import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from finquest import __version__
from finquest.api.middleware.error_handler import (
    handle_api_error,
    handle_generic_error,
    handle_http_exception,
    handle_integrity_error,
    handle_validation_error,
)
from finquest.api.middleware.logging import RequestLoggingMiddleware, setup_logging
from finquest.api.middleware.rate_limit import RateLimitMiddleware
from finquest.api.middleware.security import SecurityHeadersMiddleware
from finquest.api.routes import router as api_router
from finquest.api.routes.health import router as health_router
from finquest.config import settings
from finquest.core.exceptions import ApiError
from finquest.db.session import async_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: refuse to serve without a database.
    async with async_engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Database connection established")

    if not (settings.razorpay_key_id and settings.razorpay_key_secret):
        logger.warning("Razorpay credentials are not configured; payments will fail")
    if not settings.razorpay_webhook_secret:
        logger.warning("RAZORPAY_WEBHOOK_SECRET is not set; webhooks will be rejected")

    yield
    # Shutdown
    await async_engine.dispose()


def create_app() -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(
        title="FinQuest API",
        description="Gamified personal finance: auth, progress, budgets and verified payments",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # The last middleware added is outermost: gzip, CORS, security headers, logging,
    # then rate limiting.
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_max_requests,
        window_ms=settings.rate_limit_window_ms,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        SecurityHeadersMiddleware,
        max_body_bytes=settings.max_body_bytes,
        hsts=settings.is_production,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("finquest.main:app", host=settings.host, port=settings.port)
