"""FastAPI dependency injection for authentication, services and the gateway."""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from finquest.config import settings
from finquest.core.exceptions import AuthenticationError
from finquest.core.security import get_user_id_from_token, verify_token
from finquest.db.session import get_db
from finquest.models.user import User
from finquest.payments.razorpay import RazorpayGateway, build_razorpay_client
from finquest.repositories.transaction import TransactionRepository
from finquest.repositories.user import UserRepository
from finquest.services.auth import AuthService
from finquest.services.financial import FinancialService
from finquest.services.transaction import TransactionService
from finquest.services.user import UserService

logger = logging.getLogger(__name__)

# Missing credentials are reported by ``authenticate`` in the API's own envelope.
security = HTTPBearer(auto_error=False)


@dataclass
class AuthContext:
    """The authenticated user and the claims of the token they presented."""

    user: User
    claims: dict[str, Any]


async def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


async def get_transaction_repository(
    db: AsyncSession = Depends(get_db),
) -> TransactionRepository:
    return TransactionRepository(db)


@lru_cache
def get_payment_gateway() -> RazorpayGateway:
    """
    Get the process-wide Razorpay gateway.

    Returns:
        RazorpayGateway built from settings
    """
    return RazorpayGateway(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        webhook_secret=settings.razorpay_webhook_secret,
        client=build_razorpay_client(settings.razorpay_key_id, settings.razorpay_key_secret),
        timeout=settings.razorpay_timeout_seconds,
    )


async def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
) -> AuthService:
    return AuthService(user_repo)


async def get_user_service(
    user_repo: UserRepository = Depends(get_user_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
) -> UserService:
    return UserService(user_repo, transaction_repo)


async def get_transaction_service(
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
) -> TransactionService:
    return TransactionService(transaction_repo, gateway)


async def get_financial_service(
    user_repo: UserRepository = Depends(get_user_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
) -> FinancialService:
    return FinancialService(user_repo, transaction_repo)


async def _resolve(token: str, user_repo: UserRepository) -> AuthContext:
    try:
        claims = verify_token(token)
        user_id = get_user_id_from_token(claims)
    except (JWTError, ValueError):
        raise AuthenticationError("AUTH_002")

    user = await user_repo.get_by_id(user_id)
    if user is None:
        raise AuthenticationError("AUTH_003")
    return AuthContext(user=user, claims=claims)


async def authenticate(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    user_repo: UserRepository = Depends(get_user_repository),
) -> AuthContext:
    """
    Extract and validate the user from the bearer token.

    Args:
        request: Current request; the user id is recorded for request logging
        credentials: HTTP bearer token credentials
        user_repo: User repository for database queries

    Returns:
        AuthContext for the authenticated user

    Raises:
        AuthenticationError: If the token is missing, invalid, or its user is gone
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("AUTH_001")

    context = await _resolve(credentials.credentials, user_repo)
    request.state.user_id = context.user.id
    return context


async def optional_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    user_repo: UserRepository = Depends(get_user_repository),
) -> AuthContext | None:
    """Like ``authenticate`` but yields None instead of failing."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        context = await _resolve(credentials.credentials, user_repo)
    except AuthenticationError:
        return None
    request.state.user_id = context.user.id
    return context
