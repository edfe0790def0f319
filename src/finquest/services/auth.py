"""Authentication service with business logic."""

import logging
from dataclasses import dataclass

from jose import JWTError

from finquest.core.exceptions import AuthenticationError, ConflictError
from finquest.core.security import (
    generate_refresh_token,
    generate_token,
    get_user_id_from_token,
    hash_password,
    verify_password,
    verify_refresh_token,
)
from finquest.models.user import User
from finquest.repositories.user import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthSession:
    """A user together with a freshly issued token pair."""

    user: User
    access_token: str
    refresh_token: str


class AuthService:
    """Service for authentication operations."""

    def __init__(self, user_repo: UserRepository):
        """
        Initialize authentication service.

        Args:
            user_repo: User repository for database operations
        """
        self.user_repo = user_repo

    async def register(self, name: str, mobile: str, email: str, password: str) -> AuthSession:
        """
        Register a new user and open a session for them.

        Args:
            name: Display name
            mobile: 10-digit mobile number
            email: Email address (stored lower-cased)
            password: Plain text password

        Returns:
            The created user with access and refresh tokens

        Raises:
            ConflictError: If the mobile number or email is already registered
        """
        existing = await self.user_repo.find_conflict(mobile, email)
        if existing is not None:
            code = "USER_001" if existing.mobile == mobile else "USER_002"
            raise ConflictError(code)

        user = User(
            name=name,
            mobile=mobile,
            email=email.lower(),
            password_hash=hash_password(password),
            coins=0,
            refresh_tokens=[],
        )
        user = await self.user_repo.create(user)
        logger.info("User registered", extra={"user_id": user.id})
        return await self._open_session(user)

    async def login(self, identifier: str, password: str) -> AuthSession:
        """
        Authenticate by mobile number or email.

        Unknown identifiers and wrong passwords fail identically.

        Raises:
            AuthenticationError: If credentials are invalid
        """
        user = await self.user_repo.get_by_identifier(identifier)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed")
            raise AuthenticationError("AUTH_004")

        logger.info("User logged in", extra={"user_id": user.id})
        return await self._open_session(user)

    async def logout(self, user: User, refresh_token: str | None) -> None:
        """Revoke the session's refresh token when it is one of the user's."""
        if refresh_token:
            await self.user_repo.remove_refresh_token(user, refresh_token)
        logger.info("User logged out", extra={"user_id": user.id})

    async def refresh(self, refresh_token: str | None) -> str:
        """
        Issue a new access token for a stored, valid refresh token.

        The refresh token itself is not rotated.

        Raises:
            AuthenticationError: If the token is missing, invalid, expired or revoked
        """
        if not refresh_token:
            raise AuthenticationError("AUTH_005")

        try:
            payload = verify_refresh_token(refresh_token)
            user_id = get_user_id_from_token(payload)
        except (JWTError, ValueError):
            raise AuthenticationError("AUTH_006")

        user = await self.user_repo.get_by_id(user_id)
        if user is None or refresh_token not in (user.refresh_tokens or []):
            raise AuthenticationError("AUTH_006")

        return generate_token(user.id, user.mobile)

    async def _open_session(self, user: User) -> AuthSession:
        access_token = generate_token(user.id, user.mobile)
        refresh_token = generate_refresh_token(user.id)
        user = await self.user_repo.add_refresh_token(user, refresh_token)
        return AuthSession(user=user, access_token=access_token, refresh_token=refresh_token)
