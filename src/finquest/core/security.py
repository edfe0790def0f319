"""Security utilities for password hashing and JWT token management."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from finquest.config import settings

# Password hashing with bcrypt; cost comes from BCRYPT_ROUNDS.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        plain_password: Password to verify
        hashed_password: Stored password hash

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def generate_token(
    user_id: UUID, mobile: str, expires_delta: timedelta | None = None
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User ID to encode in token
        mobile: User's mobile number, carried as a claim
        expires_delta: Optional custom expiration time (default JWT_EXPIRE)

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = settings.access_token_lifetime

    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {
        "sub": str(user_id),
        "mobile": mobile,
        "exp": expire,
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def generate_refresh_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT refresh token.

    Signed with the refresh secret so an access token can never pass as one.
    The ``jti`` claim keeps tokens issued within the same second distinct.

    Args:
        user_id: User ID to encode in token
        expires_delta: Optional custom expiration time (default JWT_REFRESH_EXPIRE)

    Returns:
        Encoded JWT refresh token string
    """
    if expires_delta is None:
        expires_delta = settings.refresh_token_lifetime

    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "type": REFRESH_TOKEN_TYPE,
        "jti": uuid4().hex,
    }
    return jwt.encode(
        to_encode, settings.jwt_refresh_secret, algorithm=settings.jwt_algorithm
    )


def _decode(token: str, secret: str, expected_type: str) -> dict[str, Any]:
    payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    if payload.get("sub") is None:
        raise JWTError("Token missing 'sub' claim")
    return payload


def verify_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        JWTError: If token is invalid, expired or not an access token
    """
    return _decode(token, settings.jwt_secret, ACCESS_TOKEN_TYPE)


def verify_refresh_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a refresh token.

    Raises:
        JWTError: If token is invalid, expired or not a refresh token
    """
    return _decode(token, settings.jwt_refresh_secret, REFRESH_TOKEN_TYPE)


def get_user_id_from_token(payload: dict[str, Any]) -> UUID:
    """
    Extract user ID from a verified token payload.

    Raises:
        ValueError: If user ID is not a valid UUID
    """
    return UUID(payload["sub"])
