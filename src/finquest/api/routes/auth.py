"""Authentication endpoints for registration, login and session renewal."""

from fastapi import APIRouter, Cookie, Depends, Response, status

from finquest.api.deps import AuthContext, authenticate, get_auth_service
from finquest.config import settings
from finquest.schemas.auth import (
    AuthData,
    LoginRequest,
    TokenData,
    UserData,
    UserRegister,
    UserSummary,
)
from finquest.schemas.common import ApiResponse, MessageResponse
from finquest.services.auth import AuthService, AuthSession

router = APIRouter(prefix="/auth", tags=["authentication"])

REFRESH_COOKIE = "refreshToken"


def set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=token,
        max_age=int(settings.refresh_token_lifetime.total_seconds()),
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _session_response(
    session: AuthSession, response: Response, message: str
) -> ApiResponse[AuthData]:
    set_refresh_cookie(response, session.refresh_token)
    return ApiResponse(
        message=message,
        data=AuthData(
            user=UserSummary.model_validate(session.user), token=session.access_token
        ),
    )


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
)
async def register(
    data: UserRegister,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthData]:
    """
    Create an account and sign the new user in.

    Raises:
        400: Mobile number or email already registered, or invalid fields
    """
    session = await auth_service.register(
        name=data.name,
        mobile=data.mobile,
        email=data.email,
        password=data.password,
    )
    return _session_response(session, response, "User registered successfully")


@router.post(
    "/login",
    response_model=ApiResponse[AuthData],
    response_model_exclude_none=True,
    summary="User login",
    description="Authenticate with mobile number or email and password.",
)
async def login(
    data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthData]:
    """
    Authenticate and return an access token; the refresh token goes in a cookie.

    Raises:
        401: Invalid credentials
    """
    session = await auth_service.login(identifier=data.identifier, password=data.password)
    return _session_response(session, response, "Login successful")


@router.post("/logout", response_model=MessageResponse, summary="User logout")
async def logout(
    response: Response,
    auth: AuthContext = Depends(authenticate),
    refresh_token: str | None = Cookie(None, alias=REFRESH_COOKIE),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.logout(auth.user, refresh_token)
    clear_refresh_cookie(response)
    return MessageResponse(message="Logout successful")


@router.post(
    "/refresh",
    response_model=ApiResponse[TokenData],
    response_model_exclude_none=True,
    summary="Refresh access token",
)
async def refresh(
    refresh_token: str | None = Cookie(None, alias=REFRESH_COOKIE),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[TokenData]:
    """
    Issue a new access token from the refresh-token cookie.

    Raises:
        401: Cookie missing, or token invalid, expired or revoked
    """
    token = await auth_service.refresh(refresh_token)
    return ApiResponse(data=TokenData(token=token))


@router.get(
    "/me",
    response_model=ApiResponse[UserData],
    response_model_exclude_none=True,
    summary="Get current user",
)
async def get_me(auth: AuthContext = Depends(authenticate)) -> ApiResponse[UserData]:
    return ApiResponse(data=UserData(user=UserSummary.model_validate(auth.user)))
