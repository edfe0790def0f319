"""Profile and gamification endpoints."""

from fastapi import APIRouter, Depends, Response

from finquest.api.deps import AuthContext, authenticate, get_user_service
from finquest.api.routes.auth import clear_refresh_cookie
from finquest.schemas.auth import ProfileData, UserData, UserProfile, UserSummary
from finquest.schemas.common import ApiResponse, MessageResponse
from finquest.schemas.user import CoinsData, CoinsUpdate, ProfileUpdate, QuizCompletion
from finquest.services.user import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/profile",
    response_model=ApiResponse[ProfileData],
    response_model_exclude_none=True,
    summary="Get profile",
)
async def get_profile(auth: AuthContext = Depends(authenticate)) -> ApiResponse[ProfileData]:
    return ApiResponse(data=ProfileData(user=UserProfile.model_validate(auth.user)))


@router.put(
    "/profile",
    response_model=ApiResponse[ProfileData],
    response_model_exclude_none=True,
    summary="Update profile",
    description="Only the fields present in the body are changed.",
)
async def update_profile(
    data: ProfileUpdate,
    auth: AuthContext = Depends(authenticate),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[ProfileData]:
    """
    Update name, email or gamification state.

    Raises:
        400: Email already used by another account, or invalid fields
    """
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    user = await user_service.update_profile(auth.user, changes)
    return ApiResponse(
        message="Profile updated successfully",
        data=ProfileData(user=UserProfile.model_validate(user)),
    )


@router.post(
    "/update-coins",
    response_model=ApiResponse[CoinsData],
    response_model_exclude_none=True,
    summary="Set coin balance",
)
async def update_coins(
    data: CoinsUpdate,
    auth: AuthContext = Depends(authenticate),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[CoinsData]:
    user = await user_service.update_coins(auth.user, data.coins)
    return ApiResponse(message="Coins updated successfully", data=CoinsData(coins=user.coins))


@router.post(
    "/complete-quiz",
    response_model=ApiResponse[UserData],
    response_model_exclude_none=True,
    summary="Record quiz completion",
)
async def complete_quiz(
    data: QuizCompletion,
    auth: AuthContext = Depends(authenticate),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserData]:
    user = await user_service.complete_quiz(auth.user, data.coins, data.level)
    return ApiResponse(
        message="Quiz completed successfully",
        data=UserData(user=UserSummary.model_validate(user)),
    )


@router.delete("/account", response_model=MessageResponse, summary="Delete account")
async def delete_account(
    response: Response,
    auth: AuthContext = Depends(authenticate),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Delete the account and its transactions, and end the session."""
    await user_service.delete_account(auth.user)
    clear_refresh_cookie(response)
    return MessageResponse(message="Account deleted successfully")
