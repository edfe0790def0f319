"""Dashboard and budget aggregation endpoints."""

from fastapi import APIRouter, Depends

from finquest.api.deps import AuthContext, authenticate, get_financial_service, optional_auth
from finquest.schemas.common import ApiResponse
from finquest.schemas.financial import DashboardStats, MoneyManagement, PlatformStats
from finquest.services.financial import FinancialService

router = APIRouter(prefix="/financial", tags=["financial"])


@router.get(
    "/dashboard-stats",
    response_model=ApiResponse[DashboardStats],
    response_model_exclude_none=True,
    summary="Dashboard statistics",
)
async def dashboard_stats(
    auth: AuthContext = Depends(authenticate),
    financial_service: FinancialService = Depends(get_financial_service),
) -> ApiResponse[DashboardStats]:
    stats = financial_service.dashboard_stats(auth.user)
    return ApiResponse(data=DashboardStats.model_validate(stats))


@router.get(
    "/money-management",
    response_model=ApiResponse[MoneyManagement],
    response_model_exclude_none=True,
    summary="Monthly budget from real transactions",
)
async def money_management(
    auth: AuthContext = Depends(authenticate),
    financial_service: FinancialService = Depends(get_financial_service),
) -> ApiResponse[MoneyManagement]:
    """Current month's completed spending against level-scaled category limits."""
    data = await financial_service.money_management(auth.user)
    return ApiResponse(data=MoneyManagement.model_validate(data))


@router.get(
    "/platform-stats",
    response_model=ApiResponse[PlatformStats],
    response_model_exclude_none=True,
    summary="Platform-wide statistics",
    description="Public. Signed-in callers also get their own coin share.",
)
async def platform_stats(
    auth: AuthContext | None = Depends(optional_auth),
    financial_service: FinancialService = Depends(get_financial_service),
) -> ApiResponse[PlatformStats]:
    stats = await financial_service.platform_stats(auth.user if auth else None)
    return ApiResponse(data=PlatformStats.model_validate(stats))
