"""
리워드 API 라우터

- GET /rewards: 리워드 카탈로그 (로그인 불필요, 비활성 포함 조회는 MANAGE_REWARDS)
- POST /rewards/{reward_id}/redeem: 포인트로 리워드 교환
- GET /rewards/redemptions: 내 교환 내역
- POST /rewards/redemptions/{redemption_id}/cancel: 교환 취소 (포인트 환불)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from citizenapi.core.auth_middleware import get_current_user, get_current_user_optional
from citizenapi.core.exceptions import AuthorizationError
from citizenapi.core.rbac import Permission, has_permission, require_permission
from citizenapi.dependencies import get_reward_service
from citizenapi.models.rewards import RewardCategory
from citizenapi.schemas.rewards import (
    RewardCatalogResponse,
    RewardRedemptionHistoryResponse,
    RewardRedemptionRequest,
    RewardRedemptionResponse,
)
from citizenapi.schemas.user import CurrentUser
from citizenapi.services.reward_service import RewardService

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("", response_model=RewardCatalogResponse)
async def get_reward_catalog(
    category: Optional[RewardCategory] = Query(None, description="카테고리 필터"),
    active_only: bool = Query(True, description="활성 리워드만 조회"),
    current_user: Optional[CurrentUser] = Depends(get_current_user_optional),
    reward_service: RewardService = Depends(get_reward_service),
) -> RewardCatalogResponse:
    """
    리워드 카탈로그

    HTTP Status:
        200: 성공
        403: active_only=false 인데 MANAGE_REWARDS 권한 없음
    """
    if not active_only and not (
        current_user and has_permission(current_user.role, Permission.MANAGE_REWARDS)
    ):
        raise AuthorizationError(
            f"Permission '{Permission.MANAGE_REWARDS.value}' required to list inactive rewards"
        )
    return reward_service.list_rewards(category=category, active_only=active_only)


@router.post("/{reward_id}/redeem", response_model=RewardRedemptionResponse)
async def redeem_reward(
    reward_id: int = Path(..., ge=1),
    request: Optional[RewardRedemptionRequest] = None,
    current_user: CurrentUser = Depends(require_permission(Permission.SPEND_POINTS)),
    reward_service: RewardService = Depends(get_reward_service),
) -> RewardRedemptionResponse:
    """
    리워드 교환

    HTTP Status:
        200: 교환 성공 (PENDING)
        400: 잔액 부족 / 재고 없음
        404: 리워드 없음
    """
    delivery_info = request.delivery_info if request else None
    return reward_service.redeem_reward(current_user.user_id, reward_id, delivery_info)


@router.get("/redemptions", response_model=RewardRedemptionHistoryResponse)
async def get_my_redemptions(
    current_user: CurrentUser = Depends(get_current_user),
    reward_service: RewardService = Depends(get_reward_service),
) -> RewardRedemptionHistoryResponse:
    return reward_service.list_redemptions(current_user.user_id)


@router.post(
    "/redemptions/{redemption_id}/cancel", response_model=RewardRedemptionResponse
)
async def cancel_redemption(
    redemption_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    reward_service: RewardService = Depends(get_reward_service),
) -> RewardRedemptionResponse:
    return reward_service.cancel_redemption(current_user.user_id, redemption_id)
