"""
포인트 API 라우터

사용자용 엔드포인트:
- GET /points/balance: 내 포인트 원장 (없으면 생성)
- GET /points/transactions: 최근 거래 내역
- POST /points/spend: 포인트 사용
- GET /points/integrity/my: 내 원장 정합성 검증

관리자용 엔드포인트:
- POST /points/admin/award: 포인트 지급 (MANAGE_USERS)
- GET /points/admin/integrity/{user_id}: 사용자 원장 정합성 검증 (VIEW_ANALYTICS)
"""

from fastapi import APIRouter, Depends, Path, Query

from citizenapi.core.auth_middleware import get_current_user
from citizenapi.core.rbac import Permission, require_permission
from citizenapi.dependencies import get_point_service
from citizenapi.schemas.points import (
    CitizenPointsResponse,
    PointsIntegrityCheckResponse,
    PointsTransactionRequest,
    PointsTransactionResponse,
    PointTransactionListResponse,
)
from citizenapi.schemas.user import CurrentUser
from citizenapi.services.point_service import PointService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/points", tags=["points"])


@router.get("/balance", response_model=CitizenPointsResponse)
async def get_my_balance(
    current_user: CurrentUser = Depends(get_current_user),
    point_service: PointService = Depends(get_point_service),
) -> CitizenPointsResponse:
    """
    내 포인트 원장 조회 - 최초 조회 시 환영 포인트와 함께 생성

    HTTP Status:
        200: 성공
        401: 인증 실패
        503: 데이터 저장소 오류
    """
    return point_service.get_or_create_ledger(current_user.user_id)


@router.get("/transactions", response_model=PointTransactionListResponse)
async def get_my_transactions(
    limit: int = Query(20, ge=1, le=100, description="조회 개수"),
    current_user: CurrentUser = Depends(get_current_user),
    point_service: PointService = Depends(get_point_service),
) -> PointTransactionListResponse:
    """내 최근 거래 내역 (최신순)"""
    return point_service.get_user_transactions(current_user.user_id, limit=limit)


@router.post("/spend", response_model=PointsTransactionResponse)
async def spend_points(
    request: PointsTransactionRequest,
    current_user: CurrentUser = Depends(require_permission(Permission.SPEND_POINTS)),
    point_service: PointService = Depends(get_point_service),
) -> PointsTransactionResponse:
    """
    포인트 사용

    HTTP Status:
        200: 성공
        400: 잔액 부족 (BALANCE_001)
        404: 원장 없음
        422: amount 가 양수가 아님
    """
    return point_service.spend(
        current_user.user_id,
        request.amount,
        request.reason,
        reference_id=request.reference_id,
        reference_type=request.reference_type,
    )


@router.get("/integrity/my", response_model=PointsIntegrityCheckResponse)
async def verify_my_integrity(
    current_user: CurrentUser = Depends(get_current_user),
    point_service: PointService = Depends(get_point_service),
) -> PointsIntegrityCheckResponse:
    """내 원장 카운터와 거래 이력 합계 비교"""
    return point_service.verify_integrity(current_user.user_id)


@router.post("/admin/award", response_model=PointsTransactionResponse)
async def admin_award_points(
    request: PointsTransactionRequest,
    user_id: str = Query(..., min_length=1, description="대상 사용자 ID"),
    admin: CurrentUser = Depends(require_permission(Permission.MANAGE_USERS)),
    point_service: PointService = Depends(get_point_service),
) -> PointsTransactionResponse:
    """관리자 포인트 지급 - 대상 원장이 없으면 404"""
    logger.info(f"Admin {admin.user_id} awarding {request.amount} points to {user_id}")
    return point_service.award(
        user_id,
        request.amount,
        request.reason,
        reference_id=request.reference_id,
        reference_type=request.reference_type,
    )


@router.get("/admin/integrity/{user_id}", response_model=PointsIntegrityCheckResponse)
async def admin_verify_integrity(
    user_id: str = Path(..., min_length=1),
    admin: CurrentUser = Depends(require_permission(Permission.VIEW_ANALYTICS)),
    point_service: PointService = Depends(get_point_service),
) -> PointsIntegrityCheckResponse:
    return point_service.verify_integrity(user_id)
