"""
알림 API 라우터

- GET /notifications/unread: 읽지 않은 알림 목록 + 개수
- POST /notifications: 내 알림 생성
- POST /notifications/{notification_id}/read: 읽음 처리
- POST /notifications/clear: 전체 읽음 처리
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from citizenapi.core.auth_middleware import get_current_user
from citizenapi.dependencies import get_notification_service
from citizenapi.schemas.notification import (
    ClearNotificationsResponse,
    NotificationCreateRequest,
    NotificationListResponse,
    NotificationResponse,
)
from citizenapi.schemas.user import CurrentUser
from citizenapi.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/unread", response_model=NotificationListResponse)
async def get_unread_notifications(
    limit: Optional[int] = Query(None, ge=1, le=100, description="최대 개수 (기본 50)"),
    current_user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    notifications = notification_service.list_unread(current_user.user_id, limit=limit)
    return NotificationListResponse(
        notifications=notifications,
        unread_count=notification_service.unread_count(current_user.user_id),
    )


@router.post(
    "", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED
)
async def create_notification(
    request: NotificationCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    return notification_service.create(
        current_user.user_id,
        request.title,
        request.message,
        request.type,
        reference_id=request.reference_id,
        reference_type=request.reference_type,
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    """읽음 처리 - 이미 읽은 알림이어도 200"""
    return notification_service.mark_read(notification_id, user_id=current_user.user_id)


@router.post("/clear", response_model=ClearNotificationsResponse)
async def clear_notifications(
    current_user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> ClearNotificationsResponse:
    cleared = notification_service.clear_all(current_user.user_id)
    return ClearNotificationsResponse(success=True, cleared_count=cleared)
