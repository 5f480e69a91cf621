from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from citizenapi.config import Settings, settings as default_settings
from citizenapi.core.exceptions import NotFoundError, StoreUnavailableError, ValidationError
from citizenapi.models.notification import NotificationType
from citizenapi.repositories.notification_repository import NotificationRepository
from citizenapi.schemas.notification import NotificationResponse
import logging

logger = logging.getLogger(__name__)


class NotificationService:
    """사용자 알림 관리 서비스

    알림 상태는 UNREAD -> READ 단방향이며, 읽은 알림은 삭제하지 않고
    미확인 목록에서만 제외됩니다.
    """

    def __init__(self, db: Session, settings: Settings = default_settings):
        self.db = db
        self.settings = settings
        self.notification_repo = NotificationRepository(db)

    def create(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType,
        reference_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        commit: bool = True,
    ) -> NotificationResponse:
        """알림 생성 (is_read=False)"""
        try:
            notification = self.notification_repo.create(
                commit=commit,
                user_id=user_id,
                title=title,
                message=message,
                type=NotificationType(type),
                is_read=False,
                reference_id=reference_id,
                reference_type=reference_type,
            )
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to create notification for user {user_id}", e)

        logger.info(
            f"Created {notification.type.value} notification {notification.id} for user {user_id}"
        )
        return notification

    def list_unread(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[NotificationResponse]:
        """읽지 않은 알림 목록 (최신순, 최대 limit 개)

        Raises:
            ValidationError: limit < 0
        """
        if limit is None:
            limit = self.settings.NOTIFICATIONS_UNREAD_LIMIT
        if limit < 0:
            raise ValidationError("Limit must not be negative", details={"limit": limit})
        if limit == 0:
            return []
        try:
            return self.notification_repo.list_unread(user_id, limit=limit)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to list notifications for user {user_id}", e)

    def unread_count(self, user_id: str) -> int:
        try:
            return self.notification_repo.count_unread(user_id)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to count notifications for user {user_id}", e)

    def mark_read(
        self, notification_id: int, user_id: Optional[str] = None
    ) -> NotificationResponse:
        """알림 읽음 처리 - 이미 읽은 알림에 다시 호출해도 결과 동일

        Args:
            notification_id: 알림 ID
            user_id: 주어지면 해당 사용자의 알림인지 확인

        Raises:
            NotFoundError: 알림이 없거나 다른 사용자의 알림
        """
        try:
            current = self.notification_repo.get_by_id(notification_id)
            if current is None or (user_id is not None and current.user_id != user_id):
                raise NotFoundError(f"Notification not found: {notification_id}")

            if current.is_read:
                return current

            return self.notification_repo.update(notification_id, is_read=True)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to mark notification {notification_id} as read", e)

    def clear_all(self, user_id: str) -> int:
        """미확인 알림 전체 읽음 처리

        한 트랜잭션으로 처리하며, 실패 시 전체 롤백 후 StoreUnavailableError.

        Returns:
            int: 읽음 처리된 알림 수
        """
        try:
            unread = self.notification_repo.find_all(
                filters={"user_id": user_id, "is_read": False}
            )
            for notification in unread:
                self.notification_repo.update(notification.id, commit=False, is_read=True)
            self.notification_repo.commit()
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to clear notifications for user {user_id}", e)

        logger.info(f"Cleared {len(unread)} notifications for user {user_id}")
        return len(unread)

    def _raise_store_error(self, message: str, error: Exception):
        self.db.rollback()
        logger.error(f"{message}: {str(error)}")
        raise StoreUnavailableError(message) from error
