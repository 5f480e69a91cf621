from typing import List

from sqlalchemy.orm import Session

from citizenapi.models.notification import Notification
from citizenapi.repositories.base import BaseRepository
from citizenapi.schemas.notification import NotificationResponse


class NotificationRepository(BaseRepository[Notification, NotificationResponse]):
    def __init__(self, db: Session):
        super().__init__(Notification, NotificationResponse, db)

    def list_unread(self, user_id: str, limit: int = 50) -> List[NotificationResponse]:
        """읽지 않은 알림 (최신순)"""
        return self.find_all(
            filters={"user_id": user_id, "is_read": False},
            order_by="created_at",
            descending=True,
            limit=limit,
        )

    def count_unread(self, user_id: str) -> int:
        return self.count(filters={"user_id": user_id, "is_read": False})
