from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from citizenapi.models.notification import NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    message: str
    type: NotificationType
    is_read: bool
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    created_at: Optional[datetime] = None


class NotificationCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    type: NotificationType = NotificationType.SYSTEM
    reference_id: Optional[str] = Field(None, max_length=128)
    reference_type: Optional[str] = Field(None, max_length=64)


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class ClearNotificationsResponse(BaseModel):
    success: bool
    cleared_count: int
