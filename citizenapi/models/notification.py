import enum
from typing import Optional

from sqlalchemy import Boolean, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from citizenapi.models.base import BaseModel, IdType


class NotificationType(str, enum.Enum):
    DEADLINE = "DEADLINE"
    UPDATE = "UPDATE"
    ACHIEVEMENT = "ACHIEVEMENT"
    SYSTEM = "SYSTEM"


class Notification(BaseModel):
    """사용자 알림 - is_read 는 False -> True 로만 변경됨"""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_id_is_read", "user_id", "is_read"),
        Index("ix_notifications_type", "type"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type"), nullable=False
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reference_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    reference_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
