# 메타데이터 등록을 위해 모든 모델을 임포트

from .base import Base, BaseModel
from .points import CitizenPoints, PointTransaction, TransactionType
from .notification import Notification, NotificationType
from .preferences import UserPreferences, Theme, DashboardLayout
from .rewards import Reward, RewardRedemption, RewardCategory, RedemptionStatus

__all__ = [
    "Base",
    "BaseModel",
    "CitizenPoints",
    "PointTransaction",
    "TransactionType",
    "Notification",
    "NotificationType",
    "UserPreferences",
    "Theme",
    "DashboardLayout",
    "Reward",
    "RewardRedemption",
    "RewardCategory",
    "RedemptionStatus",
]
