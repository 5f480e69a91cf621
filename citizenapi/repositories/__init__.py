# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .points_repository import PointsRepository
from .notification_repository import NotificationRepository
from .preferences_repository import PreferencesRepository
from .rewards_repository import RewardsRepository

__all__ = [
    "BaseRepository",
    "PointsRepository",
    "NotificationRepository",
    "PreferencesRepository",
    "RewardsRepository",
]
