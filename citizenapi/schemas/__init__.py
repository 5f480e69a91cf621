from .user import CurrentUser, UserData
from .points import CitizenPointsResponse, PointTransactionEntry
from .notification import NotificationResponse
from .preferences import PreferencesResponse
from .rewards import RewardItem, RewardRedemptionResponse
