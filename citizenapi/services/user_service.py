from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from citizenapi.config import Settings, settings as default_settings
from citizenapi.core.exceptions import StoreUnavailableError
from citizenapi.repositories.points_repository import PointsRepository
from citizenapi.schemas.user import CurrentUser, UserData
from citizenapi.services.point_service import PointService
from citizenapi.services.preference_service import PreferenceService
from citizenapi.utils.locks import KeyedLock
import logging

logger = logging.getLogger(__name__)


class UserService:
    """사용자 초기화 및 집계 정보 조회"""

    def __init__(
        self,
        db: Session,
        settings: Settings = default_settings,
        locks: Optional[KeyedLock] = None,
    ):
        self.db = db
        self.point_service = PointService(db, settings=settings, locks=locks)
        self.preference_service = PreferenceService(db)
        self.points_repo = PointsRepository(db)

    def initialize_user_data(self, identity: CurrentUser) -> UserData:
        """최초 접근 시 포인트 원장과 기본 환경설정 생성

        이미 존재하는 항목은 그대로 두므로 여러 번 호출해도 안전합니다.
        """
        citizen_points = self.point_service.get_or_create_ledger(identity.user_id)
        preferences = self.preference_service.get_or_create_preferences(identity.user_id)

        logger.info(f"Initialized user data for {identity.user_id}")
        return UserData(
            user_id=identity.user_id,
            login_id=identity.login_id,
            role=identity.role,
            citizen_points=citizen_points,
            preferences=preferences,
        )

    def get_user_data(self, identity: CurrentUser) -> UserData:
        """사용자 집계 정보 조회 (생성하지 않음, 없는 항목은 None)"""
        try:
            citizen_points = self.points_repo.get_by_user_id(identity.user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to fetch user data for {identity.user_id}: {str(e)}")
            raise StoreUnavailableError("Failed to fetch user data") from e

        return UserData(
            user_id=identity.user_id,
            login_id=identity.login_id,
            role=identity.role,
            citizen_points=citizen_points,
            preferences=self.preference_service.get_preferences(identity.user_id),
        )
