from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from citizenapi.models.preferences import UserPreferences
from citizenapi.repositories.base import BaseRepository
from citizenapi.schemas.preferences import PreferencesResponse


class PreferencesRepository(BaseRepository[UserPreferences, PreferencesResponse]):
    def __init__(self, db: Session):
        super().__init__(UserPreferences, PreferencesResponse, db)

    def get_by_user_id(self, user_id: str) -> Optional[PreferencesResponse]:
        return self.get_by_field("user_id", user_id)

    def create_if_absent(
        self, user_id: str, fields: Dict[str, Any]
    ) -> Tuple[PreferencesResponse, bool]:
        """환경설정 생성 - 이미 있으면 기존 레코드 반환"""
        try:
            return self.create(user_id=user_id, **fields), True
        except IntegrityError:
            # create() 에서 이미 롤백됨
            existing = self.get_by_user_id(user_id)
            if existing is None:
                raise
            return existing, False

    def update_by_user_id(
        self, user_id: str, fields: Dict[str, Any]
    ) -> Optional[PreferencesResponse]:
        instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .first()
        )
        if instance is None:
            return None
        return self.update(instance.id, **fields)
