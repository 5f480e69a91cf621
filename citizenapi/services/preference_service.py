"""
사용자 환경설정 서비스

저장 형태는 고정 필드 레코드(PreferencesRecord, schema_version=2)입니다.
이전 클라이언트가 보내던 v1 형태(notifications/dashboardLayout 을 JSON 문자열로
저장하던 blob)는 migrate_preferences()로 변환한 뒤 저장합니다.
"""

import json
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from citizenapi.core.exceptions import NotFoundError, StoreUnavailableError, ValidationError
from citizenapi.models.preferences import PREFERENCES_SCHEMA_VERSION
from citizenapi.repositories.preferences_repository import PreferencesRepository
from citizenapi.schemas.preferences import (
    NotificationSettings,
    PreferencesRecord,
    PreferencesResponse,
    PreferencesUpdate,
)
import logging

logger = logging.getLogger(__name__)

# v1 camelCase 키 -> 현재 필드명
_LEGACY_NOTIFICATION_KEYS = {
    "deadlineReminders": "deadline_reminders",
    "obligationUpdates": "obligation_updates",
    "kpiAlerts": "kpi_alerts",
    "systemNotifications": "system_notifications",
    "emailNotifications": "email_notifications",
    "pushNotifications": "push_notifications",
}


def _load_json_field(raw: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key)
    if value is None or value == "":
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValidationError(
                f"Malformed legacy preferences field '{key}'",
                details={"field": key},
            )
    if not isinstance(value, dict):
        raise ValidationError(
            f"Legacy preferences field '{key}' must be an object",
            details={"field": key},
        )
    return value


def migrate_preferences(raw: Mapping[str, Any]) -> PreferencesRecord:
    """저장/전송된 환경설정을 현재 버전 레코드로 변환

    Raises:
        ValidationError: 형식이 잘못되었거나 허용되지 않는 값
    """
    version = raw.get("schema_version", 1)

    try:
        if version == PREFERENCES_SCHEMA_VERSION:
            return PreferencesRecord.model_validate(dict(raw))

        if version != 1:
            raise ValidationError(
                f"Unsupported preferences version: {version}",
                details={"schema_version": version},
            )

        legacy_notifications = _load_json_field(raw, "notifications")
        notifications = {
            field: legacy_notifications[legacy_key]
            for legacy_key, field in _LEGACY_NOTIFICATION_KEYS.items()
            if legacy_key in legacy_notifications
        }
        layout = _load_json_field(raw, "dashboardLayout").get("layout")

        # 값 변환/검증은 pydantic 에 맡김 ("false" -> False, 목록 등은 거부)
        record: Dict[str, Any] = {
            "notifications": NotificationSettings(**notifications),
        }
        if raw.get("language"):
            record["language"] = raw["language"]
        if raw.get("theme"):
            record["theme"] = raw["theme"]
        if layout:
            record["dashboard_layout"] = layout
        return PreferencesRecord(**record)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid preferences",
            details={"errors": [err["msg"] for err in e.errors()]},
        )


def _record_to_fields(record: PreferencesRecord) -> Dict[str, Any]:
    fields = record.model_dump(exclude={"notifications"})
    fields.update(record.notifications.model_dump())
    return fields


class PreferenceService:
    """사용자 환경설정 조회/수정"""

    def __init__(self, db: Session):
        self.db = db
        self.preferences_repo = PreferencesRepository(db)

    def get_preferences(self, user_id: str) -> Optional[PreferencesResponse]:
        try:
            return self.preferences_repo.get_by_user_id(user_id)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to get preferences for user {user_id}", e)

    def get_or_create_preferences(self, user_id: str) -> PreferencesResponse:
        """환경설정 조회, 없으면 기본값으로 생성"""
        existing = self.get_preferences(user_id)
        if existing:
            return existing

        try:
            preferences, created = self.preferences_repo.create_if_absent(
                user_id, _record_to_fields(PreferencesRecord())
            )
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to create preferences for user {user_id}", e)

        if created:
            logger.info(f"Created default preferences for user {user_id}")
        return preferences

    def update_preferences(
        self, user_id: str, update: PreferencesUpdate
    ) -> PreferencesResponse:
        """부분 업데이트 (전달된 필드만 변경)"""
        self.get_or_create_preferences(user_id)
        fields = update.model_dump(exclude_none=True)
        if not fields:
            return self.get_preferences(user_id)

        try:
            updated = self.preferences_repo.update_by_user_id(user_id, fields)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to update preferences for user {user_id}", e)

        if updated is None:
            raise NotFoundError(f"Preferences not found for user {user_id}")
        logger.info(f"Updated preferences for user {user_id}: {sorted(fields)}")
        return updated

    def import_legacy_preferences(
        self, user_id: str, raw: Mapping[str, Any]
    ) -> PreferencesResponse:
        """이전 형식의 환경설정을 변환해 덮어쓰기"""
        record = migrate_preferences(raw)
        self.get_or_create_preferences(user_id)

        try:
            updated = self.preferences_repo.update_by_user_id(
                user_id, _record_to_fields(record)
            )
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to import preferences for user {user_id}", e)

        logger.info(
            f"Imported preferences for user {user_id} "
            f"(from version {raw.get('schema_version', 1)})"
        )
        return updated

    def _raise_store_error(self, message: str, error: Exception):
        self.db.rollback()
        logger.error(f"{message}: {str(error)}")
        raise StoreUnavailableError(message) from error
