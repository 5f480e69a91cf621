from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from citizenapi.models.preferences import (
    PREFERENCES_SCHEMA_VERSION,
    DashboardLayout,
    Theme,
)


class NotificationSettings(BaseModel):
    """알림 수신 설정"""

    deadline_reminders: bool = True
    obligation_updates: bool = True
    kpi_alerts: bool = True
    system_notifications: bool = True
    email_notifications: bool = False
    push_notifications: bool = False


class PreferencesRecord(BaseModel):
    """현재 버전의 환경설정 레코드 (저장 전 검증용)"""

    model_config = ConfigDict(extra="forbid")

    schema_version: int = PREFERENCES_SCHEMA_VERSION
    language: str = Field("en", min_length=2, max_length=16)
    theme: Theme = Theme.SYSTEM
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    dashboard_layout: DashboardLayout = DashboardLayout.DEFAULT


class PreferencesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    schema_version: int
    language: str
    theme: Theme
    deadline_reminders: bool
    obligation_updates: bool
    kpi_alerts: bool
    system_notifications: bool
    email_notifications: bool
    push_notifications: bool
    dashboard_layout: DashboardLayout
    updated_at: Optional[datetime] = None


class PreferencesUpdate(BaseModel):
    """부분 업데이트 요청 - None 인 필드는 변경하지 않음"""

    model_config = ConfigDict(extra="forbid")

    language: Optional[str] = Field(None, min_length=2, max_length=16)
    theme: Optional[Theme] = None
    deadline_reminders: Optional[bool] = None
    obligation_updates: Optional[bool] = None
    kpi_alerts: Optional[bool] = None
    system_notifications: Optional[bool] = None
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    dashboard_layout: Optional[DashboardLayout] = None
