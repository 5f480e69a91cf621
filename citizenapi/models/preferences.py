import enum

from sqlalchemy import Boolean, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from citizenapi.models.base import BaseModel, IdType

PREFERENCES_SCHEMA_VERSION = 2


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class DashboardLayout(str, enum.Enum):
    DEFAULT = "default"
    COMPACT = "compact"
    DETAILED = "detailed"


class UserPreferences(BaseModel):
    """사용자 환경설정 - JSON blob 대신 고정된 필드 집합"""

    __tablename__ = "user_preferences"
    __table_args__ = (UniqueConstraint("user_id", name="uq_user_preferences_user_id"),)

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    schema_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=PREFERENCES_SCHEMA_VERSION
    )
    language: Mapped[str] = mapped_column(String(16), nullable=False, default="en")
    theme: Mapped[Theme] = mapped_column(
        Enum(Theme, name="theme", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Theme.SYSTEM,
    )

    # 알림 수신 설정
    deadline_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    obligation_updates: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    kpi_alerts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    system_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    push_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    dashboard_layout: Mapped[DashboardLayout] = mapped_column(
        Enum(
            DashboardLayout,
            name="dashboard_layout",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=DashboardLayout.DEFAULT,
    )
