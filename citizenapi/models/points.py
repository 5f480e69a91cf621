"""
시민 포인트 데이터 모델

- CitizenPoints: 사용자별 포인트 원장 (잔액 + 누적 획득/사용)
- PointTransaction: 잔액 변동 이력 (추가만 가능, 수정/삭제 없음)

불변식: balance == total_earned - total_spent
"""

import enum
from typing import Optional

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from citizenapi.models.base import BaseModel, IdType


class TransactionType(str, enum.Enum):
    EARNED = "EARNED"
    SPENT = "SPENT"
    REFUNDED = "REFUNDED"


class CitizenPoints(BaseModel):
    __tablename__ = "citizen_points"
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_citizen_points_user_id"),  # 사용자당 원장 1개
        CheckConstraint("balance >= 0", name="ck_citizen_points_balance"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    # 외부 인증 공급자의 사용자 ID (opaque)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class PointTransaction(BaseModel):
    __tablename__ = "point_transactions"
    __table_args__ = (
        Index("ix_point_transactions_citizen_points_id", "citizen_points_id"),
        Index("ix_point_transactions_type", "type"),
        CheckConstraint("amount > 0", name="ck_point_transactions_amount"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    citizen_points_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("citizen_points.id"), nullable=False
    )
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="point_transaction_type"), nullable=False
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    # 거래를 발생시킨 엔티티 (obligation, kpi, reward_redemption 등)
    reference_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    reference_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
