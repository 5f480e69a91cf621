import enum
from typing import Optional

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from citizenapi.models.base import BaseModel, IdType


class RewardCategory(str, enum.Enum):
    DIGITAL_BADGE = "DIGITAL_BADGE"
    NFT_MEDAL = "NFT_MEDAL"
    PHYSICAL_ITEM = "PHYSICAL_ITEM"
    EXPERIENCE = "EXPERIENCE"


class RedemptionStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# 취소(환불) 가능한 상태
CANCELLABLE_STATUSES = (RedemptionStatus.PENDING, RedemptionStatus.PROCESSING)


class Reward(BaseModel):
    __tablename__ = "rewards"
    __table_args__ = (
        Index("ix_rewards_category", "category"),
        Index("ix_rewards_point_cost", "point_cost"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    point_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[RewardCategory] = mapped_column(
        Enum(RewardCategory, name="reward_category"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # None 이면 재고 무제한
    stock: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class RewardRedemption(BaseModel):
    __tablename__ = "reward_redemptions"
    __table_args__ = (
        Index("ix_reward_redemptions_user_id", "user_id"),
        Index("ix_reward_redemptions_status", "status"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    reward_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("rewards.id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    points_spent: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[RedemptionStatus] = mapped_column(
        Enum(RedemptionStatus, name="redemption_status"),
        nullable=False,
        default=RedemptionStatus.PENDING,
    )
    # 실물 상품 배송 정보 등
    delivery_info: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
