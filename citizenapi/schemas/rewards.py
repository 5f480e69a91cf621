from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from citizenapi.models.rewards import RedemptionStatus, RewardCategory


class RewardItem(BaseModel):
    """리워드 아이템"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    point_cost: int = Field(..., description="필요 포인트")
    category: RewardCategory
    is_active: bool
    stock: Optional[int] = Field(None, description="재고 (None = 무제한)")
    image: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.is_active and (self.stock is None or self.stock > 0)


class RewardCatalogResponse(BaseModel):
    rewards: List[RewardItem]
    total_count: int


class RewardRedemptionRequest(BaseModel):
    delivery_info: Optional[Dict[str, Any]] = Field(None, description="배송/발급 정보")


class RewardRedemptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reward_id: int
    user_id: str
    points_spent: int
    status: RedemptionStatus
    delivery_info: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RewardRedemptionHistoryResponse(BaseModel):
    redemptions: List[RewardRedemptionResponse]
    total_count: int
