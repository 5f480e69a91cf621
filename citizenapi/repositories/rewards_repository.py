from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from citizenapi.models.rewards import Reward, RewardCategory, RewardRedemption
from citizenapi.repositories.base import BaseRepository
from citizenapi.schemas.rewards import RewardItem, RewardRedemptionResponse


class RewardsRepository(BaseRepository[Reward, RewardItem]):
    def __init__(self, db: Session):
        super().__init__(Reward, RewardItem, db)

    def list_rewards(
        self, category: Optional[RewardCategory] = None, active_only: bool = True
    ) -> List[RewardItem]:
        """리워드 카탈로그 (필요 포인트 오름차순)"""
        filters = {}
        if category is not None:
            filters["category"] = category
        if active_only:
            filters["is_active"] = True
        return self.find_all(filters=filters, order_by="point_cost")

    def lock_reward(self, reward_id: int) -> Optional[Reward]:
        return (
            self.db.query(Reward)
            .filter(Reward.id == reward_id)
            .with_for_update()
            .first()
        )

    def lock_redemption(self, redemption_id: int) -> Optional[RewardRedemption]:
        return (
            self.db.query(RewardRedemption)
            .filter(RewardRedemption.id == redemption_id)
            .with_for_update()
            .first()
        )

    def add_redemption(self, redemption: RewardRedemption) -> RewardRedemptionResponse:
        """교환 기록 추가 (커밋은 호출자가 수행)"""
        self.db.add(redemption)
        self.db.flush()
        self.db.refresh(redemption)
        return RewardRedemptionResponse.model_validate(redemption)

    def list_redemptions(
        self, user_id: str, limit: int = 50
    ) -> List[RewardRedemptionResponse]:
        rows = (
            self.db.query(RewardRedemption)
            .filter(RewardRedemption.user_id == user_id)
            .order_by(desc(RewardRedemption.created_at), desc(RewardRedemption.id))
            .limit(limit)
            .all()
        )
        return [RewardRedemptionResponse.model_validate(row) for row in rows]
