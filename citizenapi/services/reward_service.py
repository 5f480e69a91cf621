from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from citizenapi.config import Settings, settings as default_settings
from citizenapi.core.exceptions import (
    BaseAPIException,
    BusinessLogicError,
    NotFoundError,
    StoreUnavailableError,
)
from citizenapi.models.notification import NotificationType
from citizenapi.models.rewards import (
    CANCELLABLE_STATUSES,
    RedemptionStatus,
    RewardCategory,
    RewardRedemption,
)
from citizenapi.repositories.rewards_repository import RewardsRepository
from citizenapi.schemas.rewards import (
    RewardCatalogResponse,
    RewardRedemptionHistoryResponse,
    RewardRedemptionResponse,
)
from citizenapi.services.notification_service import NotificationService
from citizenapi.services.point_service import PointService
from citizenapi.utils.locks import KeyedLock, user_locks
import logging

logger = logging.getLogger(__name__)

REDEMPTION_REFERENCE_TYPE = "reward_redemption"


class RewardService:
    """리워드 교환 관련 비즈니스 로직을 담당하는 서비스

    교환/취소는 포인트 변동, 재고, 교환 기록, 알림을 하나의 커밋으로 처리합니다.
    """

    def __init__(
        self,
        db: Session,
        settings: Settings = default_settings,
        locks: Optional[KeyedLock] = None,
    ):
        self.db = db
        self.locks = locks or user_locks
        self.rewards_repo = RewardsRepository(db)
        self.point_service = PointService(db, settings=settings, locks=self.locks)
        self.notification_service = NotificationService(db, settings=settings)

    def list_rewards(
        self, category: Optional[RewardCategory] = None, active_only: bool = True
    ) -> RewardCatalogResponse:
        """리워드 카탈로그 조회"""
        try:
            rewards = self.rewards_repo.list_rewards(category=category, active_only=active_only)
        except SQLAlchemyError as e:
            self._raise_store_error("Failed to list rewards", e)

        logger.info(f"Retrieved reward catalog with {len(rewards)} items")
        return RewardCatalogResponse(rewards=rewards, total_count=len(rewards))

    def redeem_reward(
        self,
        user_id: str,
        reward_id: int,
        delivery_info: Optional[Dict[str, Any]] = None,
    ) -> RewardRedemptionResponse:
        """리워드 교환

        Raises:
            NotFoundError: 리워드가 없는 경우
            BusinessLogicError: 비활성 또는 재고 없음 (REWARD_UNAVAILABLE)
            InsufficientBalanceError: 포인트 부족
        """
        with self.locks.hold(user_id):
            try:
                reward = self.rewards_repo.lock_reward(reward_id)
                if reward is None:
                    raise NotFoundError(f"Reward not found: {reward_id}")

                if not reward.is_active or (reward.stock is not None and reward.stock <= 0):
                    raise BusinessLogicError(
                        "REWARD_UNAVAILABLE",
                        f"Reward is not available: {reward.title}",
                        details={"reward_id": reward_id},
                    )

                redemption = self.rewards_repo.add_redemption(
                    RewardRedemption(
                        reward_id=reward.id,
                        user_id=user_id,
                        points_spent=reward.point_cost,
                        status=RedemptionStatus.PENDING,
                        delivery_info=delivery_info,
                    )
                )

                self.point_service.spend(
                    user_id,
                    reward.point_cost,
                    reason=f"Reward redemption: {reward.title}",
                    reference_id=str(redemption.id),
                    reference_type=REDEMPTION_REFERENCE_TYPE,
                    commit=False,
                )

                if reward.stock is not None:
                    reward.stock = reward.stock - 1
                    self.db.add(reward)

                self.notification_service.create(
                    user_id,
                    title="Reward redeemed",
                    message=f"You redeemed '{reward.title}' for {reward.point_cost} points.",
                    type=NotificationType.ACHIEVEMENT,
                    reference_id=str(redemption.id),
                    reference_type=REDEMPTION_REFERENCE_TYPE,
                    commit=False,
                )
                self.rewards_repo.commit()
            except BaseAPIException:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self._raise_store_error(f"Failed to redeem reward {reward_id} for user {user_id}", e)

        logger.info(
            f"User {user_id} redeemed reward {reward_id} (redemption {redemption.id}, "
            f"{redemption.points_spent} points)"
        )
        return redemption

    def cancel_redemption(self, user_id: str, redemption_id: int) -> RewardRedemptionResponse:
        """교환 취소 및 포인트 환불

        Raises:
            NotFoundError: 교환 기록이 없거나 다른 사용자의 기록
            BusinessLogicError: 취소할 수 없는 상태 (REDEMPTION_NOT_CANCELLABLE)
        """
        with self.locks.hold(user_id):
            try:
                redemption = self.rewards_repo.lock_redemption(redemption_id)
                if redemption is None or redemption.user_id != user_id:
                    raise NotFoundError(f"Redemption not found: {redemption_id}")

                if redemption.status not in CANCELLABLE_STATUSES:
                    raise BusinessLogicError(
                        "REDEMPTION_NOT_CANCELLABLE",
                        f"Redemption in status {redemption.status.value} cannot be cancelled",
                        details={"redemption_id": redemption_id},
                    )

                reward = self.rewards_repo.lock_reward(redemption.reward_id)

                self.point_service.refund(
                    user_id,
                    redemption.points_spent,
                    reason=f"Refund for cancelled redemption #{redemption.id}",
                    reference_id=str(redemption.id),
                    reference_type=REDEMPTION_REFERENCE_TYPE,
                    commit=False,
                )

                if reward is not None and reward.stock is not None:
                    reward.stock = reward.stock + 1
                    self.db.add(reward)

                redemption.status = RedemptionStatus.CANCELLED
                self.db.add(redemption)
                self.db.flush()
                self.db.refresh(redemption)

                self.notification_service.create(
                    user_id,
                    title="Redemption cancelled",
                    message=f"{redemption.points_spent} points were returned to your balance.",
                    type=NotificationType.UPDATE,
                    reference_id=str(redemption.id),
                    reference_type=REDEMPTION_REFERENCE_TYPE,
                    commit=False,
                )
                self.rewards_repo.commit()
            except BaseAPIException:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self._raise_store_error(
                    f"Failed to cancel redemption {redemption_id} for user {user_id}", e
                )

        logger.info(f"User {user_id} cancelled redemption {redemption_id}")
        return RewardRedemptionResponse.model_validate(redemption)

    def list_redemptions(self, user_id: str) -> RewardRedemptionHistoryResponse:
        try:
            redemptions = self.rewards_repo.list_redemptions(user_id)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to list redemptions for user {user_id}", e)
        return RewardRedemptionHistoryResponse(
            redemptions=redemptions, total_count=len(redemptions)
        )

    def _raise_store_error(self, message: str, error: Exception):
        self.db.rollback()
        logger.error(f"{message}: {str(error)}")
        raise StoreUnavailableError(message) from error
