import pytest

from citizenapi.core.exceptions import (
    BusinessLogicError,
    InsufficientBalanceError,
    NotFoundError,
)
from citizenapi.models.notification import Notification, NotificationType
from citizenapi.models.points import PointTransaction, TransactionType
from citizenapi.models.rewards import (
    RedemptionStatus,
    Reward,
    RewardCategory,
    RewardRedemption,
)
from citizenapi.services.point_service import PointService
from citizenapi.services.reward_service import RewardService


@pytest.fixture
def reward_service(db_session, test_settings, locks):
    return RewardService(db_session, settings=test_settings, locks=locks)


@pytest.fixture
def point_service(db_session, test_settings, locks):
    return PointService(db_session, settings=test_settings, locks=locks)


def _add_reward(db_session, **overrides) -> Reward:
    values = {
        "title": "Citizen Badge",
        "description": "Digital badge",
        "point_cost": 60,
        "category": RewardCategory.DIGITAL_BADGE,
        "is_active": True,
        "stock": 2,
    }
    values.update(overrides)
    reward = Reward(**values)
    db_session.add(reward)
    db_session.commit()
    return reward


class TestRewardCatalog:
    def test_active_rewards_ordered_by_cost(self, reward_service, db_session):
        _add_reward(db_session, title="Tour", point_cost=800, category=RewardCategory.EXPERIENCE)
        _add_reward(db_session, title="Badge", point_cost=50)
        _add_reward(db_session, title="Retired", point_cost=10, is_active=False)

        catalog = reward_service.list_rewards()

        assert [r.title for r in catalog.rewards] == ["Badge", "Tour"]
        assert catalog.total_count == 2

    def test_category_filter(self, reward_service, db_session):
        _add_reward(db_session, title="Tour", category=RewardCategory.EXPERIENCE)
        _add_reward(db_session, title="Badge")

        catalog = reward_service.list_rewards(category=RewardCategory.EXPERIENCE)

        assert [r.title for r in catalog.rewards] == ["Tour"]


class TestRedeemReward:
    def test_redeem_spends_points_and_decrements_stock(
        self, reward_service, point_service, db_session
    ):
        # Given
        reward = _add_reward(db_session)
        point_service.get_or_create_ledger("user-1")

        # When
        redemption = reward_service.redeem_reward(
            "user-1", reward.id, delivery_info={"email": "a@example.com"}
        )

        # Then
        assert redemption.status == RedemptionStatus.PENDING
        assert redemption.points_spent == 60
        assert redemption.delivery_info == {"email": "a@example.com"}

        ledger = point_service.get_ledger("user-1")
        assert ledger.balance == 40
        assert ledger.total_spent == 60

        spent = db_session.query(PointTransaction).filter_by(type=TransactionType.SPENT).one()
        assert spent.reference_id == str(redemption.id)
        assert spent.reference_type == "reward_redemption"

        db_session.refresh(reward)
        assert reward.stock == 1

        notification = db_session.query(Notification).filter_by(user_id="user-1").one()
        assert notification.type == NotificationType.ACHIEVEMENT

    def test_insufficient_balance_rolls_back_everything(
        self, reward_service, point_service, db_session
    ):
        reward = _add_reward(db_session, point_cost=500)
        point_service.get_or_create_ledger("user-1")

        with pytest.raises(InsufficientBalanceError):
            reward_service.redeem_reward("user-1", reward.id)

        assert point_service.get_ledger("user-1").balance == 100
        assert db_session.query(RewardRedemption).count() == 0
        assert db_session.query(Notification).count() == 0
        db_session.refresh(reward)
        assert reward.stock == 2

    def test_out_of_stock(self, reward_service, point_service, db_session):
        reward = _add_reward(db_session, stock=0)
        point_service.get_or_create_ledger("user-1")

        with pytest.raises(BusinessLogicError) as exc_info:
            reward_service.redeem_reward("user-1", reward.id)

        assert exc_info.value.error_code == "REWARD_UNAVAILABLE"
        assert point_service.get_ledger("user-1").balance == 100

    def test_unlimited_stock_is_not_decremented(self, reward_service, point_service, db_session):
        reward = _add_reward(db_session, stock=None)
        point_service.get_or_create_ledger("user-1")

        reward_service.redeem_reward("user-1", reward.id)

        db_session.refresh(reward)
        assert reward.stock is None

    def test_missing_reward(self, reward_service, point_service):
        point_service.get_or_create_ledger("user-1")

        with pytest.raises(NotFoundError):
            reward_service.redeem_reward("user-1", 999)


class TestCancelRedemption:
    def test_cancel_refunds_points_and_restores_stock(
        self, reward_service, point_service, db_session
    ):
        reward = _add_reward(db_session)
        point_service.get_or_create_ledger("user-1")
        redemption = reward_service.redeem_reward("user-1", reward.id)

        cancelled = reward_service.cancel_redemption("user-1", redemption.id)

        assert cancelled.status == RedemptionStatus.CANCELLED
        ledger = point_service.get_ledger("user-1")
        assert ledger.balance == 100
        assert ledger.balance == ledger.total_earned - ledger.total_spent
        db_session.refresh(reward)
        assert reward.stock == 2
        assert point_service.verify_integrity("user-1").status == "OK"

        refund = db_session.query(PointTransaction).filter_by(type=TransactionType.REFUNDED).one()
        assert refund.amount == 60

    def test_cancel_twice_is_rejected(self, reward_service, point_service, db_session):
        reward = _add_reward(db_session)
        point_service.get_or_create_ledger("user-1")
        redemption = reward_service.redeem_reward("user-1", reward.id)
        reward_service.cancel_redemption("user-1", redemption.id)

        with pytest.raises(BusinessLogicError) as exc_info:
            reward_service.cancel_redemption("user-1", redemption.id)

        assert exc_info.value.error_code == "REDEMPTION_NOT_CANCELLABLE"
        assert point_service.get_ledger("user-1").balance == 100

    def test_cancel_other_users_redemption(self, reward_service, point_service, db_session):
        reward = _add_reward(db_session)
        point_service.get_or_create_ledger("user-1")
        redemption = reward_service.redeem_reward("user-1", reward.id)

        with pytest.raises(NotFoundError):
            reward_service.cancel_redemption("user-2", redemption.id)

    def test_list_redemptions(self, reward_service, point_service, db_session):
        reward = _add_reward(db_session, stock=None, point_cost=10)
        point_service.get_or_create_ledger("user-1")
        reward_service.redeem_reward("user-1", reward.id)
        reward_service.redeem_reward("user-1", reward.id)

        history = reward_service.list_redemptions("user-1")

        assert history.total_count == 2
        assert history.redemptions[0].id > history.redemptions[1].id
