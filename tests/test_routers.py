from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from citizenapi.core import auth_middleware
from citizenapi.core.exceptions import InsufficientBalanceError, NotFoundError
from citizenapi.core.rbac import Permission, UserRole
from citizenapi.main import create_app
from citizenapi.models.notification import NotificationType
from citizenapi.models.points import TransactionType
from citizenapi.models.rewards import RedemptionStatus
from citizenapi.schemas.notification import NotificationResponse
from citizenapi.schemas.points import (
    CitizenPointsResponse,
    PointsTransactionResponse,
    PointTransactionEntry,
)
from citizenapi.schemas.rewards import RewardCatalogResponse, RewardRedemptionResponse
from citizenapi.schemas.user import CurrentUser

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def app():
    app = create_app()
    yield app
    app.dependency_overrides.clear()
    app.container.unwire()  # type: ignore[attr-defined]


@pytest.fixture
def client(app):
    """테스트 클라이언트 픽스처"""
    return TestClient(app)


def login_as(app, role=UserRole.CITIZEN, user_id="user-1"):
    user = CurrentUser(user_id=user_id, login_id=f"{user_id}@example.com", role=role)
    app.dependency_overrides[auth_middleware.get_current_user] = lambda: user
    return user


def override_service(app, name, calls=None):
    """서비스 팩토리를 Mock 으로 교체 (calls 에 팩토리 호출 인자 기록)"""
    service = Mock()

    def factory(**kwargs):
        if calls is not None:
            calls.append(kwargs)
        return service

    getattr(app.container.services, name).override(providers.Callable(factory))
    return service


def _ledger(balance=100, earned=100, spent=0):
    return CitizenPointsResponse(
        id=1, user_id="user-1", balance=balance, total_earned=earned, total_spent=spent
    )


def _transaction_result(tx_type, amount, ledger):
    return PointsTransactionResponse(
        success=True,
        transaction=PointTransactionEntry(
            id=2, citizen_points_id=1, type=tx_type, amount=amount, reason="test", created_at=NOW
        ),
        ledger=ledger,
        message="Transaction completed successfully",
    )


class TestHealthRoute:
    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestPointRoutes:
    """포인트 라우터 테스트"""

    def test_each_request_gets_its_own_session(self, app, client):
        login_as(app)
        calls = []
        point_service = override_service(app, "point_service", calls=calls)
        point_service.get_or_create_ledger.return_value = _ledger()

        client.get("/api/v1/points/balance")
        client.get("/api/v1/points/balance")

        assert len(calls) == 2
        assert calls[0]["db"] is not calls[1]["db"]

    def test_requires_authentication(self, client):
        response = client.get("/api/v1/points/balance")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_001"

    def test_get_my_balance(self, app, client):
        # Given
        login_as(app)
        point_service = override_service(app, "point_service")
        point_service.get_or_create_ledger.return_value = _ledger()

        # When
        response = client.get("/api/v1/points/balance")

        # Then
        assert response.status_code == 200
        assert response.json()["balance"] == 100
        point_service.get_or_create_ledger.assert_called_once_with("user-1")

    def test_spend_points(self, app, client):
        login_as(app)
        point_service = override_service(app, "point_service")
        point_service.spend.return_value = _transaction_result(
            TransactionType.SPENT, 30, _ledger(balance=70, spent=30)
        )

        response = client.post(
            "/api/v1/points/spend", json={"amount": 30, "reason": "coffee"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ledger"]["balance"] == 70
        assert data["transaction"]["type"] == "SPENT"

    def test_spend_insufficient_balance(self, app, client):
        login_as(app)
        point_service = override_service(app, "point_service")
        point_service.spend.side_effect = InsufficientBalanceError(
            "Insufficient points. Required: 50, Available: 30",
            details={"required": 50, "available": 30},
        )

        response = client.post(
            "/api/v1/points/spend", json={"amount": 50, "reason": "too much"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "BALANCE_001"
        assert body["error"]["details"]["available"] == 30

    def test_spend_with_missing_reason(self, app, client):
        login_as(app)
        override_service(app, "point_service")

        response = client.post("/api/v1/points/spend", json={"amount": 10})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_001"
        fields = [e["field"] for e in response.json()["error"]["details"]["errors"]]
        assert "body.reason" in fields

    def test_admin_award_forbidden_for_citizen(self, app, client):
        login_as(app)
        point_service = override_service(app, "point_service")

        response = client.post(
            "/api/v1/points/admin/award",
            params={"user_id": "user-2"},
            json={"amount": 10, "reason": "bonus"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "AUTH_002"
        point_service.award.assert_not_called()

    def test_admin_award(self, app, client):
        login_as(app, role=UserRole.ADMIN, user_id="admin-1")
        point_service = override_service(app, "point_service")
        point_service.award.return_value = _transaction_result(
            TransactionType.EARNED, 10, _ledger(balance=110, earned=110)
        )

        response = client.post(
            "/api/v1/points/admin/award",
            params={"user_id": "user-1"},
            json={"amount": 10, "reason": "bonus"},
        )

        assert response.status_code == 200
        assert response.json()["ledger"]["balance"] == 110
        point_service.award.assert_called_once_with(
            "user-1", 10, "bonus", reference_id=None, reference_type=None
        )

    def test_admin_award_unknown_user(self, app, client):
        login_as(app, role=UserRole.ADMIN, user_id="admin-1")
        point_service = override_service(app, "point_service")
        point_service.award.side_effect = NotFoundError("Citizen points record not found")

        response = client.post(
            "/api/v1/points/admin/award",
            params={"user_id": "ghost"},
            json={"amount": 10, "reason": "bonus"},
        )

        assert response.status_code == 404


class TestNotificationRoutes:
    def test_unread(self, app, client):
        login_as(app)
        notification_service = override_service(app, "notification_service")
        notification_service.list_unread.return_value = [
            NotificationResponse(
                id=1,
                user_id="user-1",
                title="Deadline",
                message="Obligation due tomorrow",
                type=NotificationType.DEADLINE,
                is_read=False,
                created_at=NOW,
            )
        ]
        notification_service.unread_count.return_value = 1

        response = client.get("/api/v1/notifications/unread")

        assert response.status_code == 200
        data = response.json()
        assert data["unread_count"] == 1
        assert data["notifications"][0]["type"] == "DEADLINE"

    def test_clear(self, app, client):
        login_as(app)
        notification_service = override_service(app, "notification_service")
        notification_service.clear_all.return_value = 3

        response = client.post("/api/v1/notifications/clear")

        assert response.status_code == 200
        assert response.json() == {"success": True, "cleared_count": 3}

    def test_mark_read_scoped_to_current_user(self, app, client):
        login_as(app)
        notification_service = override_service(app, "notification_service")
        notification_service.mark_read.side_effect = NotFoundError("Notification not found: 5")

        response = client.post("/api/v1/notifications/5/read")

        assert response.status_code == 404
        notification_service.mark_read.assert_called_once_with(5, user_id="user-1")


class TestUserRoutes:
    def test_permissions(self, app, client):
        login_as(app, role=UserRole.MODERATOR)

        response = client.get("/api/v1/users/me/permissions")

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "MODERATOR"
        assert Permission.VERIFY_EVIDENCE.value in data["permissions"]
        assert Permission.MANAGE_USERS.value not in data["permissions"]

    def test_unknown_preference_field_rejected(self, app, client):
        login_as(app)
        override_service(app, "preference_service")

        response = client.put("/api/v1/users/me/preferences", json={"fontSize": 12})

        assert response.status_code == 422


class TestRewardRoutes:
    def test_redeem(self, app, client):
        login_as(app)
        reward_service = override_service(app, "reward_service")
        reward_service.redeem_reward.return_value = RewardRedemptionResponse(
            id=7,
            reward_id=3,
            user_id="user-1",
            points_spent=60,
            status=RedemptionStatus.PENDING,
        )

        response = client.post(
            "/api/v1/rewards/3/redeem", json={"delivery_info": {"email": "a@example.com"}}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "PENDING"
        reward_service.redeem_reward.assert_called_once_with(
            "user-1", 3, {"email": "a@example.com"}
        )

    def test_civil_servant_cannot_redeem(self, app, client):
        login_as(app, role=UserRole.CIVIL_SERVANT)
        reward_service = override_service(app, "reward_service")

        response = client.post("/api/v1/rewards/3/redeem")

        assert response.status_code == 403
        reward_service.redeem_reward.assert_not_called()

    def test_catalog_is_public(self, app, client):
        reward_service = override_service(app, "reward_service")
        reward_service.list_rewards.return_value = RewardCatalogResponse(rewards=[], total_count=0)

        response = client.get("/api/v1/rewards")

        assert response.status_code == 200
        reward_service.list_rewards.assert_called_once_with(category=None, active_only=True)

    def test_inactive_rewards_require_manage_rewards(self, app, client):
        reward_service = override_service(app, "reward_service")

        response = client.get("/api/v1/rewards", params={"active_only": "false"})

        assert response.status_code == 403
        reward_service.list_rewards.assert_not_called()

    def test_admin_can_list_inactive_rewards(self, app, client):
        admin = CurrentUser(user_id="admin-1", role=UserRole.ADMIN)
        app.dependency_overrides[auth_middleware.get_current_user_optional] = lambda: admin
        reward_service = override_service(app, "reward_service")
        reward_service.list_rewards.return_value = RewardCatalogResponse(rewards=[], total_count=0)

        response = client.get("/api/v1/rewards", params={"active_only": "false"})

        assert response.status_code == 200
        reward_service.list_rewards.assert_called_once_with(category=None, active_only=False)
