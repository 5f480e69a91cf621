import pytest

from citizenapi.core.rbac import UserRole
from citizenapi.schemas.user import CurrentUser
from citizenapi.services.user_service import UserService


@pytest.fixture
def user_service(db_session, test_settings):
    return UserService(db_session, settings=test_settings)


@pytest.fixture
def identity():
    return CurrentUser(user_id="user-1", login_id="citizen@example.com", role=UserRole.CITIZEN)


class TestUserService:
    def test_get_user_data_before_initialization(self, user_service, identity):
        data = user_service.get_user_data(identity)

        assert data.user_id == "user-1"
        assert data.citizen_points is None
        assert data.preferences is None

    def test_initialize_creates_ledger_and_preferences(self, user_service, identity):
        data = user_service.initialize_user_data(identity)

        assert data.login_id == "citizen@example.com"
        assert data.role == UserRole.CITIZEN
        assert data.citizen_points.balance == 100
        assert data.preferences.schema_version == 2

    def test_initialize_is_idempotent(self, user_service, identity):
        first = user_service.initialize_user_data(identity)
        second = user_service.initialize_user_data(identity)

        assert first.citizen_points.id == second.citizen_points.id
        assert second.citizen_points.balance == 100
        assert user_service.get_user_data(identity).citizen_points.total_earned == 100
