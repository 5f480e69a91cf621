from unittest.mock import Mock, patch

import pytest

from citizenapi.database import session as session_module


@pytest.fixture
def session_factory():
    with patch.object(session_module, "SessionLocal") as factory:
        factory.side_effect = lambda: Mock()
        yield factory


class TestGetDb:
    """요청 단위 세션 테스트"""

    def test_new_session_per_call_and_closed_after_request(self, session_factory):
        first_gen = session_module.get_db()
        second_gen = session_module.get_db()
        first = next(first_gen)
        second = next(second_gen)

        assert first is not second

        first_gen.close()
        second_gen.close()
        first.close.assert_called_once()
        second.close.assert_called_once()

    def test_error_rolls_back_open_transaction(self, session_factory):
        gen = session_module.get_db()
        db = next(gen)
        db.in_transaction.return_value = True

        with pytest.raises(RuntimeError):
            gen.throw(RuntimeError("handler failed"))

        db.rollback.assert_called_once()
        db.close.assert_called_once()


class TestGetDbContext:
    def test_commits_on_success(self, session_factory):
        with session_module.get_db_context() as db:
            pass

        db.commit.assert_called_once()
        db.close.assert_called_once()

    def test_rolls_back_on_error(self, session_factory):
        with pytest.raises(ValueError):
            with session_module.get_db_context() as db:
                raise ValueError("bad seed row")

        db.rollback.assert_called_once()
        db.commit.assert_not_called()
        db.close.assert_called_once()
