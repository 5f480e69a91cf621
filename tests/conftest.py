import os
import sys

# 앱 모듈 임포트 전에 테스트용 DB 설정
os.environ["DATABASE_URL"] = "sqlite://"

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from citizenapi.config import Settings
from citizenapi.models import Base
from citizenapi.utils.locks import KeyedLock


@pytest.fixture
def engine():
    """테스트마다 새 인메모리 sqlite"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_settings():
    return Settings(DATABASE_URL="sqlite://", WELCOME_BONUS_POINTS=100)


@pytest.fixture
def locks():
    return KeyedLock()
