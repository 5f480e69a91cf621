import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text

# 메타데이터 등록을 위해 모델 패키지 임포트
from citizenapi.models import Base
from citizenapi.database.connection import engine
from citizenapi.config import settings


def init_db():
    """데이터베이스 초기화"""
    try:
        if engine.dialect.name == "postgresql":
            # 스키마 생성
            with engine.connect() as conn:
                conn.execute(
                    text(f"CREATE SCHEMA IF NOT EXISTS {settings.POSTGRES_SCHEMA}")
                )
                conn.commit()

        # 테이블 생성
        Base.metadata.create_all(bind=engine)
        print(f"Database initialized successfully: {engine.url.render_as_string()}")

    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    init_db()
