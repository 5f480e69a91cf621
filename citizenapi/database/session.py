"""
DB 세션 수명 관리

- get_db: 요청 단위 세션 (FastAPI 의존성). 요청이 끝나면 닫히고,
  처리 중 예외가 나면 열린 트랜잭션을 롤백합니다.
- get_db_context: 스크립트/배치용 작업 단위. 정상 종료 시 커밋합니다.

서비스는 세션을 생성하지 않고 주입받기만 하므로, FOR UPDATE 잠금과
롤백 범위는 항상 하나의 요청(또는 작업 단위)으로 한정됩니다.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from citizenapi.database.connection import SessionLocal
import logging

logger = logging.getLogger(__name__)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            logger.warning("Rolling back request session after error")
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
