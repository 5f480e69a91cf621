from abc import ABC
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type
from sqlalchemy import desc as sa_desc
from sqlalchemy.orm import Session
from pydantic import BaseModel

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """모든 리포지토리의 베이스 클래스 - Pydantic 응답 보장

    데이터 저장소 기능은 목록 조회(find_all), 생성(create), ID 기반 수정(update)
    세 가지로 한정됩니다. commit=False 로 호출하면 호출자의 트랜잭션에 포함됩니다.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        """SQLAlchemy 모델을 Pydantic 스키마로 변환"""
        if model_instance is None:
            return None
        return self.schema_class.model_validate(model_instance)

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        if filters:
            for key, value in filters.items():
                if hasattr(self.model_class, key):
                    query = query.filter(getattr(self.model_class, key) == value)
        return query

    def get_by_id(self, id: Any) -> Optional[SchemaType]:
        """ID로 조회 - Pydantic 스키마 반환"""
        model_instance = (
            self.db.query(self.model_class)
            .filter(getattr(self.model_class, "id") == id)
            .first()
        )
        return self._to_schema(model_instance)

    def get_by_field(self, field_name: str, value: Any) -> Optional[SchemaType]:
        """특정 필드로 조회 - Pydantic 스키마 반환"""
        model_instance = (
            self.db.query(self.model_class)
            .filter(getattr(self.model_class, field_name) == value)
            .first()
        )
        return self._to_schema(model_instance)

    def find_all(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[SchemaType]:
        """조건에 맞는 모든 레코드 조회 - Pydantic 스키마 리스트 반환

        정렬 기준이 주어지면 id 를 2차 정렬 키로 사용 (동일 타임스탬프 대비)
        """
        query = self._apply_filters(self.db.query(self.model_class), filters)

        if order_by and hasattr(self.model_class, order_by):
            columns = [getattr(self.model_class, order_by)]
            if order_by != "id" and hasattr(self.model_class, "id"):
                columns.append(getattr(self.model_class, "id"))
            if descending:
                columns = [sa_desc(c) for c in columns]
            query = query.order_by(*columns)

        if offset:
            query = query.offset(offset)

        if limit is not None:
            query = query.limit(limit)

        return [self._to_schema(instance) for instance in query.all()]

    def create(self, commit: bool = True, **kwargs) -> Optional[SchemaType]:
        """새 레코드 생성 - Pydantic 스키마 반환"""
        instance = self.model_class(**kwargs)
        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self._to_schema(instance)

    def update(
        self, instance_id: Any, commit: bool = True, **kwargs
    ) -> Optional[SchemaType]:
        """레코드 업데이트 - Pydantic 스키마 반환 (없으면 None)"""
        instance = (
            self.db.query(self.model_class)
            .filter(getattr(self.model_class, "id") == instance_id)
            .first()
        )

        if not instance:
            return None

        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self._to_schema(instance)

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """레코드 수 조회"""
        query = self._apply_filters(self.db.query(self.model_class), filters)
        return query.count()

    def exists(self, filters: Dict[str, Any]) -> bool:
        """레코드 존재 여부 확인"""
        query = self._apply_filters(self.db.query(self.model_class), filters)
        return query.first() is not None

    def commit(self) -> None:
        """호출자가 묶은 작업 단위 커밋"""
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        self.db.rollback()
