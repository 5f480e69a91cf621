"""
포인트 리포지토리 - 원장/거래 이력 데이터 접근

핵심 특징:
- 사용자당 원장은 하나 (user_id 유니크 제약 + IntegrityError 시 재조회)
- 원장 카운터 갱신과 거래 이력 추가는 같은 트랜잭션에서 처리
- 잔액 변경 전 원장 행을 FOR UPDATE 로 잠금
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from citizenapi.models.points import CitizenPoints, PointTransaction, TransactionType
from citizenapi.repositories.base import BaseRepository
from citizenapi.schemas.points import CitizenPointsResponse, PointTransactionEntry


class PointsRepository(BaseRepository[CitizenPoints, CitizenPointsResponse]):
    def __init__(self, db: Session):
        super().__init__(CitizenPoints, CitizenPointsResponse, db)

    def get_by_user_id(self, user_id: str) -> Optional[CitizenPointsResponse]:
        return self.get_by_field("user_id", user_id)

    def lock_by_user_id(self, user_id: str) -> Optional[CitizenPoints]:
        """원장 행 잠금 조회 (트랜잭션 종료 시까지 유지)"""
        return (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .with_for_update()
            .first()
        )

    def create_with_grant(
        self, user_id: str, amount: int, reason: str, reference_type: str = "system"
    ) -> Tuple[CitizenPointsResponse, bool]:
        """
        초기 지급 포인트와 함께 원장 생성 (insert-if-absent)

        Returns:
            (원장, 새로 생성 여부)

        동시에 두 요청이 생성을 시도하면 유니크 제약에 걸린 쪽은
        롤백 후 먼저 생성된 원장을 반환합니다.
        """
        try:
            ledger = self.model_class(
                user_id=user_id,
                balance=amount,
                total_earned=amount,
                total_spent=0,
            )
            self.db.add(ledger)
            self.db.flush()

            welcome = PointTransaction(
                citizen_points_id=ledger.id,
                type=TransactionType.EARNED,
                amount=amount,
                reason=reason,
                reference_type=reference_type,
            )
            self.db.add(welcome)
            self.db.flush()
            self.db.refresh(ledger)
            self.db.commit()
            return self._to_schema(ledger), True
        except IntegrityError:
            self.db.rollback()
            existing = self.get_by_user_id(user_id)
            if existing is None:
                raise
            return existing, False

    def apply_transaction(
        self,
        ledger: CitizenPoints,
        tx_type: TransactionType,
        amount: int,
        reason: str,
        reference_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        commit: bool = True,
    ) -> Tuple[CitizenPointsResponse, PointTransactionEntry]:
        """
        잠긴 원장에 거래 반영 + 거래 이력 추가

        잔액 검증은 호출자(서비스)가 수행합니다.
        - EARNED / REFUNDED: balance, total_earned 증가
        - SPENT: balance 감소, total_spent 증가
        """
        if tx_type == TransactionType.SPENT:
            ledger.balance = ledger.balance - amount
            ledger.total_spent = ledger.total_spent + amount
        else:
            ledger.balance = ledger.balance + amount
            ledger.total_earned = ledger.total_earned + amount

        transaction = PointTransaction(
            citizen_points_id=ledger.id,
            type=tx_type,
            amount=amount,
            reason=reason,
            reference_id=reference_id,
            reference_type=reference_type,
        )
        self.db.add(ledger)
        self.db.add(transaction)
        try:
            self.db.flush()
            self.db.refresh(ledger)
            self.db.refresh(transaction)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return (
            self._to_schema(ledger),
            PointTransactionEntry.model_validate(transaction),
        )

    def list_transactions(
        self, ledger_id: int, limit: int = 20
    ) -> List[PointTransactionEntry]:
        """최근 거래 내역 (최신순)"""
        rows = (
            self.db.query(PointTransaction)
            .filter(PointTransaction.citizen_points_id == ledger_id)
            .order_by(desc(PointTransaction.created_at), desc(PointTransaction.id))
            .limit(limit)
            .all()
        )
        return [PointTransactionEntry.model_validate(row) for row in rows]

    def get_transaction_totals(self, ledger_id: int) -> Dict[TransactionType, Tuple[int, int]]:
        """거래 유형별 (합계, 건수)"""
        rows = (
            self.db.query(
                PointTransaction.type,
                func.coalesce(func.sum(PointTransaction.amount), 0),
                func.count(PointTransaction.id),
            )
            .filter(PointTransaction.citizen_points_id == ledger_id)
            .group_by(PointTransaction.type)
            .all()
        )
        totals = {tx_type: (0, 0) for tx_type in TransactionType}
        for tx_type, amount_sum, tx_count in rows:
            totals[TransactionType(tx_type)] = (int(amount_sum), int(tx_count))
        return totals
