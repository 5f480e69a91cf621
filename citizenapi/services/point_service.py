from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from citizenapi.config import Settings, settings as default_settings
from citizenapi.core.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from citizenapi.models.points import TransactionType
from citizenapi.repositories.points_repository import PointsRepository
from citizenapi.schemas.points import (
    CitizenPointsResponse,
    PointsIntegrityCheckResponse,
    PointsTransactionResponse,
    PointTransactionEntry,
    PointTransactionListResponse,
)
from citizenapi.utils.locks import KeyedLock, user_locks
import logging

logger = logging.getLogger(__name__)


class PointService:
    """시민 포인트 원장 관련 비즈니스 로직을 담당하는 서비스

    잔액 변경(award/spend/refund)은 사용자별 락 + 원장 행 잠금 안에서
    원장 갱신과 거래 이력 추가를 하나의 커밋으로 처리합니다.
    """

    def __init__(
        self,
        db: Session,
        settings: Settings = default_settings,
        locks: Optional[KeyedLock] = None,
    ):
        self.db = db
        self.settings = settings
        self.locks = locks or user_locks
        self.points_repo = PointsRepository(db)

    def get_or_create_ledger(self, user_id: str) -> CitizenPointsResponse:
        """사용자 원장 조회, 없으면 초기 지급 포인트와 함께 생성

        Args:
            user_id: 인증 공급자의 사용자 ID

        Returns:
            CitizenPointsResponse: 사용자 원장
        """
        try:
            ledger = self.points_repo.get_by_user_id(user_id)
            if ledger:
                return ledger

            ledger, created = self.points_repo.create_with_grant(
                user_id=user_id,
                amount=self.settings.WELCOME_BONUS_POINTS,
                reason=self.settings.WELCOME_BONUS_REASON,
            )
            if created:
                logger.info(
                    f"Created ledger {ledger.id} for user {user_id} with {ledger.balance} points"
                )
            return ledger
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to get or create ledger for user {user_id}", e)

    def get_ledger(self, user_id: str) -> CitizenPointsResponse:
        """사용자 원장 조회 (없으면 NotFoundError)"""
        try:
            ledger = self.points_repo.get_by_user_id(user_id)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to get ledger for user {user_id}", e)

        if not ledger:
            raise NotFoundError(f"Citizen points record not found for user {user_id}")
        return ledger

    def award(
        self,
        user_id: str,
        amount: int,
        reason: str,
        reference_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        commit: bool = True,
    ) -> PointsTransactionResponse:
        """포인트 지급

        Raises:
            ValidationError: amount <= 0
            NotFoundError: 원장이 없는 경우 (get_or_create_ledger 선행 필요)
        """
        return self._transact(
            user_id, TransactionType.EARNED, amount, reason,
            reference_id, reference_type, commit,
        )

    def spend(
        self,
        user_id: str,
        amount: int,
        reason: str,
        reference_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        commit: bool = True,
    ) -> PointsTransactionResponse:
        """포인트 사용

        Raises:
            ValidationError: amount <= 0
            NotFoundError: 원장이 없는 경우
            InsufficientBalanceError: 잔액 부족 (원장 변경 없음)
        """
        return self._transact(
            user_id, TransactionType.SPENT, amount, reason,
            reference_id, reference_type, commit,
        )

    def refund(
        self,
        user_id: str,
        amount: int,
        reason: str,
        reference_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        commit: bool = True,
    ) -> PointsTransactionResponse:
        """포인트 환불 (리워드 교환 취소 등) - total_earned 로 적립"""
        return self._transact(
            user_id, TransactionType.REFUNDED, amount, reason,
            reference_id, reference_type, commit,
        )

    def _transact(
        self,
        user_id: str,
        tx_type: TransactionType,
        amount: int,
        reason: str,
        reference_id: Optional[str],
        reference_type: Optional[str],
        commit: bool,
    ) -> PointsTransactionResponse:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(
                "Amount must be a positive integer", details={"amount": amount}
            )

        with self.locks.hold(user_id):
            try:
                ledger = self.points_repo.lock_by_user_id(user_id)
                if ledger is None:
                    if commit:
                        self.db.rollback()
                    raise NotFoundError(
                        f"Citizen points record not found for user {user_id}"
                    )

                if tx_type == TransactionType.SPENT and ledger.balance < amount:
                    available = ledger.balance
                    if commit:
                        self.db.rollback()
                    raise InsufficientBalanceError(
                        f"Insufficient points. Required: {amount}, Available: {available}",
                        details={"required": amount, "available": available},
                    )

                updated, transaction = self.points_repo.apply_transaction(
                    ledger,
                    tx_type,
                    amount,
                    reason,
                    reference_id=reference_id,
                    reference_type=reference_type,
                    commit=commit,
                )
            except SQLAlchemyError as e:
                self._raise_store_error(
                    f"Failed to record {tx_type.value} of {amount} points for user {user_id}", e
                )

        logger.info(
            f"{tx_type.value} {amount} points for user {user_id} "
            f"(balance: {updated.balance}, reason: {reason})"
        )
        return PointsTransactionResponse(
            success=True,
            transaction=transaction,
            ledger=updated,
            message="Transaction completed successfully",
        )

    def list_recent_transactions(
        self, ledger_id: int, limit: Optional[int] = None
    ) -> List[PointTransactionEntry]:
        """원장의 최근 거래 내역 (created_at 내림차순, 최대 TRANSACTIONS_MAX_LIMIT 개)

        Raises:
            ValidationError: limit < 0
        """
        if limit is None:
            limit = self.settings.TRANSACTIONS_DEFAULT_LIMIT
        if limit < 0:
            raise ValidationError("Limit must not be negative", details={"limit": limit})
        if limit == 0:
            return []
        limit = min(limit, self.settings.TRANSACTIONS_MAX_LIMIT)

        try:
            return self.points_repo.list_transactions(ledger_id, limit=limit)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to list transactions for ledger {ledger_id}", e)

    def get_user_transactions(
        self, user_id: str, limit: Optional[int] = None
    ) -> PointTransactionListResponse:
        ledger = self.get_ledger(user_id)
        transactions = self.list_recent_transactions(ledger.id, limit=limit)
        return PointTransactionListResponse(
            balance=ledger.balance, transactions=transactions
        )

    def verify_integrity(self, user_id: str) -> PointsIntegrityCheckResponse:
        """원장 카운터와 거래 이력 합계 비교

        Returns:
            PointsIntegrityCheckResponse: OK 또는 MISMATCH
        """
        ledger = self.get_ledger(user_id)
        try:
            totals = self.points_repo.get_transaction_totals(ledger.id)
        except SQLAlchemyError as e:
            self._raise_store_error(f"Failed to verify integrity for user {user_id}", e)

        earned, earned_count = totals[TransactionType.EARNED]
        refunded, refunded_count = totals[TransactionType.REFUNDED]
        spent, spent_count = totals[TransactionType.SPENT]
        calculated_earned = earned + refunded
        calculated_balance = calculated_earned - spent

        consistent = (
            ledger.total_earned == calculated_earned
            and ledger.total_spent == spent
            and ledger.balance == calculated_balance
            and ledger.balance == ledger.total_earned - ledger.total_spent
        )
        status = "OK" if consistent else "MISMATCH"

        if consistent:
            logger.info(f"Points integrity verified for user {user_id}")
        else:
            logger.warning(
                f"Points integrity mismatch detected for user {user_id}: "
                f"recorded=({ledger.balance}, {ledger.total_earned}, {ledger.total_spent}) "
                f"calculated=({calculated_balance}, {calculated_earned}, {spent})"
            )

        return PointsIntegrityCheckResponse(
            status=status,
            user_id=user_id,
            recorded_balance=ledger.balance,
            recorded_total_earned=ledger.total_earned,
            recorded_total_spent=ledger.total_spent,
            calculated_total_earned=calculated_earned,
            calculated_total_spent=spent,
            calculated_balance=calculated_balance,
            transaction_count=earned_count + refunded_count + spent_count,
            verified_at=datetime.now(timezone.utc),
        )

    def _raise_store_error(self, message: str, error: Exception):
        self.db.rollback()
        logger.error(f"{message}: {str(error)}")
        raise StoreUnavailableError(message) from error
