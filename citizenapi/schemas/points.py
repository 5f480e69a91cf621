from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from citizenapi.models.points import TransactionType


class CitizenPointsResponse(BaseModel):
    """사용자 포인트 원장"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    balance: int = Field(..., ge=0, description="사용 가능 포인트")
    total_earned: int = Field(..., ge=0, description="누적 획득 포인트")
    total_spent: int = Field(..., ge=0, description="누적 사용 포인트")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PointTransactionEntry(BaseModel):
    """포인트 거래 내역 항목"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    citizen_points_id: int
    type: TransactionType
    amount: int
    reason: str
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    created_at: Optional[datetime] = None


class PointTransactionListResponse(BaseModel):
    balance: int
    transactions: List[PointTransactionEntry]


class PointsTransactionRequest(BaseModel):
    """포인트 지급/사용 요청

    amount 의 양수 검증은 서비스에서 수행 (ValidationError)
    """

    amount: int = Field(..., description="포인트 (양수)")
    reason: str = Field(..., min_length=1, max_length=500, description="사유")
    reference_id: Optional[str] = Field(None, max_length=128)
    reference_type: Optional[str] = Field(None, max_length=64)


class PointsTransactionResponse(BaseModel):
    """포인트 거래 처리 결과"""

    success: bool
    transaction: PointTransactionEntry
    ledger: CitizenPointsResponse
    message: str


class PointsIntegrityCheckResponse(BaseModel):
    """원장 카운터와 거래 이력 fold 결과 비교"""

    status: str = Field(..., description="OK | MISMATCH")
    user_id: str
    recorded_balance: int
    recorded_total_earned: int
    recorded_total_spent: int
    calculated_total_earned: int
    calculated_total_spent: int
    calculated_balance: int
    transaction_count: int
    verified_at: datetime
