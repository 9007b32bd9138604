from pydantic import BaseModel, Field, StrictInt
from typing import List, Optional
from datetime import datetime
from enum import Enum


class TransactionType(str, Enum):
    """거래 방향"""

    EARN = "earn"
    SPEND = "spend"


class WalletState(str, Enum):
    """지갑 스토어 상태"""

    NO_IDENTITY = "NO_IDENTITY"
    LOADING = "LOADING"
    READY = "READY"


class Transaction(BaseModel):
    """지갑 거래 항목 (생성 후 변경 불가)"""

    id: str = Field(..., description="거래 ID (tx_<epoch ms>_<suffix>)")
    amount: int = Field(..., description="거래 금액")
    type: TransactionType = Field(..., description="거래 방향 (earn | spend)")
    description: str = Field("", description="거래 설명")
    timestamp: datetime = Field(..., description="생성 시각 (UTC)")

    class Config:
        frozen = True
        from_attributes = True


class WalletRecord(BaseModel):
    """저장소에 직렬화되는 지갑 스냅샷

    balance는 저장하지 않는다. 누락되거나 null인 값은 로드 시 기본값으로 대체된다.
    """

    earned: Optional[int] = Field(None, description="획득 코인 (고정값)")
    spent: Optional[int] = Field(None, description="누적 사용 코인")
    transactions: Optional[List[Transaction]] = Field(
        None, description="거래 내역 (최신순)"
    )

    class Config:
        from_attributes = True


class WalletSnapshot(BaseModel):
    """지갑 조회 응답"""

    user_id: Optional[str] = Field(None, description="현재 사용자 ID")
    state: WalletState = Field(..., description="스토어 상태")
    earned: int = Field(..., description="획득 코인")
    spent: int = Field(..., description="사용 코인")
    balance: int = Field(..., description="잔액 (earned - spent)")
    transactions: List[Transaction] = Field(..., description="거래 내역 (최신순)")

    class Config:
        from_attributes = True


class WalletLedgerResponse(BaseModel):
    """거래 내역 페이지 응답"""

    balance: int = Field(..., description="현재 잔액")
    entries: List[Transaction] = Field(..., description="거래 항목 목록")
    total_count: int = Field(..., description="전체 항목 수")
    has_next: bool = Field(..., description="다음 페이지 존재 여부")

    class Config:
        from_attributes = True


class TransactionCreateRequest(BaseModel):
    """거래 기록 요청"""

    amount: StrictInt = Field(..., description="코인 금액")
    type: TransactionType = Field(..., description="거래 방향")
    description: str = Field(..., max_length=255, description="거래 설명")


class SpendRequest(BaseModel):
    """코인 사용 요청"""

    amount: StrictInt = Field(..., description="사용할 코인 금액")
    description: str = Field("Spent", max_length=255, description="사용 사유")


class TransactionResult(BaseModel):
    """거래 처리 결과

    persisted=False이면 메모리 상태는 반영되었지만 저장소 기록에 실패한 것이다.
    """

    success: bool = Field(..., description="거래 반영 여부")
    transaction: Optional[Transaction] = Field(None, description="생성된 거래")
    balance_after: Optional[int] = Field(None, description="거래 후 잔액")
    persisted: bool = Field(False, description="저장소 기록 성공 여부")
    error_code: Optional[str] = Field(None, description="오류 코드")
    message: str = Field("", description="응답 메시지")


class WalletIntegrityReport(BaseModel):
    """지갑 정합성 검증 결과"""

    status: str = Field(..., description="검증 상태 (OK, MISMATCH, NO_IDENTITY)")
    user_id: Optional[str] = Field(None, description="사용자 ID")
    recorded_spent: int = Field(0, description="추적 중인 사용 코인")
    calculated_spent: int = Field(0, description="거래 내역으로 계산한 사용 코인")
    transaction_count: int = Field(0, description="거래 건수")
    verified_at: datetime = Field(..., description="검증 시각")
