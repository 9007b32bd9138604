import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from eduwallet.config import Settings
from eduwallet.core.exceptions import ValidationError, WalletDecodeError
from eduwallet.providers.identity import SessionIdentityProvider
from eduwallet.repositories.wallet_repository import WalletRepository
from eduwallet.schemas.wallet import (
    Transaction,
    TransactionResult,
    TransactionType,
    WalletIntegrityReport,
    WalletLedgerResponse,
    WalletRecord,
    WalletSnapshot,
    WalletState,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_transaction_id(now: datetime) -> str:
    """tx_<epoch ms>_<random suffix>; unique within a session, not cryptographically"""
    return f"tx_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:10]}"


class WalletStore:
    """현재 사용자의 EduCoins 지갑을 관리하는 스토어

    상태 전이: NO_IDENTITY -> LOADING(U) -> READY(U)
    - earned 는 계정 생성 시 고정값으로 한 번만 설정된다
    - spent 는 spend 거래 금액의 누적 합계로만 증가한다
    - balance 는 저장하지 않고 항상 earned - spent 로 계산한다
    - 모든 변경 후 전체 스냅샷을 저장소에 덮어쓴다
    """

    def __init__(
        self,
        repository: WalletRepository,
        identity_provider: SessionIdentityProvider,
        settings: Settings,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.identity_provider = identity_provider
        self.fixed_earned = settings.WALLET_FIXED_EARNED
        self.strict_amounts = settings.WALLET_STRICT_AMOUNTS
        self._clock = clock

        self.state = WalletState.NO_IDENTITY
        self.user_id: Optional[str] = None
        self._earned = 0
        self._spent = 0
        self._transactions: List[Transaction] = []

        self._unsubscribe = identity_provider.subscribe(self.on_identity_change)
        self.on_identity_change(identity_provider.current_user_id)

    @property
    def earned(self) -> int:
        return self._earned

    @property
    def spent(self) -> int:
        return self._spent

    @property
    def balance(self) -> int:
        return self._earned - self._spent

    @property
    def transactions(self) -> List[Transaction]:
        return list(self._transactions)

    def get_snapshot(self) -> WalletSnapshot:
        """현재 지갑 상태 조회 (부수 효과 없음)"""
        return WalletSnapshot(
            user_id=self.user_id,
            state=self.state,
            earned=self._earned,
            spent=self._spent,
            balance=self.balance,
            transactions=list(self._transactions),
        )

    def list_transactions(self, limit: int = 50, offset: int = 0) -> WalletLedgerResponse:
        """거래 내역 페이지 조회 (최신순)

        Args:
            limit: 페이지 크기 (최대 100)
            offset: 오프셋
        """
        if limit > 100:
            limit = 100
        entries = self._transactions[offset : offset + limit]
        total_count = len(self._transactions)
        return WalletLedgerResponse(
            balance=self.balance,
            entries=entries,
            total_count=total_count,
            has_next=offset + len(entries) < total_count,
        )

    def on_identity_change(self, user_id: Optional[str]) -> None:
        """사용자 변경 처리 - 초기화 후 저장된 지갑 로드"""
        if user_id == self.user_id and self.state != WalletState.LOADING:
            return

        if user_id is None:
            self.user_id = None
            self.state = WalletState.NO_IDENTITY
            self._reset(earned=0)
            logger.info("Wallet cleared: no active identity")
            return

        self.user_id = user_id
        self.state = WalletState.LOADING
        self._reset(earned=self.fixed_earned)

        corrupted = False
        try:
            record = self.repository.load(user_id)
            if record is not None:
                self._apply(record)
                logger.info(
                    f"Loaded wallet for user {user_id}: balance {self.balance}, "
                    f"{len(self._transactions)} transaction(s)"
                )
            else:
                logger.info(f"Initialized new wallet for user {user_id}")
        except WalletDecodeError as e:
            corrupted = True
            logger.error(f"Error loading wallet for user {user_id}: {e}")

        self.state = WalletState.READY
        if not corrupted:
            self._persist()

    def refresh(self) -> bool:
        """저장소에서 현재 사용자 지갑 다시 읽기

        Returns:
            bool: 메모리 상태를 교체했는지 여부
        """
        if self.user_id is None:
            return False

        try:
            record = self.repository.load(self.user_id)
        except WalletDecodeError as e:
            logger.error(f"Error refreshing wallet for user {self.user_id}: {e}")
            return False

        if record is None:
            logger.warning(f"No persisted wallet for user {self.user_id}, keeping current state")
            return False

        self._apply(record)
        logger.info(f"Refreshed wallet for user {self.user_id}: balance {self.balance}")
        return True

    def close(self) -> None:
        self._unsubscribe()

    def record_transaction(
        self, amount: int, kind: TransactionType, description: str
    ) -> TransactionResult:
        """거래 기록

        Args:
            amount: 코인 금액
            kind: earn | spend (spend 인 경우만 spent 증가)
            description: 거래 설명

        Returns:
            TransactionResult: 저장 실패 시 persisted=False, error_code=STORAGE_WRITE_FAILED

        Raises:
            ValidationError: 유효하지 않은 금액 또는 거래 방향
        """
        if self.user_id is None or self.state != WalletState.READY:
            logger.warning("Ignored transaction: no active wallet")
            return TransactionResult(
                success=False,
                error_code="NO_IDENTITY",
                message="No active wallet",
            )

        self._validate_amount(amount)
        try:
            kind = TransactionType(kind)
        except ValueError:
            raise ValidationError(
                "type must be 'earn' or 'spend'", details={"type": repr(kind)}
            )

        now = self._clock()
        transaction = Transaction(
            id=generate_transaction_id(now),
            amount=amount,
            type=kind,
            description=description,
            timestamp=now,
        )
        self._transactions.insert(0, transaction)
        if kind == TransactionType.SPEND:
            self._spent += amount

        logger.info(
            f"Recorded {kind.value} of {amount} for user {self.user_id}: {description!r}"
        )

        persisted = self._persist()
        return TransactionResult(
            success=True,
            transaction=transaction,
            balance_after=self.balance,
            persisted=persisted,
            error_code=None if persisted else "STORAGE_WRITE_FAILED",
            message="Transaction recorded" if persisted else "Transaction recorded but not saved",
        )

    def update_spent(self, amount: int, description: str = "Spent") -> TransactionResult:
        """코인 사용 - spend 거래로 기록하여 spent 와 거래 내역을 일치시킨다"""
        return self.record_transaction(amount, TransactionType.SPEND, description)

    def verify_integrity(self) -> WalletIntegrityReport:
        """거래 내역으로 계산한 spent 와 추적 중인 spent 비교"""
        if self.user_id is None:
            return WalletIntegrityReport(status="NO_IDENTITY", verified_at=self._clock())

        calculated = self._sum_spent(self._transactions)
        return WalletIntegrityReport(
            status="OK" if calculated == self._spent else "MISMATCH",
            user_id=self.user_id,
            recorded_spent=self._spent,
            calculated_spent=calculated,
            transaction_count=len(self._transactions),
            verified_at=self._clock(),
        )

    @staticmethod
    def _sum_spent(transactions: List[Transaction]) -> int:
        return sum(t.amount for t in transactions if t.type == TransactionType.SPEND)

    def _validate_amount(self, amount) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError(
                "amount must be an integer", details={"amount": repr(amount)}
            )
        if self.strict_amounts and amount <= 0:
            raise ValidationError(
                "amount must be positive", details={"amount": amount}
            )

    def _reset(self, earned: int) -> None:
        self._earned = earned
        self._spent = 0
        self._transactions = []

    def _apply(self, record: WalletRecord) -> None:
        self._earned = record.earned or self.fixed_earned
        self._spent = record.spent or 0
        self._transactions = list(record.transactions or [])

        calculated = self._sum_spent(self._transactions)
        if calculated != self._spent:
            logger.warning(
                f"Wallet for user {self.user_id} has spent={self._spent} "
                f"but spend history sums to {calculated}"
            )

    def _to_record(self) -> WalletRecord:
        return WalletRecord(
            earned=self._earned,
            spent=self._spent,
            transactions=list(self._transactions),
        )

    def _persist(self) -> bool:
        if self.user_id is None:
            return False
        return self.repository.save(self.user_id, self._to_record())
